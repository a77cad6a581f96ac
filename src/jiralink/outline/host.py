"""Outline hosts backed by in-memory trees and JSON files."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Sequence

from .model import Block, CommandHandler

__all__ = ["MemoryOutlineHost", "JsonOutlineHost", "RegisteredCommand", "HostMessage"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RegisteredCommand:
    """A command the plugin registered with the host."""

    key: str
    label: str
    handler: CommandHandler
    description: str = ""
    keybinding: str | None = None
    slash: bool = False


@dataclass(slots=True)
class HostMessage:
    message: str
    status: str


@dataclass
class MemoryOutlineHost:
    """Outline host holding a single page in memory.

    Reads hand out copies so callers only observe changes made through
    :meth:`update_block`, the same way a real editor API behaves.
    """

    blocks: list[Block] = field(default_factory=list)
    selected: list[str] = field(default_factory=list)
    current: str | None = None
    messages: list[HostMessage] = field(default_factory=list)
    commands: dict[str, RegisteredCommand] = field(default_factory=dict)
    update_log: list[tuple[str, str]] = field(default_factory=list)

    async def get_current_block(self) -> Block | None:
        if self.current is None:
            return None
        return self._copy(self._find(self.current), include_children=False)

    async def get_block(self, block_uuid: str, *, include_children: bool = False) -> Block | None:
        return self._copy(self._find(block_uuid), include_children=include_children)

    async def get_current_page_blocks_tree(self) -> Sequence[Block] | None:
        if not self.blocks:
            return None
        return copy.deepcopy(self.blocks)

    async def get_selected_blocks(self) -> Sequence[Block] | None:
        if not self.selected:
            return None
        found = [self._find(block_uuid) for block_uuid in self.selected]
        return [self._copy(block, include_children=False) for block in found if block is not None]

    async def update_block(self, block_uuid: str, content: str) -> None:
        block = self._find(block_uuid)
        if block is None:
            raise KeyError(f"Unknown block {block_uuid}")
        block.content = content
        self.update_log.append((block_uuid, content))

    async def show_message(self, message: str, status: str = "success") -> None:
        LOGGER.info("[%s] %s", status, message)
        self.messages.append(HostMessage(message=message, status=status))

    def register_slash_command(self, label: str, handler: CommandHandler) -> None:
        self.commands[label] = RegisteredCommand(key=label, label=label, handler=handler, slash=True)

    def register_command(
        self,
        key: str,
        *,
        label: str,
        description: str,
        keybinding: str | None,
        handler: CommandHandler,
    ) -> None:
        self.commands[key] = RegisteredCommand(
            key=key,
            label=label,
            handler=handler,
            description=description,
            keybinding=keybinding,
        )

    async def run_command(self, name: str) -> object:
        """Invoke a registered command by key or slash label and return its result."""

        command = self.commands.get(name)
        if command is None:
            raise KeyError(f"No command registered as {name!r}")
        return await command.handler()

    def find(self, block_uuid: str) -> Block | None:
        return self._find(block_uuid)

    def _find(self, block_uuid: str) -> Block | None:
        for root in self.blocks:
            for block in root.walk():
                if block.uuid == block_uuid:
                    return block
        return None

    @staticmethod
    def _copy(block: Block | None, *, include_children: bool) -> Block | None:
        if block is None:
            return None
        if include_children:
            return copy.deepcopy(block)
        return Block(uuid=block.uuid, content=block.content)


class JsonOutlineHost(MemoryOutlineHost):
    """Outline host that loads a page from JSON and writes every update back.

    The file holds ``{"blocks": [...], "selected": [...], "current": "<uuid>"}``
    where each block is ``{"uuid", "content", "children"}``.
    """

    def __init__(self, path: Path, *, blocks: Iterable[Block] = (), selected: Iterable[str] = (), current: str | None = None) -> None:
        super().__init__(blocks=list(blocks), selected=list(selected), current=current)
        self.path = path

    @classmethod
    def load(cls, path: Path | str) -> "JsonOutlineHost":
        target = Path(path).expanduser()
        payload: Any = json.loads(target.read_text(encoding="utf-8"))
        if isinstance(payload, list):
            payload = {"blocks": payload}
        if not isinstance(payload, dict):
            raise ValueError(f"Outline file {target} must contain an object or a list of blocks")
        blocks = [Block.from_dict(item) for item in payload.get("blocks") or () if isinstance(item, dict)]
        selected = [str(item) for item in payload.get("selected") or ()]
        current = payload.get("current")
        LOGGER.debug("Loaded outline %s with %d root block(s)", target, len(blocks))
        return cls(target, blocks=blocks, selected=selected, current=str(current) if current else None)

    def select(self, block_uuids: Sequence[str], *, current: str | None = None) -> None:
        self.selected = list(block_uuids)
        if current is not None:
            self.current = current

    def save(self) -> Path:
        payload = {
            "blocks": [block.to_dict() for block in self.blocks],
            "selected": list(self.selected),
            "current": self.current,
        }
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)
        return self.path

    async def update_block(self, block_uuid: str, content: str) -> None:
        await super().update_block(block_uuid, content)
        self.save()
