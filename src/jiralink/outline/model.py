"""Outline block model and the host document protocol."""

from __future__ import annotations

import uuid as uuid_module
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterator, Mapping, Protocol, Sequence

CommandHandler = Callable[[], Awaitable[object]]


@dataclass(slots=True)
class Block:
    """A node of text in the host outline, with its ordered children."""

    uuid: str = field(default_factory=lambda: str(uuid_module.uuid4()))
    content: str = ""
    children: list["Block"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Block":
        raw_children = payload.get("children") or ()
        children = [cls.from_dict(child) for child in raw_children if isinstance(child, Mapping)]
        block_id = payload.get("uuid") or str(uuid_module.uuid4())
        return cls(uuid=str(block_id), content=str(payload.get("content") or ""), children=children)

    def to_dict(self) -> dict[str, Any]:
        return {
            "uuid": self.uuid,
            "content": self.content,
            "children": [child.to_dict() for child in self.children],
        }

    def walk(self) -> Iterator["Block"]:
        """Yield this block and its descendants in pre-order."""

        yield self
        for child in self.children:
            yield from child.walk()


class OutlineHost(Protocol):
    """Async surface of the outline editor consumed by the plugin.

    Every read may return ``None`` for "no such block" or "nothing selected";
    callers treat that as an empty result rather than an error.
    """

    async def get_current_block(self) -> Block | None:
        ...

    async def get_block(self, block_uuid: str, *, include_children: bool = False) -> Block | None:
        ...

    async def get_current_page_blocks_tree(self) -> Sequence[Block] | None:
        ...

    async def get_selected_blocks(self) -> Sequence[Block] | None:
        ...

    async def update_block(self, block_uuid: str, content: str) -> None:
        ...

    async def show_message(self, message: str, status: str = "success") -> None:
        ...

    def register_slash_command(self, label: str, handler: CommandHandler) -> None:
        ...

    def register_command(
        self,
        key: str,
        *,
        label: str,
        description: str,
        keybinding: str | None,
        handler: CommandHandler,
    ) -> None:
        ...
