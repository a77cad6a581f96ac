"""Collect the blocks that carry Jira references."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..outline.model import Block, OutlineHost
from .references import ReferenceScanner

__all__ = ["BlockReferences", "BlockCollector", "flatten_keys"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BlockReferences:
    """A block, the normalized text it was scanned from, and its keys in order."""

    block: Block
    text: str
    keys: list[str]

    @property
    def uuid(self) -> str:
        return self.block.uuid


def flatten_keys(references: Iterable[BlockReferences]) -> list[str]:
    return [key for entry in references for key in entry.keys]


class BlockCollector:
    """Builds the ordered list of referencing blocks for a page or a selection."""

    def __init__(self, scanner: ReferenceScanner) -> None:
        self._scanner = scanner

    def collect_block(self, block: Block | None) -> BlockReferences | None:
        if block is None or not block.content:
            return None
        scan = self._scanner.scan(block.content)
        if not scan:
            return None
        return BlockReferences(block=block, text=scan.text, keys=scan.keys)

    def collect_tree(self, blocks: Sequence[Block] | None) -> list[BlockReferences]:
        """Depth-first pre-order walk: each parent is collected before its children."""

        collected: list[BlockReferences] = []
        for block in blocks or ():
            entry = self.collect_block(block)
            if entry is not None:
                collected.append(entry)
            collected.extend(self.collect_tree(block.children))
        return collected

    def collect_flat(self, blocks: Sequence[Block] | None) -> list[BlockReferences]:
        entries = (self.collect_block(block) for block in blocks or ())
        return [entry for entry in entries if entry is not None]

    async def collect_page(self, host: OutlineHost) -> list[BlockReferences]:
        roots = await host.get_current_page_blocks_tree()
        if not roots:
            LOGGER.debug("No page blocks available; nothing to collect")
            return []
        return self.collect_tree(roots)

    async def collect_selection(self, host: OutlineHost) -> list[BlockReferences]:
        """Collect the selected blocks, or the focused block when nothing is selected.

        Children of selected blocks are not visited.
        """

        selection = list(await host.get_selected_blocks() or ())
        if not selection:
            current = await host.get_current_block()
            if current is not None:
                selection = [current]
        return self.collect_flat(selection)
