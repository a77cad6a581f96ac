"""Rewrite reference tokens with fresh status annotations."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping, Sequence

from ..outline.model import OutlineHost
from .collector import BlockReferences
from .fetcher import qualify
from .models import IssueRecord
from .references import format_token, replace_tokens

__all__ = [
    "CORE_MARKER",
    "NOT_FOUND",
    "UNASSIGNED",
    "ReconcileResult",
    "Reconciler",
    "make_tag",
    "render_annotation",
    "render_replacement",
]

LOGGER = logging.getLogger(__name__)

NOT_FOUND = "jira not found"
UNASSIGNED = "#unassigned"
CORE_MARKER = "⭐"


def make_tag(text: str) -> str:
    return "#" + text.replace(" ", "-") if text else text


def _time_suffix(now: datetime | None) -> str:
    if now is None:
        return ""
    return " " + now.strftime("%H:%M:%S")


def render_annotation(record: IssueRecord | None, *, now: datetime | None = None) -> str:
    """Annotation text for one reference.

    ``now`` is the refresh time to append, or ``None`` when timestamps are
    disabled. The suffix is appended to the not-found marker as well.
    """

    if record is None:
        return NOT_FOUND + _time_suffix(now)
    parts: list[str] = []
    if record.versions is None:
        parts.append(UNASSIGNED)
    else:
        parts.append(" ".join(make_tag(name) for name in record.versions))
    parts.append(record.status)
    if record.is_core:
        parts.append(CORE_MARKER)
    return " ".join(parts) + _time_suffix(now)


def render_replacement(key: str, record: IssueRecord | None, *, now: datetime | None = None) -> str:
    return f"{format_token(key)}({render_annotation(record, now=now)})"


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of a reconciliation pass."""

    count: int = 0
    updated: dict[str, str] = field(default_factory=dict)

    @property
    def block_count(self) -> int:
        return len(self.updated)


class Reconciler:
    """Applies a lookup table to collected blocks and writes them back to the host."""

    def __init__(
        self,
        host: OutlineHost,
        *,
        project: str = "DEV",
        show_time: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._host = host
        self._project = project
        self._show_time = show_time
        self._clock = clock

    def rewrite(self, entry: BlockReferences, table: Mapping[str, IssueRecord]) -> tuple[str, int]:
        """Return the entry's rewritten text and the number of tokens replaced.

        Every occurrence gets its own lookup, so a key repeated in one block is
        annotated at each position.
        """

        replacements = [
            render_replacement(key, table.get(qualify(self._project, key)), now=self._now())
            for key in entry.keys
        ]
        text, replaced = replace_tokens(entry.text, replacements)
        if replaced != len(replacements):
            LOGGER.warning(
                "Block %s: prepared %d replacement(s) but rewrote %d token(s)",
                entry.uuid,
                len(replacements),
                replaced,
            )
        return text, replaced

    async def reconcile(
        self,
        references: Sequence[BlockReferences],
        table: Mapping[str, IssueRecord],
    ) -> ReconcileResult:
        result = ReconcileResult()
        for entry in references:
            text, replaced = self.rewrite(entry, table)
            result.count += replaced
            result.updated[entry.uuid] = text
        if result.updated:
            await asyncio.gather(
                *(self._host.update_block(uuid, text) for uuid, text in result.updated.items())
            )
        LOGGER.debug("Rewrote %d token(s) across %d block(s)", result.count, result.block_count)
        return result

    def _now(self) -> datetime | None:
        return self._clock() if self._show_time else None
