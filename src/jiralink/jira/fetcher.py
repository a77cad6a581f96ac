"""Batched, concurrent issue lookups."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Protocol, Sequence

from ..services import telemetry
from .errors import TrackerRequestError
from .models import IssueLookupTable

__all__ = ["BatchFetcher", "IssueSearcher", "chunk_keys", "qualify"]

LOGGER = logging.getLogger(__name__)
DEFAULT_PAGE_SIZE = 50


class IssueSearcher(Protocol):
    async def search_issues(self, keys: Sequence[str]) -> list[dict[str, Any]]:
        ...


def qualify(project: str, key: str) -> str:
    """Full issue key for a reference number: ``qualify("DEV", "42") == "DEV-42"``."""

    return f"{project}-{key}"


def chunk_keys(keys: Sequence[str], size: int = DEFAULT_PAGE_SIZE) -> list[list[str]]:
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [list(keys[start : start + size]) for start in range(0, len(keys), size)]


class BatchFetcher:
    """Looks up every referenced issue in chunks that are all in flight at once.

    A chunk the tracker rejects contributes no records; the remaining chunks
    still populate the lookup table.
    """

    def __init__(
        self,
        searcher: IssueSearcher,
        *,
        project: str = "DEV",
        page_size: int = DEFAULT_PAGE_SIZE,
        version_field: str = "customfield_10303",
    ) -> None:
        self._searcher = searcher
        self._project = project
        self._page_size = page_size
        self._version_field = version_field

    @property
    def project(self) -> str:
        return self._project

    async def fetch(self, references: Iterable[str]) -> IssueLookupTable:
        """Look up every reference number, duplicates included, in the project namespace."""

        keys = [qualify(self._project, key) for key in references]
        chunks = chunk_keys(keys, self._page_size)
        if not chunks:
            return IssueLookupTable()
        LOGGER.debug("Fetching %d key(s) in %d chunk(s)", len(keys), len(chunks))
        pages = await asyncio.gather(
            *(self._fetch_chunk(chunk, index) for index, chunk in enumerate(chunks))
        )
        return IssueLookupTable.from_payloads(
            (issue for page in pages for issue in page),
            version_field=self._version_field,
        )

    async def _fetch_chunk(self, keys: list[str], index: int) -> list[dict[str, Any]]:
        try:
            return await self._searcher.search_issues(keys)
        except TrackerRequestError as exc:
            LOGGER.warning(
                "Jira lookup for chunk %d (%d key(s)) failed with HTTP %s: %s",
                index,
                len(keys),
                exc.status_code,
                exc.server_message,
            )
            telemetry.emit(
                telemetry.BATCH_FAILED,
                {"chunk": index, "size": len(keys), "status_code": exc.status_code},
            )
            return []
