"""Scanning outline text for inline Jira references.

A reference is written ``{{{j 1234}}}``. After a refresh it carries a
parenthesized annotation, ``{{{j 1234}}}(#1.2 In Progress)``, which is stale
by the next refresh and is discarded when scanning. Status and release names
may carry their own parentheses (``Done (Verified)``), so the annotation
allows one nested level. Older notes may still hold
full markdown links ``[DEV-1234](https://company.atlassian.net/browse/DEV-1234)``;
those are folded into the short form before scanning.

The same compiled pattern drives both :func:`scan_references` and
:func:`replace_tokens`, so the Nth key returned by a scan is always the key of
the Nth token a rewrite replaces.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Iterator, Pattern

__all__ = [
    "REFERENCE_PATTERN",
    "ReferenceScan",
    "ReferenceScanner",
    "ReferenceToken",
    "format_token",
    "normalize_legacy_links",
    "replace_tokens",
    "scan_references",
]

REFERENCE_PATTERN: Pattern[str] = re.compile(
    r"\{\{\{j (?P<key>[0-9]+)\}\}\}(?P<annotation>\((?:[^()]|\([^()]*\))*\))?"
)


@dataclass(slots=True, frozen=True)
class ReferenceToken:
    """One occurrence of a reference token inside a block's text."""

    key: str
    start: int
    end: int
    annotation: str | None = None


@dataclass(slots=True)
class ReferenceScan:
    """Normalized text plus the keys found in it, in order of appearance."""

    text: str
    keys: list[str]

    def __bool__(self) -> bool:
        return bool(self.keys)


def format_token(key: str) -> str:
    return "{{{j " + key + "}}}"


@lru_cache(maxsize=16)
def _legacy_link_pattern(project: str) -> Pattern[str]:
    namespace = re.escape(project)
    return re.compile(
        rf"\[{namespace}-(?P<key>[0-9]+)\]\(https://[^()\s]*?/{namespace}-[0-9]+\)"
    )


def normalize_legacy_links(text: str, project: str = "DEV") -> str:
    """Rewrite ``[PROJECT-N](https://.../PROJECT-N)`` links into ``{{{j N}}}``."""

    if not text or "[" not in text:
        return text
    return _legacy_link_pattern(project).sub(lambda match: format_token(match.group("key")), text)


def iter_tokens(text: str) -> Iterator[ReferenceToken]:
    for match in REFERENCE_PATTERN.finditer(text or ""):
        yield ReferenceToken(
            key=match.group("key"),
            start=match.start(),
            end=match.end(),
            annotation=match.group("annotation"),
        )


def scan_references(text: str) -> list[str]:
    """Return the referenced keys left to right, duplicates included."""

    return [token.key for token in iter_tokens(text)]


def replace_tokens(text: str, replacements: Iterable[str]) -> tuple[str, int]:
    """Replace each token (and its stale annotation) with the next replacement.

    Returns the rewritten text and the number of tokens replaced. Tokens left
    over once ``replacements`` is exhausted are kept unchanged.
    """

    pending = iter(replacements)
    replaced = 0

    def _swap(match: re.Match[str]) -> str:
        nonlocal replaced
        replacement = next(pending, None)
        if replacement is None:
            return match.group(0)
        replaced += 1
        return replacement

    return REFERENCE_PATTERN.sub(_swap, text), replaced


class ReferenceScanner:
    """Normalizes legacy links for one project namespace and extracts keys."""

    def __init__(self, project: str = "DEV") -> None:
        self._project = project

    @property
    def project(self) -> str:
        return self._project

    def normalize(self, text: str) -> str:
        return normalize_legacy_links(text, self._project)

    def scan(self, text: str | None) -> ReferenceScan:
        if not text:
            return ReferenceScan(text="", keys=[])
        normalized = self.normalize(text)
        return ReferenceScan(text=normalized, keys=scan_references(normalized))
