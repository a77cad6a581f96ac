"""Typed records for the subset of Jira issue payloads the plugin consumes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping

from jsonschema import Draft7Validator, ValidationError

from .errors import IssueDecodeError

__all__ = [
    "CORE_LABEL",
    "IssueRecord",
    "IssueLookupTable",
    "decode_issue",
    "issue_schema",
]

LOGGER = logging.getLogger(__name__)

CORE_LABEL = "core"

_VERSION_OBJECT: Dict[str, Any] = {
    "type": "object",
    "properties": {"name": {"type": ["string", "null"]}},
}


def issue_schema(version_field: str) -> Dict[str, Any]:
    """JSON schema for one entry of a ``/search`` response's ``issues`` array."""

    return {
        "type": "object",
        "required": ["key", "fields"],
        "properties": {
            "key": {"type": "string", "minLength": 1},
            "fields": {
                "type": "object",
                "required": ["status"],
                "properties": {
                    "status": {
                        "type": "object",
                        "required": ["name"],
                        "properties": {"name": {"type": "string"}},
                    },
                    "labels": {
                        "type": ["array", "null"],
                        "items": {"type": "string"},
                    },
                    version_field: {
                        "anyOf": [
                            {"type": "null"},
                            _VERSION_OBJECT,
                            {"type": "array", "items": _VERSION_OBJECT},
                        ]
                    },
                },
            },
        },
    }


@lru_cache(maxsize=8)
def _validator(version_field: str) -> Draft7Validator:
    return Draft7Validator(issue_schema(version_field))


@dataclass(slots=True, frozen=True)
class IssueRecord:
    """Status details for one issue.

    ``versions`` is ``None`` when the release field is absent or null, and a
    tuple of names (possibly a single one) when it is set.
    """

    key: str
    status: str
    versions: tuple[str, ...] | None = None
    labels: tuple[str, ...] = ()

    @property
    def is_core(self) -> bool:
        return CORE_LABEL in self.labels


def decode_issue(payload: Any, *, version_field: str = "customfield_10303") -> IssueRecord:
    """Decode one issue payload, raising :class:`IssueDecodeError` if it is malformed."""

    try:
        _validator(version_field).validate(payload)
    except ValidationError as error:
        path = ".".join(str(part) for part in error.path)
        key = payload.get("key") if isinstance(payload, Mapping) else None
        raise IssueDecodeError(
            message=f"{path}: {error.message}" if path else error.message,
            key=key if isinstance(key, str) else None,
            path=path,
        ) from error

    fields = payload["fields"]
    raw_versions = fields.get(version_field)
    versions: tuple[str, ...] | None
    if raw_versions is None:
        versions = None
    elif isinstance(raw_versions, list):
        versions = tuple(item.get("name") or "" for item in raw_versions)
    else:
        versions = (raw_versions.get("name") or "",)
    return IssueRecord(
        key=payload["key"],
        status=fields["status"]["name"],
        versions=versions,
        labels=tuple(fields.get("labels") or ()),
    )


class IssueLookupTable(Mapping[str, IssueRecord]):
    """Read-only mapping of full issue key (``DEV-42``) to :class:`IssueRecord`.

    Keys without an entry are "not found".
    """

    def __init__(self, records: Iterable[IssueRecord] = ()) -> None:
        table: Dict[str, IssueRecord] = {}
        for record in records:
            table[record.key] = record
        self._records = MappingProxyType(table)

    @classmethod
    def from_payloads(
        cls,
        payloads: Iterable[Any],
        *,
        version_field: str = "customfield_10303",
    ) -> "IssueLookupTable":
        """Decode raw issue payloads, skipping (and logging) malformed ones."""

        records: list[IssueRecord] = []
        for payload in payloads:
            try:
                records.append(decode_issue(payload, version_field=version_field))
            except IssueDecodeError as exc:
                LOGGER.warning("Skipping malformed issue %s: %s", exc.key or "<unknown>", exc.message)
        return cls(records)

    def __getitem__(self, key: str) -> IssueRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"IssueLookupTable({len(self)} issue(s))"
