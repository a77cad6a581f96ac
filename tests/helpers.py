"""Shared builders and fakes for the jiralink tests."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Mapping, Sequence

from jiralink.jira.errors import TrackerRequestError
from jiralink.outline.model import Block


def block(content: str, *children: Block, uuid: str | None = None) -> Block:
    if uuid is None:
        return Block(content=content, children=list(children))
    return Block(uuid=uuid, content=content, children=list(children))


def issue_payload(
    key: str,
    status: str = "Open",
    *,
    versions: Any = None,
    labels: Sequence[str] | None = (),
    version_field: str = "customfield_10303",
) -> dict[str, Any]:
    fields: dict[str, Any] = {"status": {"name": status}, "labels": list(labels) if labels is not None else None}
    fields[version_field] = versions
    return {"key": key, "fields": fields}


class FakeSearcher:
    """Async stand-in for :class:`JiraClient.search_issues`.

    Answers from ``issues`` and raises :class:`TrackerRequestError` for the
    call indexes listed in ``fail_calls``.
    """

    def __init__(self, issues: Iterable[Mapping[str, Any]] = (), *, fail_calls: Iterable[int] = ()) -> None:
        self._issues = {issue["key"]: dict(issue) for issue in issues}
        self._fail_calls = set(fail_calls)
        self.calls: list[list[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def search_issues(self, keys: Sequence[str]) -> list[dict[str, Any]]:
        index = len(self.calls)
        self.calls.append(list(keys))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if index in self._fail_calls:
                raise TrackerRequestError(status_code=400, error_messages=("The value 'DEV-0' does not exist",))
            return [self._issues[key] for key in keys if key in self._issues]
        finally:
            self.in_flight -= 1


class FakeWriter:
    """Async stand-in for :class:`JiraClient.create_issue`."""

    def __init__(self, key: str = "DEV-501", *, error: Exception | None = None) -> None:
        self.key = key
        self.error = error
        self.calls: list[dict[str, str]] = []

    async def create_issue(self, *, project: str, summary: str, description: str, issue_type: str) -> str:
        self.calls.append(
            {"project": project, "summary": summary, "description": description, "issue_type": issue_type}
        )
        if self.error is not None:
            raise self.error
        return self.key
