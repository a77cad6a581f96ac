"""Tests for issue payload decoding."""

from __future__ import annotations

import pytest

from jiralink.jira.errors import IssueDecodeError
from jiralink.jira.models import IssueLookupTable, IssueRecord, decode_issue

from tests.helpers import issue_payload


def test_decode_issue_without_version_field() -> None:
    payload = {"key": "DEV-1", "fields": {"status": {"name": "Open"}}}

    record = decode_issue(payload)

    assert record == IssueRecord(key="DEV-1", status="Open", versions=None, labels=())


def test_decode_issue_with_single_and_multiple_versions() -> None:
    single = decode_issue(issue_payload("DEV-2", versions={"name": "Release 1"}))
    multiple = decode_issue(issue_payload("DEV-3", versions=[{"name": "1.0"}, {"name": "1.1"}]))

    assert single.versions == ("Release 1",)
    assert multiple.versions == ("1.0", "1.1")


def test_decode_issue_reads_custom_version_field() -> None:
    payload = issue_payload("DEV-4", versions={"name": "2.0"}, version_field="customfield_1")

    assert decode_issue(payload, version_field="customfield_1").versions == ("2.0",)


def test_decode_issue_treats_null_labels_as_empty() -> None:
    record = decode_issue(issue_payload("DEV-5", labels=None))

    assert record.labels == ()
    assert record.is_core is False


def test_core_label_flags_record() -> None:
    assert decode_issue(issue_payload("DEV-6", labels=["core", "ui"])).is_core is True


@pytest.mark.parametrize(
    "payload",
    [
        {"fields": {"status": {"name": "Open"}}},
        {"key": "DEV-7", "fields": {}},
        {"key": "DEV-7", "fields": {"status": "Open"}},
        {"key": "DEV-7", "fields": {"status": {"name": "Open"}, "labels": "core"}},
        {"key": "DEV-7", "fields": {"status": {"name": "Open"}, "customfield_10303": "1.0"}},
    ],
)
def test_decode_issue_rejects_malformed_payloads(payload: dict) -> None:
    with pytest.raises(IssueDecodeError):
        decode_issue(payload)


def test_lookup_table_skips_malformed_payloads() -> None:
    table = IssueLookupTable.from_payloads(
        [issue_payload("DEV-1"), {"key": "DEV-2", "fields": {}}, issue_payload("DEV-3", "Done")]
    )

    assert sorted(table) == ["DEV-1", "DEV-3"]
    assert table["DEV-3"].status == "Done"
    assert table.get("DEV-2") is None
    assert len(table) == 2
