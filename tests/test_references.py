"""Unit tests for :mod:`jiralink.jira.references`."""

from __future__ import annotations

from jiralink.jira.references import (
    ReferenceScanner,
    format_token,
    iter_tokens,
    normalize_legacy_links,
    replace_tokens,
    scan_references,
)


def test_scan_discards_stale_annotation() -> None:
    text = "Ship it {{{j 42}}}(old) today"

    tokens = list(iter_tokens(text))

    assert scan_references(text) == ["42"]
    assert tokens[0].annotation == "(old)"
    assert text[tokens[0].start : tokens[0].end] == "{{{j 42}}}(old)"


def test_scan_returns_keys_left_to_right_with_duplicates() -> None:
    text = "{{{j 3}}} then {{{j 1}}}(#1.0 Done) and again {{{j 3}}}"

    assert scan_references(text) == ["3", "1", "3"]


def test_annotation_with_nested_parentheses_is_one_token() -> None:
    text = "{{{j 1}}}(#1.0-(beta) Done (Verified)) tail (kept)"

    tokens = list(iter_tokens(text))

    assert [token.key for token in tokens] == ["1"]
    assert tokens[0].annotation == "(#1.0-(beta) Done (Verified))"
    assert text[tokens[0].end :] == " tail (kept)"


def test_scan_without_tokens_is_empty() -> None:
    assert scan_references("plain text {{j 12}} {{{J 12}}} {{{j abc}}}") == []
    assert scan_references("") == []


def test_legacy_link_is_normalized_to_short_token() -> None:
    assert normalize_legacy_links("[DEV-7](https://x/DEV-7)") == "{{{j 7}}}"


def test_legacy_link_normalization_leaves_surrounding_text() -> None:
    text = "see [DEV-12](https://company.atlassian.net/browse/DEV-12) and [docs](https://x/y)"

    assert normalize_legacy_links(text) == "see {{{j 12}}} and [docs](https://x/y)"


def test_legacy_links_of_other_projects_are_kept() -> None:
    text = "[OPS-9](https://x/OPS-9)"

    assert normalize_legacy_links(text, "DEV") == text
    assert normalize_legacy_links(text, "OPS") == "{{{j 9}}}"


def test_scanner_scans_normalized_text() -> None:
    scanner = ReferenceScanner("DEV")

    scan = scanner.scan("[DEV-7](https://x/DEV-7) and {{{j 8}}}")

    assert scan.text == "{{{j 7}}} and {{{j 8}}}"
    assert scan.keys == ["7", "8"]
    assert bool(scanner.scan(None)) is False


def test_replace_tokens_consumes_replacements_in_order() -> None:
    text = "{{{j 1}}}(stale) x {{{j 2}}} y {{{j 1}}}"

    rewritten, count = replace_tokens(text, ["A", "B", "C"])

    assert rewritten == "A x B y C"
    assert count == 3


def test_replace_tokens_keeps_tokens_beyond_replacements() -> None:
    rewritten, count = replace_tokens("{{{j 1}}} {{{j 2}}}", ["A"])

    assert rewritten == "A {{{j 2}}}"
    assert count == 1


def test_format_token() -> None:
    assert format_token("42") == "{{{j 42}}}"
