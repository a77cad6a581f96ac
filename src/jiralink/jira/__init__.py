"""Jira reference scanning, lookup and reconciliation."""

from .client import ClientSettings, JiraClient
from .collector import BlockCollector, BlockReferences, flatten_keys
from .creator import IssueCreator, IssueDraft, build_description, draft_from_block
from .errors import IssueDecodeError, JiraError, TrackerRequestError
from .fetcher import BatchFetcher, chunk_keys, qualify
from .models import IssueLookupTable, IssueRecord, decode_issue
from .reconciler import ReconcileResult, Reconciler, render_annotation, render_replacement
from .references import ReferenceScanner, ReferenceToken, normalize_legacy_links, scan_references

__all__ = [
    "BatchFetcher",
    "BlockCollector",
    "BlockReferences",
    "ClientSettings",
    "IssueCreator",
    "IssueDecodeError",
    "IssueDraft",
    "IssueLookupTable",
    "IssueRecord",
    "JiraClient",
    "JiraError",
    "ReconcileResult",
    "Reconciler",
    "ReferenceScanner",
    "ReferenceToken",
    "TrackerRequestError",
    "build_description",
    "chunk_keys",
    "decode_issue",
    "draft_from_block",
    "flatten_keys",
    "normalize_legacy_links",
    "qualify",
    "render_annotation",
    "render_replacement",
    "scan_references",
]
