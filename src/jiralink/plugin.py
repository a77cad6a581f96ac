"""Plugin entry point: wires the Jira pipeline to outline host commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable

from .jira.client import ClientSettings, JiraClient
from .jira.collector import BlockCollector, flatten_keys
from .jira.creator import IssueCreator
from .jira.fetcher import BatchFetcher
from .jira.reconciler import ReconcileResult, Reconciler
from .jira.references import ReferenceScanner
from .outline.model import OutlineHost
from .services import telemetry
from .services.settings import Settings

__all__ = ["JiraPlugin", "RefreshScope", "COMMAND_LABELS", "DETAILS_COMMAND_KEY", "DETAILS_KEYBINDING"]

LOGGER = logging.getLogger(__name__)

DETAILS_COMMAND_KEY = "jiraDetails"
DETAILS_KEYBINDING = "mod+alt+j"


class RefreshScope(str, Enum):
    SELECTION = "selection"
    PAGE = "page"


@dataclass(frozen=True, slots=True)
class _Labels:
    selection: str = "Get Jira Details for Selection"
    page: str = "Get Jira Details for Page"
    create: str = "Create Jira"


COMMAND_LABELS = _Labels()


class JiraPlugin:
    """Registers the refresh/create commands and runs them against a host."""

    def __init__(
        self,
        settings: Settings,
        host: OutlineHost,
        *,
        client: JiraClient | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._settings = settings
        self._host = host
        self._owns_client = client is None
        self._client = client or JiraClient(ClientSettings.from_settings(settings))
        scanner = ReferenceScanner(settings.reference_project)
        self._collector = BlockCollector(scanner)
        self._fetcher = BatchFetcher(
            self._client,
            project=settings.reference_project,
            page_size=settings.page_size,
            version_field=settings.version_field,
        )
        self._reconciler = Reconciler(
            host,
            project=settings.reference_project,
            show_time=settings.show_time,
            clock=clock,
        )
        self._creator = IssueCreator(
            host,
            self._client,
            project=settings.project,
            reference_project=settings.reference_project,
            default_type=settings.default_issue_type,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    def register(self) -> None:
        """Register slash commands and the keyboard-bound details command."""

        self._host.register_slash_command(COMMAND_LABELS.selection, self.refresh_selection)
        self._host.register_slash_command(COMMAND_LABELS.create, self.create_issue)
        self._host.register_slash_command(COMMAND_LABELS.page, self.refresh_page)
        self._host.register_command(
            DETAILS_COMMAND_KEY,
            label=COMMAND_LABELS.selection,
            description="Add up to date status information to Jiras",
            keybinding=DETAILS_KEYBINDING,
            handler=self.refresh_selection,
        )
        LOGGER.debug("Registered Jira commands")

    async def refresh_selection(self) -> None:
        await self.update_jiras(RefreshScope.SELECTION)

    async def refresh_page(self) -> None:
        await self.update_jiras(RefreshScope.PAGE)

    async def update_jiras(self, scope: RefreshScope | str) -> ReconcileResult | None:
        """Refresh annotations for *scope*; failures are logged, never raised."""

        try:
            return await self._refresh(RefreshScope(scope))
        except Exception:
            LOGGER.exception("Jira refresh (%s) failed", scope)
            return None

    async def create_issue(self) -> str | None:
        try:
            return await self._creator.create_from_current_block()
        except Exception:
            LOGGER.exception("Jira creation failed")
            return None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _refresh(self, scope: RefreshScope) -> ReconcileResult:
        if scope is RefreshScope.PAGE:
            references = await self._collector.collect_page(self._host)
        else:
            references = await self._collector.collect_selection(self._host)
        table = await self._fetcher.fetch(flatten_keys(references))
        LOGGER.debug("Lookup table for %s refresh: %r", scope.value, table)
        result = await self._reconciler.reconcile(references, table)
        await self._host.show_message(f"Updated {result.count} jira entries", "success")
        telemetry.emit(
            telemetry.REFRESH_COMPLETED,
            {"scope": scope.value, "count": result.count, "blocks": result.block_count, "found": len(table)},
        )
        return result
