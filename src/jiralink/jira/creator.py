"""Create a Jira issue from an outline block and its nested children."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from ..outline.model import Block, OutlineHost
from ..services import telemetry
from .errors import JiraError, TrackerRequestError
from .references import format_token

__all__ = ["IssueCreator", "IssueDraft", "build_description", "draft_from_block", "reference_number"]

LOGGER = logging.getLogger(__name__)

INDENT = "   "
BULLET = "- "
_TRAILING_TAG_RE = re.compile(r"(?:^|\s)#(?P<type>[^\s#]+)\s*$")


class IssueWriter(Protocol):
    async def create_issue(self, *, project: str, summary: str, description: str, issue_type: str) -> str:
        ...


@dataclass(slots=True)
class IssueDraft:
    summary: str
    description: str
    issue_type: str


def build_description(block: Block, depth: int = 0) -> str:
    """Flatten the block's descendants into indented lines, pre-order.

    Direct children sit at depth 0 without a bullet; deeper levels are
    indented three spaces per level and bulleted.
    """

    lines: list[str] = []
    bullet = BULLET if depth else ""
    for child in block.children:
        lines.append("\n" + INDENT * depth + bullet + child.content)
        lines.append(build_description(child, depth + 1))
    return "".join(lines)


def draft_from_block(block: Block, *, default_type: str = "bug") -> IssueDraft:
    summary = block.content
    match = _TRAILING_TAG_RE.search(summary)
    issue_type = match.group("type") if match else default_type
    return IssueDraft(summary=summary, description=build_description(block), issue_type=issue_type)


def reference_number(issue_key: str, project: str = "DEV") -> str | None:
    """``DEV-123`` -> ``123`` for the ``DEV`` namespace.

    Returns ``None`` for keys of any other project; inline tokens only name
    issues in the namespace refreshes look up.
    """

    prefix, _, number = issue_key.rpartition("-")
    if prefix != project or not number.isdigit():
        return None
    return number


class IssueCreator:
    def __init__(
        self,
        host: OutlineHost,
        writer: IssueWriter,
        *,
        project: str = "DEV",
        reference_project: str | None = None,
        default_type: str = "bug",
    ) -> None:
        self._host = host
        self._writer = writer
        self._project = project
        self._reference_project = reference_project or project
        self._default_type = default_type

    async def create_from_current_block(self) -> str | None:
        """Create an issue from the focused block; return the new key or ``None``."""

        current = await self._host.get_current_block()
        if current is None:
            LOGGER.debug("No current block; nothing to create")
            return None
        block = await self._host.get_block(current.uuid, include_children=True)
        if block is None:
            return None
        return await self.create_from_block(block)

    async def create_from_block(self, block: Block) -> str | None:
        draft = draft_from_block(block, default_type=self._default_type)
        try:
            key = await self._writer.create_issue(
                project=self._project,
                summary=draft.summary,
                description=draft.description,
                issue_type=draft.issue_type,
            )
        except TrackerRequestError as exc:
            LOGGER.error("Jira issue creation failed (HTTP %s): %s", exc.status_code, exc.server_message)
            telemetry.emit(telemetry.ISSUE_CREATE_FAILED, {"block": block.uuid, "status_code": exc.status_code})
            return None
        except JiraError as exc:
            LOGGER.error("Jira issue creation failed: %s", exc)
            telemetry.emit(telemetry.ISSUE_CREATE_FAILED, {"block": block.uuid})
            return None

        number = reference_number(key, self._reference_project)
        if number is None:
            LOGGER.warning(
                "Created %s outside reference project %s; block %s left unchanged",
                key,
                self._reference_project,
                block.uuid,
            )
        else:
            separator = "" if not draft.summary or draft.summary[-1].isspace() else " "
            await self._host.update_block(block.uuid, draft.summary + separator + format_token(number))
        LOGGER.info("Created %s from block %s", key, block.uuid)
        telemetry.emit(
            telemetry.ISSUE_CREATED,
            {"block": block.uuid, "key": key, "issue_type": draft.issue_type, "linked": number is not None},
        )
        return key
