"""Async wrapper around the two Jira REST endpoints the plugin uses."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

import httpx

from ..services.settings import Settings
from .errors import ErrorCode, JiraError, TrackerRequestError

__all__ = ["ClientSettings", "JiraClient"]

LOGGER = logging.getLogger(__name__)
_SEARCH_PATH = "/rest/api/2/search"
_ISSUE_PATH = "/rest/api/2/issue/"


@dataclass(slots=True)
class ClientSettings:
    """Subset of settings required to talk to Jira."""

    base_url: str
    api_token: str
    version_field: str = "customfield_10303"
    page_size: int = 50
    request_timeout: float | None = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientSettings":
        return cls(
            base_url=settings.jira_url,
            api_token=settings.api_token,
            version_field=settings.version_field,
            page_size=settings.page_size,
            request_timeout=settings.request_timeout,
        )

    @property
    def search_fields(self) -> str:
        return ",".join(("status", "labels", self.version_field))


class JiraClient:
    """Issues ``/search`` lookups and ``/issue/`` creations with Basic auth.

    Responses with a status of 300 or above raise :class:`TrackerRequestError`
    carrying Jira's ``errorMessages``; callers decide how to degrade.
    """

    def __init__(self, settings: ClientSettings, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    async def __aenter__(self) -> "JiraClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def search_issues(self, keys: Sequence[str]) -> List[Dict[str, Any]]:
        """Return the raw ``issues`` array for ``key in (...)`` over *keys*."""

        if not keys:
            return []
        params = {
            "jql": f"key in ({','.join(keys)})",
            "fields": self._settings.search_fields,
            "maxResults": str(self._settings.page_size),
        }
        LOGGER.debug("Searching Jira for %d key(s)", len(keys))
        response = await self._client.get(
            self._url(_SEARCH_PATH),
            params=params,
            headers=self._headers(),
        )
        details = self._decode(response)
        issues = details.get("issues") if isinstance(details, Mapping) else None
        if issues is None:
            return []
        if not isinstance(issues, list):
            raise JiraError(
                error_code=ErrorCode.INVALID_RESPONSE,
                message="Search response 'issues' is not a list",
                details={"status_code": response.status_code},
            )
        return issues

    async def create_issue(
        self,
        *,
        project: str,
        summary: str,
        description: str,
        issue_type: str,
    ) -> str:
        """Create an issue and return its key (``DEV-123``)."""

        payload = {
            "fields": {
                "project": {"key": project},
                "summary": summary,
                "description": description,
                "issuetype": {"name": issue_type},
            }
        }
        headers = self._headers()
        headers["X-Atlassian-Token"] = "no-check"
        headers["User-Agent"] = ""
        LOGGER.debug("Creating %s issue in project %s", issue_type, project)
        response = await self._client.post(
            self._url(_ISSUE_PATH),
            content=json.dumps(payload),
            headers=headers,
        )
        details = self._decode(response)
        key = details.get("key") if isinstance(details, Mapping) else None
        if not isinstance(key, str) or not key:
            raise JiraError(
                error_code=ErrorCode.INVALID_RESPONSE,
                message="Create response did not include an issue key",
                details={"status_code": response.status_code},
            )
        return key

    def _url(self, path: str) -> str:
        return self._settings.base_url.rstrip("/") + path

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Basic {self._settings.api_token}",
        }

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            details = response.json()
        except ValueError:
            details = None
        if response.status_code >= 300:
            raise TrackerRequestError(
                message=f"Jira responded with HTTP {response.status_code}",
                status_code=response.status_code,
                error_messages=_error_messages(details, response),
            )
        if details is None:
            raise JiraError(
                error_code=ErrorCode.INVALID_RESPONSE,
                message="Jira response was not valid JSON",
                details={"status_code": response.status_code},
            )
        return details


def _error_messages(details: Any, response: httpx.Response) -> tuple[str, ...]:
    if isinstance(details, Mapping):
        messages = [str(item) for item in details.get("errorMessages") or ()]
        errors = details.get("errors")
        if isinstance(errors, Mapping):
            messages.extend(f"{field}: {message}" for field, message in errors.items())
        if messages:
            return tuple(messages)
    text = response.text.strip()
    return (text[:200],) if text else ()
