"""In-process event hooks for refresh and creation outcomes."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

__all__ = [
    "REFRESH_COMPLETED",
    "BATCH_FAILED",
    "ISSUE_CREATED",
    "ISSUE_CREATE_FAILED",
    "emit",
    "register_event_listener",
    "unregister_event_listener",
]

LOGGER = logging.getLogger(__name__)

REFRESH_COMPLETED = "jira.refresh.completed"
BATCH_FAILED = "jira.batch.failed"
ISSUE_CREATED = "jira.issue.created"
ISSUE_CREATE_FAILED = "jira.issue.create_failed"

_EVENT_LISTENERS: dict[str, list[Callable[[dict[str, Any]], None]]] = {}


def register_event_listener(event_name: str, callback: Callable[[dict[str, Any]], None]) -> None:
    """Register a callback invoked whenever :func:`emit` fires *event_name*."""

    if not event_name or callback is None:
        return
    listeners = _EVENT_LISTENERS.setdefault(event_name, [])
    if callback not in listeners:
        listeners.append(callback)


def unregister_event_listener(event_name: str, callback: Callable[[dict[str, Any]], None]) -> None:
    listeners = _EVENT_LISTENERS.get(event_name)
    if listeners and callback in listeners:
        listeners.remove(callback)


def emit(event_name: str, payload: Mapping[str, Any] | None = None) -> None:
    """Broadcast a structured event to in-process listeners."""

    if not event_name:
        return
    event_payload: dict[str, Any] = {"event": event_name}
    if payload:
        event_payload.update(payload)
    for callback in list(_EVENT_LISTENERS.get(event_name, ())):
        try:
            callback(dict(event_payload))
        except Exception:  # pragma: no cover - listeners must not break emitters
            LOGGER.debug("Event listener %s failed", callback, exc_info=True)
    LOGGER.debug("Event %s: %s", event_name, event_payload)
