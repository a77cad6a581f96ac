"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from jiralink.services import telemetry


@pytest.fixture
def captured_events() -> Any:
    events: list[dict[str, Any]] = []
    names = (
        telemetry.REFRESH_COMPLETED,
        telemetry.BATCH_FAILED,
        telemetry.ISSUE_CREATED,
        telemetry.ISSUE_CREATE_FAILED,
    )
    for name in names:
        telemetry.register_event_listener(name, events.append)
    yield events
    for name in names:
        telemetry.unregister_event_listener(name, events.append)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    for name in (
        "JIRALINK_URL",
        "JIRALINK_API_TOKEN",
        "JIRALINK_PROJECT",
        "JIRALINK_REFERENCE_PROJECT",
        "JIRALINK_VERSION_FIELD",
        "JIRALINK_SHOW_TIME",
        "JIRALINK_DEBUG_LOGGING",
        "JIRALINK_PAGE_SIZE",
        "JIRALINK_REQUEST_TIMEOUT",
        "JIRALINK_SETTINGS_PATH",
        "JIRALINK_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("JIRALINK_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture(autouse=True)
def _restore_root_logging(monkeypatch: pytest.MonkeyPatch) -> Any:
    from jiralink.utils import logging as logging_utils

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.setattr(logging_utils, "_CONFIGURED", False)
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
