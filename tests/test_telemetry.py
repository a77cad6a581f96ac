"""Tests for in-process event hooks."""

from __future__ import annotations

from jiralink.services import telemetry


def test_emit_reaches_registered_listener_once() -> None:
    received: list[dict] = []
    telemetry.register_event_listener("demo.event", received.append)
    telemetry.register_event_listener("demo.event", received.append)

    telemetry.emit("demo.event", {"count": 3})
    telemetry.unregister_event_listener("demo.event", received.append)
    telemetry.emit("demo.event", {"count": 4})

    assert received == [{"event": "demo.event", "count": 3}]


def test_failing_listener_does_not_break_emit() -> None:
    received: list[dict] = []

    def _boom(payload: dict) -> None:
        raise RuntimeError("listener bug")

    telemetry.register_event_listener("demo.other", _boom)
    telemetry.register_event_listener("demo.other", received.append)
    try:
        telemetry.emit("demo.other")
    finally:
        telemetry.unregister_event_listener("demo.other", _boom)
        telemetry.unregister_event_listener("demo.other", received.append)

    assert received == [{"event": "demo.other"}]
