"""Command-line entry point running the plugin commands over a JSON outline."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO, get_type_hints

from .outline.host import JsonOutlineHost
from .plugin import JiraPlugin, RefreshScope
from .services.settings import Settings, SettingsStore, redact_secret
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_FALSE_VALUES = {"0", "false", "no", "off", "disabled"}
_LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, *, force: bool = False) -> None:
    """Configure structured logging for the command line."""

    level = logging.DEBUG if debug else logging.INFO
    logging_utils.setup_logging(level, force=force)
    _LOGGER.debug("Logging configured (level=%s)", logging.getLevelName(level))


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


async def run_command(
    command: str,
    settings: Settings,
    host: JsonOutlineHost,
    *,
    plugin: JiraPlugin | None = None,
) -> int:
    """Register the plugin with *host* and run one of its commands."""

    active = plugin or JiraPlugin(settings, host)
    active.register()
    try:
        if command == "create":
            key = await active.create_issue()
            if key:
                print(f"Created {key}")
            return 0 if key else 1
        scope = RefreshScope.PAGE if command == "refresh-page" else RefreshScope.SELECTION
        result = await active.update_jiras(scope)
        for message in host.messages:
            print(message.message)
        return 0 if result is not None else 1
    finally:
        await active.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the `jiralink` console script."""

    args = _parse_cli_args(argv)
    debug = args.debug or _env_flag("JIRALINK_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("JIRALINK_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2

    settings = load_settings(resolved_path, store=store, overrides=cli_overrides or None)

    if args.dump_settings:
        _dump_settings(settings, store, overrides=cli_overrides)
        return 0
    if args.save_settings:
        store.save(settings)
        print(f"Settings written to {store.path}")
        return 0
    if not args.command:
        print("No command given; use --help for usage.", file=sys.stderr)
        return 2

    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    try:
        host = JsonOutlineHost.load(args.outline)
    except (OSError, ValueError) as exc:
        print(f"Unable to read outline {args.outline}: {exc}", file=sys.stderr)
        return 2
    if args.command == "refresh-selection" and (args.blocks or args.current):
        host.select(args.blocks or [], current=args.current)
    elif args.command == "create":
        host.current = args.current

    return asyncio.run(run_command(args.command, settings, host))


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="jiralink",
        description="Refresh inline Jira references in an outline, or create issues from blocks.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload (with secrets redacted) and exit.",
    )
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the effective settings (including --set overrides) and exit.",
    )
    parser.add_argument(
        "--settings-path",
        metavar="PATH",
        help="Override the default ~/.jiralink/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings for this run (repeatable).",
    )
    subparsers = parser.add_subparsers(dest="command")

    page = subparsers.add_parser("refresh-page", help="Refresh every reference on the page.")
    page.add_argument("--outline", required=True, metavar="PATH", help="Outline JSON file.")

    selection = subparsers.add_parser("refresh-selection", help="Refresh the selected blocks.")
    selection.add_argument("--outline", required=True, metavar="PATH", help="Outline JSON file.")
    selection.add_argument(
        "--block",
        dest="blocks",
        metavar="UUID",
        action="append",
        default=[],
        help="Select a block (repeatable); defaults to the file's selection.",
    )
    selection.add_argument("--current", metavar="UUID", help="Focused block used when nothing is selected.")

    create = subparsers.add_parser("create", help="Create an issue from a block and its children.")
    create.add_argument("--outline", required=True, metavar="PATH", help="Outline JSON file.")
    create.add_argument("--current", required=True, metavar="UUID", help="Block to create the issue from.")
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    fields = Settings.__dataclass_fields__  # type: ignore[attr-defined]
    type_hints = get_type_hints(Settings)
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in fields:
            raise ValueError(f"Unknown setting '{key}'.")
        overrides[key] = _coerce_value(type_hints.get(key, str), raw_value.strip())
    return overrides


def _coerce_value(target: Any, raw_value: str) -> Any:
    if target is bool:
        return _parse_bool(raw_value)
    if target is int:
        return int(raw_value, 10)
    if target is float:
        return float(raw_value)
    return raw_value


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    payload = asdict(settings)
    payload["api_token"] = redact_secret(payload.get("api_token") or "")
    metadata = {
        "path": str(store.path),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": sorted(name for name in os.environ if name.startswith("JIRALINK_")),
    }
    json.dump({"settings": payload, "meta": metadata}, destination, indent=2)
    destination.write("\n")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
