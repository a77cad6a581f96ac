"""Log file and console setup for the ``jiralink`` command line."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["LOG_FILENAME", "setup_logging"]

LOG_FILENAME = "jiralink.log"
LOG_DIR_ENV = "JIRALINK_LOG_DIR"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONFIGURED = False


def setup_logging(level: int = logging.INFO, *, force: bool = False) -> Path:
    """Send records to ``$JIRALINK_LOG_DIR/jiralink.log`` and stderr.

    Repeated calls are no-ops unless ``force`` is set, which lets ``--debug``
    or the ``debug_logging`` setting raise the level after start-up.
    """

    global _CONFIGURED
    log_path = _log_dir() / LOG_FILENAME
    if _CONFIGURED and not force:
        return log_path

    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    # httpx logs every tracker request at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _CONFIGURED = True
    return log_path


def _log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".jiralink" / "logs"
