"""
Diagnostics logging setup.

Engine modules log through ``logging.getLogger(__name__)``; this is the
secondary channel that surfaces write failures without raising into the
caller.  ``configure_logging`` wires the ``daylog`` logger tree to stderr,
either through rich (``text``) or as one JSON object per line (``json``).
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from rich.console import Console
from rich.logging import RichHandler

from daylog.core.config import LoggingConfig

_ROOT_LOGGER = "daylog"


class JsonLineFormatter(logging.Formatter):
    """Render each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(cfg: LoggingConfig, console: Console | None = None) -> logging.Logger:
    """Attach a single stderr handler to the ``daylog`` logger (idempotent)."""
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler: logging.Handler
    if cfg.format == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonLineFormatter())
    else:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )

    logger.addHandler(handler)
    logger.setLevel(cfg.level)
    logger.propagate = False
    return logger
