"""
Append-only day-partitioned writer.

Every call renders one record (primary line plus, on the errors channel,
backtrace trailer lines) and appends it to ``<prefix>_YYYYMMDD.log`` with a
single unbuffered write.  The day file is created lazily on first append.

Thread-safe within one process (per-writer lock).  Across processes the
writer relies on O_APPEND: each record is one ``write()`` positioned at the
current end of file, so concurrent writers do not overwrite each other.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

from daylog.core.constants import NO_REQUEST_IP
from daylog.eventlog.codec import encode
from daylog.eventlog.model import (
    EventRecord,
    Level,
    format_actor,
    format_timestamp,
    truncate_user_agent,
)
from daylog.eventlog.schema import ChannelSchema, LineFormat

logger = logging.getLogger(__name__)


class LogWriter:
    """Formats and appends records for one channel.  Never raises from ``append``."""

    def __init__(
        self,
        schema: ChannelSchema,
        directory: Path,
        *,
        clock: Callable[[], datetime] | None = None,
        project_root: Path | None = None,
    ) -> None:
        self.schema = schema
        self.directory = Path(directory)
        self._clock = clock or datetime.now
        self._project_root = str(project_root) if project_root else ""
        self._lock = threading.Lock()

    def path_for(self, day: date) -> Path:
        return self.directory / self.schema.filename(day)

    def append(
        self,
        level: Level | str,
        *,
        category: str,
        actor: Any = None,
        source_ip: str = NO_REQUEST_IP,
        user_agent: str | None = None,
        message: str = "",
        details: Mapping[str, Any] | None = None,
        backtrace: Iterable[Any] | None = None,
    ) -> bool:
        """Append one event.  Returns False (and logs) on any failure."""
        try:
            moment = self._clock()
            record = self._build(
                moment,
                level=level,
                category=category,
                actor=actor,
                source_ip=source_ip,
                user_agent=user_agent,
                message=message,
                details=details,
                backtrace=backtrace,
            )
            payload = encode(record, self.schema.line_format)
            self._write(self.path_for(moment.date()), payload.encode("utf-8"))
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to write %s log: %s", self.schema.name, exc)
            return False

        logger.debug("[%s] %s", self.schema.name, payload.split("\n", 1)[0])
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build(
        self,
        moment: datetime,
        *,
        level: Level | str,
        category: str,
        actor: Any,
        source_ip: str,
        user_agent: str | None,
        message: str,
        details: Mapping[str, Any] | None,
        backtrace: Iterable[Any] | None,
    ) -> EventRecord:
        is_security = self.schema.line_format is LineFormat.SECURITY
        trace = tuple(str(entry) for entry in backtrace or ())
        return EventRecord(
            timestamp=format_timestamp(moment),
            level=self._level_name(level),
            actor=format_actor(actor),
            source_ip=source_ip or NO_REQUEST_IP,
            category=str(category),
            details={str(k): str(v) for k, v in (details or {}).items()},
            message="" if is_security else str(message or ""),
            location="" if is_security else self._location(trace),
            backtrace=() if is_security else trace,
            user_agent=truncate_user_agent(user_agent) if is_security else "",
        )

    def _level_name(self, level: Level | str) -> str:
        name = str(level).upper()
        if self.schema.line_format is LineFormat.SECURITY and name not in Level.__members__:
            return Level.INFO.value
        return name

    def _location(self, backtrace: tuple[str, ...]) -> str:
        if not backtrace:
            return ""
        first = backtrace[0]
        if self._project_root:
            first = first.replace(self._project_root.rstrip("/") + "/", "")
        return first

    def _write(self, path: Path, data: bytes) -> None:
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            with path.open("ab", buffering=0) as fh:
                written = fh.write(data)
            if written != len(data):
                raise OSError(f"short write to {path}: {written} of {len(data)} bytes")
