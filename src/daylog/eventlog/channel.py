"""
Channel facades.

An ``EventLog`` is an explicitly constructed instance bound to one schema
and one directory; callers hold it and pass it to whatever needs to log or
query.  There is no process-wide logger state.

Usage::

    logs = open_logs(load_config_or_default())
    logs.security.log_login(user, request)
    logs.errors.log_error(exc, user=user, request=request)

    for record in logs.security.read(date.today(), limit=500):
        ...
"""

from __future__ import annotations

import functools
import logging
import traceback
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from daylog.core.constants import (
    CRITICAL_BACKTRACE_LINES,
    DEFAULT_READ_LIMIT,
    DEFAULT_SERIES_DAYS,
    ERROR_BACKTRACE_LINES,
)
from daylog.core.exceptions import UnknownChannelError
from daylog.eventlog.index import DayFile, LogFileIndex
from daylog.eventlog.model import EventRecord, Level, RequestInfo, resolve_source_ip
from daylog.eventlog.reader import LogReader
from daylog.eventlog.schema import ERRORS, SECURITY, ChannelSchema
from daylog.eventlog.search import LogSearch
from daylog.eventlog.stats import DailyStatistics, DayStatistics, StatsAggregator
from daylog.eventlog.writer import LogWriter

if TYPE_CHECKING:
    from pydantic import ValidationError

    from daylog.core.config import DaylogConfig

logger = logging.getLogger(__name__)


def _never_raises(method: Callable[..., bool]) -> Callable[..., bool]:
    """Log and return False when building an event fails before the write."""

    @functools.wraps(method)
    def wrapper(self: EventLog, *args: Any, **kwargs: Any) -> bool:
        try:
            return method(self, *args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to record %s event via %s: %s", self.name, method.__name__, exc)
            return False

    return wrapper


class EventLog:
    """One channel: writer, index, reader, search and statistics over one directory."""

    def __init__(
        self,
        schema: ChannelSchema,
        root_dir: Path,
        *,
        directory: Path | None = None,
        clock: Callable[[], datetime] | None = None,
        project_root: Path | None = None,
        default_limit: int = DEFAULT_READ_LIMIT,
    ) -> None:
        self.schema = schema
        self.default_limit = default_limit
        self.directory = Path(directory) if directory else Path(root_dir) / schema.name
        self._clock = clock or datetime.now
        self.writer = LogWriter(
            schema, self.directory, clock=self._clock, project_root=project_root
        )
        self.index = LogFileIndex(schema, self.directory, today=self.today)
        self.reader = LogReader(schema, self.directory)
        self._search = LogSearch(self.reader)
        self._stats = StatsAggregator(self.reader)

    @property
    def name(self) -> str:
        return self.schema.name

    def today(self) -> date:
        return self._clock().date()

    # Writing -----------------------------------------------------------

    def append(self, level: Level | str, **fields: Any) -> bool:
        return self.writer.append(level, **fields)

    # Querying ----------------------------------------------------------

    def list_days(self) -> list[DayFile]:
        return self.index.list_days()

    def read(self, day: date, limit: Any = None) -> list[EventRecord]:
        """Last ``limit`` lines of the day (``default_limit`` when omitted)."""
        return self.reader.read(day, self.default_limit if limit is None else limit)

    def search(self, day: date, query: str | None) -> list[EventRecord]:
        return self._search.search(day, query)

    def daily_statistics(self, day: date) -> DailyStatistics:
        return self._stats.daily_statistics(day)

    def series(self, end: date, days: int = DEFAULT_SERIES_DAYS) -> list[DayStatistics]:
        return self._stats.series(end, days)

    def existing_path(self, day: date) -> Path | None:
        return self.index.existing_path(day)

    def download_name(self, day: date) -> str:
        return self.schema.download_name(day)


# ---------------------------------------------------------------------------
# Security channel
# ---------------------------------------------------------------------------


class SecurityLog(EventLog):
    """Audit trail of logins, access decisions and user actions."""

    def __init__(self, root_dir: Path, *, schema: ChannelSchema = SECURITY, **kwargs: Any) -> None:
        super().__init__(schema, root_dir, **kwargs)

    @_never_raises
    def log_login(
        self, user: Any, request: RequestInfo | None, details: Mapping[str, Any] | None = None
    ) -> bool:
        extra: dict[str, Any] = {}
        role = getattr(user, "role", None)
        if role is not None:
            extra["role"] = getattr(role, "name", role)
        return self._log(Level.INFO, user, "LOGIN", request, {**extra, **(details or {})})

    @_never_raises
    def log_logout(
        self, user: Any, request: RequestInfo | None, details: Mapping[str, Any] | None = None
    ) -> bool:
        return self._log(Level.INFO, user, "LOGOUT", request, details)

    @_never_raises
    def log_failed_login(
        self, login: str, request: RequestInfo | None, reason: str = "Invalid credentials"
    ) -> bool:
        return self._log(
            Level.WARN, None, "FAILED_LOGIN", request, {"login": login, "reason": reason}
        )

    @_never_raises
    def log_unauthorized_access(
        self,
        user: Any,
        action: str,
        request: RequestInfo | None,
        details: Mapping[str, Any] | None = None,
    ) -> bool:
        return self._log(
            Level.WARN,
            user,
            "UNAUTHORIZED_ACCESS",
            request,
            {"attempted_action": action, **(details or {})},
        )

    @_never_raises
    def log_action(
        self,
        user: Any,
        action: str,
        request: RequestInfo | None,
        details: Mapping[str, Any] | None = None,
        *,
        level: Level | str = Level.INFO,
    ) -> bool:
        return self._log(level, user, str(action).upper(), request, details)

    @_never_raises
    def log_data_change(
        self,
        user: Any,
        resource: str,
        action: str,
        request: RequestInfo | None,
        details: Mapping[str, Any] | None = None,
    ) -> bool:
        category = f"{str(action).upper()}_{str(resource).upper()}"
        return self._log(Level.INFO, user, category, request, details)

    @_never_raises
    def log_security_event(
        self,
        event: str,
        user: Any,
        request: RequestInfo | None,
        details: Mapping[str, Any] | None = None,
    ) -> bool:
        return self._log(Level.CRITICAL, user, f"SECURITY_EVENT: {event}", request, details)

    def _log(
        self,
        level: Level | str,
        user: Any,
        category: str,
        request: RequestInfo | None,
        details: Mapping[str, Any] | None,
    ) -> bool:
        return self.writer.append(
            level,
            category=category,
            actor=user,
            source_ip=resolve_source_ip(request),
            user_agent=request.user_agent if request else None,
            details=details,
        )


# ---------------------------------------------------------------------------
# Errors channel
# ---------------------------------------------------------------------------


class ErrorLog(EventLog):
    """Application exceptions, warnings and validation failures."""

    def __init__(self, root_dir: Path, *, schema: ChannelSchema = ERRORS, **kwargs: Any) -> None:
        super().__init__(schema, root_dir, **kwargs)

    @_never_raises
    def log_error(
        self,
        error: BaseException,
        *,
        user: Any = None,
        request: RequestInfo | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        return self._log(
            Level.ERROR,
            type(error).__name__,
            str(error),
            user,
            request,
            context,
            backtrace=format_backtrace(error, ERROR_BACKTRACE_LINES),
        )

    @_never_raises
    def log_critical(
        self,
        error: BaseException,
        *,
        user: Any = None,
        request: RequestInfo | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        return self._log(
            Level.CRITICAL,
            type(error).__name__,
            str(error),
            user,
            request,
            context,
            backtrace=format_backtrace(error, CRITICAL_BACKTRACE_LINES),
        )

    @_never_raises
    def log_warning(
        self,
        message: str,
        *,
        user: Any = None,
        request: RequestInfo | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        return self._log(Level.WARN, "WARNING", message, user, request, context)

    @_never_raises
    def log_validation_error(
        self,
        error: ValidationError,
        *,
        user: Any = None,
        request: RequestInfo | None = None,
    ) -> bool:
        """Record a pydantic validation failure as ``ValidationError``."""
        messages = ", ".join(
            f"{'.'.join(str(part) for part in err['loc']) or error.title}: {err['msg']}"
            for err in error.errors()
        )
        return self._log(
            Level.WARN,
            "ValidationError",
            f"Validation failed for {error.title}",
            user,
            request,
            {"errors": messages, "model": error.title},
        )

    def _log(
        self,
        level: Level,
        error_type: str,
        message: str,
        user: Any,
        request: RequestInfo | None,
        context: Mapping[str, Any] | None,
        *,
        backtrace: list[str] | None = None,
    ) -> bool:
        return self.writer.append(
            level,
            category=error_type,
            actor=user,
            source_ip=resolve_source_ip(request),
            message=message,
            details=context,
            backtrace=backtrace,
        )


def format_backtrace(error: BaseException, limit: int) -> list[str]:
    """Innermost-first ``path:lineno:in name`` entries, at most ``limit``."""
    frames = traceback.extract_tb(error.__traceback__)
    return [f"{f.filename}:{f.lineno}:in {f.name}" for f in reversed(frames)][:limit]


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Logs:
    security: SecurityLog
    errors: ErrorLog

    def channel(self, name: str) -> EventLog:
        for log in (self.security, self.errors):
            if log.name == name:
                return log
        raise UnknownChannelError(f"Unknown channel {name!r}; expected 'security' or 'errors'")


def open_logs(config: DaylogConfig, *, clock: Callable[[], datetime] | None = None) -> Logs:
    """Build both channel facades from configuration."""
    root = config.root_path
    project_root = config.project_root_path
    return Logs(
        security=SecurityLog(
            root,
            schema=SECURITY.with_prefix(config.security.prefix),
            directory=config.channel_dir(config.security),
            clock=clock,
            default_limit=config.read.default_limit,
        ),
        errors=ErrorLog(
            root,
            schema=ERRORS.with_prefix(config.errors.prefix),
            directory=config.channel_dir(config.errors),
            clock=clock,
            project_root=project_root,
            default_limit=config.read.default_limit,
        ),
    )
