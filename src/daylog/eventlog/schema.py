"""
Per-channel schema: what differs between the security and errors channels.

Both channels share the writer, index, reader, search and statistics code;
a ``ChannelSchema`` supplies the file prefix, the line grammar, the search
mode and the named counters reported by daily statistics.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from daylog.core.constants import DAY_FORMAT, ERRORS_CHANNEL, SECURITY_CHANNEL


class LineFormat(StrEnum):
    SECURITY = "security"  # ... [CATEGORY] details [UserAgent:ua]
    ERRORS = "errors"  # ... [ErrorType] message | details [location] + trailers


class SearchMode(StrEnum):
    RAW = "raw"  # case-sensitive substring of the stored line; "" matches all
    FIELDS = "fields"  # case-insensitive over parsed fields; "" matches none


@dataclass(frozen=True)
class Counter:
    """A named statistic: records whose ``field`` equals ``value``."""

    name: str
    field: str  # "level" | "category"
    value: str


@dataclass(frozen=True)
class ChannelSchema:
    name: str
    label: str  # singular noun used in operator audit actions ("view_error_logs")
    prefix: str
    line_format: LineFormat
    search_mode: SearchMode
    counters: tuple[Counter, ...]
    # DailyStatistics attribute -> key in the rendered summary
    summary_keys: tuple[tuple[str, str], ...]

    def filename(self, day: date) -> str:
        return f"{self.prefix}_{day.strftime(DAY_FORMAT)}.log"

    def download_name(self, day: date) -> str:
        return f"{self.prefix}_log_{day.strftime(DAY_FORMAT)}.log"

    @property
    def glob(self) -> str:
        return f"{self.prefix}_*.log"

    @property
    def filename_pattern(self) -> re.Pattern[str]:
        return re.compile(rf"^{re.escape(self.prefix)}_(\d{{8}})\.log$")

    def with_prefix(self, prefix: str) -> ChannelSchema:
        return dataclasses.replace(self, prefix=prefix)


SECURITY = ChannelSchema(
    name=SECURITY_CHANNEL,
    label="security",
    prefix=SECURITY_CHANNEL,
    line_format=LineFormat.SECURITY,
    search_mode=SearchMode.RAW,
    counters=(
        Counter("logins", "category", "LOGIN"),
        Counter("logouts", "category", "LOGOUT"),
        Counter("failed_logins", "category", "FAILED_LOGIN"),
        Counter("unauthorized_attempts", "category", "UNAUTHORIZED_ACCESS"),
    ),
    summary_keys=(
        ("total_events", "total_events"),
        ("unique_actors", "unique_users"),
        ("unique_ips", "unique_ips"),
        ("events_by_hour", "events_by_hour"),
    ),
)

ERRORS = ChannelSchema(
    name=ERRORS_CHANNEL,
    label="error",
    prefix=ERRORS_CHANNEL,
    line_format=LineFormat.ERRORS,
    search_mode=SearchMode.FIELDS,
    counters=(
        Counter("critical_errors", "level", "CRITICAL"),
        Counter("errors", "level", "ERROR"),
        Counter("warnings", "level", "WARN"),
    ),
    summary_keys=(
        ("total_events", "total_errors"),
        ("unique_categories", "unique_error_types"),
        ("by_category", "errors_by_type"),
        ("events_by_hour", "errors_by_hour"),
    ),
)

SCHEMAS: dict[str, ChannelSchema] = {SECURITY.name: SECURITY, ERRORS.name: ERRORS}
