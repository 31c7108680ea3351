"""
Event record model and the request/actor helpers that feed it.

An ``EventRecord`` is one parsed log line (plus, on the errors channel, its
backtrace trailer lines).  Records are immutable; nothing in the engine
updates or deletes them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from daylog.core.constants import (
    ANONYMOUS_ACTOR,
    NO_REQUEST_IP,
    UNKNOWN_IP,
    UNKNOWN_USER_AGENT,
    USER_AGENT_MAX_CHARS,
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


class Level(StrEnum):
    """Event severity, ordered INFO → CRITICAL."""

    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class Actor:
    """The acting principal: a login plus its numeric id."""

    login: str
    id: int | str

    def render(self) -> str:
        return f"{self.login}(ID:{self.id})"


@dataclass(frozen=True)
class RequestInfo:
    """The parts of an inbound request the log engine cares about."""

    headers: Mapping[str, str] = field(default_factory=dict)
    remote_addr: str | None = None
    user_agent: str | None = None

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class EventRecord:
    """One stored event, as read back from a day file."""

    timestamp: str
    level: str
    actor: str
    source_ip: str
    category: str
    details: dict[str, str] = field(default_factory=dict)
    message: str = ""
    location: str = ""
    backtrace: tuple[str, ...] = ()
    user_agent: str = ""
    raw: str = field(default="", compare=False, repr=False)

    @property
    def moment(self) -> datetime | None:
        """The parsed timestamp, or None when the stored text is malformed."""
        return parse_timestamp(self.timestamp)

    def field_values(self) -> list[str]:
        """String form of every structured field (used by field search)."""
        return [
            self.timestamp,
            self.level,
            self.actor,
            self.source_ip,
            self.category,
            self.message,
            format_details_plain(self.details),
            self.location,
            self.user_agent,
            *self.backtrace,
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "actor": self.actor,
            "source_ip": self.source_ip,
            "category": self.category,
            "details": dict(self.details),
            "message": self.message,
            "location": self.location,
            "backtrace": list(self.backtrace),
            "user_agent": self.user_agent,
        }


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def format_timestamp(moment: datetime) -> str:
    """Render ``YYYY-MM-DD HH:MM:SS.mmm`` (millisecond precision)."""
    return moment.strftime("%Y-%m-%d %H:%M:%S.") + f"{moment.microsecond // 1000:03d}"


def parse_timestamp(text: str) -> datetime | None:
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except (TypeError, ValueError):
        return None


def format_actor(user: Any) -> str:
    """
    Render the acting principal as ``login(ID:id)``.

    Accepts an :class:`Actor`, any object exposing ``login`` and ``id``, a
    pre-rendered string, or None (→ ``ANONYMOUS``).
    """
    if user is None:
        return ANONYMOUS_ACTOR
    if isinstance(user, str):
        return user or ANONYMOUS_ACTOR
    if isinstance(user, Actor):
        return user.render()
    return Actor(login=str(user.login), id=user.id).render()


def resolve_source_ip(request: RequestInfo | None) -> str:
    """
    Best-effort client address.

    Precedence: first ``X-Forwarded-For`` entry, ``X-Real-IP``, the direct
    connection address, else ``Unknown``.  No request at all gives ``N/A``.
    """
    if request is None:
        return NO_REQUEST_IP
    forwarded = request.header("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.header("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    if request.remote_addr:
        return request.remote_addr
    return UNKNOWN_IP


def truncate_user_agent(user_agent: str | None) -> str:
    if not user_agent:
        return UNKNOWN_USER_AGENT
    if len(user_agent) > USER_AGENT_MAX_CHARS:
        return user_agent[:USER_AGENT_MAX_CHARS] + "..."
    return user_agent


def format_details_plain(details: Mapping[str, Any]) -> str:
    """Unescaped ``k1=v1, k2=v2`` rendering, for display and field search."""
    return ", ".join(f"{k}={v}" for k, v in details.items())
