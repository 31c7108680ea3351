"""
Bracket-grammar line codec.

Security line::

    [ts] [LEVEL] [actor] [IP:ip] [ACTION] k1=v1, k2=v2 [UserAgent:ua]

Errors line, followed by indented backtrace trailer lines::

    [ts] [LEVEL] [actor] [IP:ip] [ErrorType] message | k1=v1, k2=v2 [location]
      app/models/user.py:12:in save

Structural characters inside values are backslash-escaped so that any
value survives a write/read cycle: ``\\ [ ]`` in bracketed fields,
``\\ [ ] | , =`` in details keys and values, ``\\ [ ] |`` in the message,
and CR/LF as ``\\r`` / ``\\n`` everywhere.  Values without structural
characters render exactly as the unescaped format would.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from daylog.core.constants import BACKTRACE_INDENT
from daylog.eventlog.model import EventRecord
from daylog.eventlog.schema import LineFormat

_FIELD_SPECIALS = "[]"
_MESSAGE_SPECIALS = "[]|"
_DETAIL_SPECIALS = "[]|,="

_DETAIL_SEPARATOR = ", "
_IP_PREFIX = "IP:"

_CONTROL_ESCAPES = {"\n": "n", "\r": "r"}
_CONTROL_UNESCAPES = {"n": "\n", "r": "\r"}
_ESCAPE_SEQUENCE = re.compile(r"\\(.)", re.DOTALL)

# An escaped bracketed field body, and a free-text body that may not hold
# unescaped brackets or pipes.
_F = r"(?:[^\[\]\\]|\\.)*"
_M = r"(?:[^\[\]\\|]|\\.)*"

_PREFIX = (
    rf"^\[(?P<timestamp>{_F})\] \[(?P<level>{_F})\] \[(?P<actor>{_F})\] "
)

_SECURITY_LINE = re.compile(
    _PREFIX
    + rf"\[IP:(?P<ip>{_F})\] \[(?P<category>{_F})\] "
    + rf"(?P<details>.*?)(?: \[UserAgent:(?P<user_agent>{_F})\])?$"
)

_ERRORS_LINE = re.compile(
    _PREFIX
    + rf"\[(?P<ip>{_F})\] \[(?P<category>{_F})\] "
    + rf"(?P<message>{_M})(?: \| (?P<details>{_M}))?(?: \[(?P<location>{_F})\])?$"
)


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------


def escape(text: str, specials: str = _FIELD_SPECIALS) -> str:
    out: list[str] = []
    for ch in text:
        if ch in _CONTROL_ESCAPES:
            out.append("\\" + _CONTROL_ESCAPES[ch])
        elif ch == "\\" or ch in specials:
            out.append("\\" + ch)
        else:
            out.append(ch)
    return "".join(out)


def unescape(text: str) -> str:
    return _ESCAPE_SEQUENCE.sub(lambda m: _CONTROL_UNESCAPES.get(m.group(1), m.group(1)), text)


def _split_unescaped(text: str, sep: str, maxsplit: int = -1) -> list[str]:
    """Split on ``sep`` occurrences that are not part of an escape sequence."""
    parts: list[str] = []
    buf: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text):
            buf.append(text[i : i + 2])
            i += 2
            continue
        if text.startswith(sep, i) and (maxsplit < 0 or len(parts) < maxsplit):
            parts.append("".join(buf))
            buf = []
            i += len(sep)
            continue
        buf.append(text[i])
        i += 1
    parts.append("".join(buf))
    return parts


# ---------------------------------------------------------------------------
# Details
# ---------------------------------------------------------------------------


def encode_details(details: Mapping[str, Any]) -> str:
    return _DETAIL_SEPARATOR.join(
        f"{escape(str(k), _DETAIL_SPECIALS)}={escape(str(v), _DETAIL_SPECIALS)}"
        for k, v in details.items()
    )


def decode_details(text: str) -> dict[str, str]:
    details: dict[str, str] = {}
    if not text:
        return details
    for pair in _split_unescaped(text, _DETAIL_SEPARATOR):
        key, *rest = _split_unescaped(pair, "=", maxsplit=1)
        details[unescape(key)] = unescape(rest[0]) if rest else ""
    return details


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode(record: EventRecord, line_format: LineFormat) -> str:
    """Render a record as its stored text, newline-terminated (trailers included)."""
    head = [
        f"[{escape(record.timestamp)}]",
        f"[{escape(record.level)}]",
        f"[{escape(record.actor)}]",
        f"[{_IP_PREFIX}{escape(record.source_ip)}]",
        f"[{escape(record.category)}]",
    ]
    if line_format is LineFormat.SECURITY:
        line = " ".join(
            [
                *head,
                encode_details(record.details),
                f"[UserAgent:{escape(record.user_agent)}]",
            ]
        )
        return line + "\n"

    line = " ".join([*head, escape(record.message, _MESSAGE_SPECIALS)])
    if record.details:
        line += " | " + encode_details(record.details)
    if record.location:
        line += f" [{escape(record.location)}]"
    lines = [line]
    lines.extend(BACKTRACE_INDENT + escape(entry, "") for entry in record.backtrace)
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def is_trailer(line: str) -> bool:
    return line.startswith(BACKTRACE_INDENT)


def decode_line(line: str, line_format: LineFormat) -> EventRecord | None:
    """Parse one primary line (no newline); None when it does not match the grammar."""
    if line_format is LineFormat.SECURITY:
        m = _SECURITY_LINE.match(line)
        if m is None:
            return None
        return EventRecord(
            timestamp=unescape(m["timestamp"]),
            level=unescape(m["level"]),
            actor=unescape(m["actor"]),
            source_ip=unescape(m["ip"]),
            category=unescape(m["category"]),
            details=decode_details(m["details"]),
            user_agent=unescape(m["user_agent"] or ""),
            raw=line,
        )

    m = _ERRORS_LINE.match(line)
    if m is None:
        return None
    ip = unescape(m["ip"])
    if ip.startswith(_IP_PREFIX):
        ip = ip[len(_IP_PREFIX) :]
    return EventRecord(
        timestamp=unescape(m["timestamp"]),
        level=unescape(m["level"]),
        actor=unescape(m["actor"]),
        source_ip=ip,
        category=unescape(m["category"]),
        details=decode_details(m["details"] or ""),
        message=unescape(m["message"]),
        location=unescape(m["location"] or ""),
        raw=line,
    )


def decode_lines(lines: Iterable[str], line_format: LineFormat) -> Iterator[EventRecord]:
    """
    Parse complete lines (newline already removed) into records.

    Unparseable lines are dropped.  On the errors channel, indented trailer
    lines are collected into the preceding record's backtrace; trailers with
    no parsed parent (window edge, or after a dropped line) are dropped.
    """
    current: EventRecord | None = None
    backtrace: list[str] = []

    for line in lines:
        if line_format is LineFormat.ERRORS and is_trailer(line):
            if current is not None:
                backtrace.append(unescape(line[len(BACKTRACE_INDENT) :]))
            continue

        if current is not None:
            yield _with_backtrace(current, backtrace)
            current, backtrace = None, []

        current = decode_line(line, line_format)

    if current is not None:
        yield _with_backtrace(current, backtrace)


def _with_backtrace(record: EventRecord, backtrace: list[str]) -> EventRecord:
    if not backtrace:
        return record
    return dataclasses.replace(record, backtrace=tuple(backtrace))
