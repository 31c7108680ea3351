"""
Bounded-window reader for one channel's day files.

Reads are not synchronised with writers: a final line without its newline
is assumed to be mid-append and is skipped.  Lines that do not match the
channel grammar are dropped silently.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator
from datetime import date
from pathlib import Path
from typing import Any

from daylog.core.constants import DEFAULT_READ_LIMIT
from daylog.eventlog.codec import decode_lines
from daylog.eventlog.limits import clamp_limit
from daylog.eventlog.model import EventRecord
from daylog.eventlog.schema import ChannelSchema

logger = logging.getLogger(__name__)


class LogReader:
    def __init__(self, schema: ChannelSchema, directory: Path) -> None:
        self.schema = schema
        self.directory = Path(directory)

    def path_for(self, day: date) -> Path:
        return self.directory / self.schema.filename(day)

    def read(self, day: date, limit: Any = DEFAULT_READ_LIMIT) -> list[EventRecord]:
        """
        Return records from the last ``limit`` lines of the day file, oldest first.

        ``limit`` goes through :func:`clamp_limit`.  Missing file → ``[]``.
        """
        window = clamp_limit(limit)
        try:
            lines = self._tail(self.path_for(day), window)
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.error("Cannot read %s log for %s: %s", self.schema.name, day, exc)
            return []
        return list(decode_lines(lines, self.schema.line_format))

    def iter_records(self, day: date) -> Iterator[EventRecord]:
        """Stream every record of the day, oldest first, in constant memory."""
        yield from decode_lines(self.iter_lines(day), self.schema.line_format)

    def iter_lines(self, day: date) -> Iterator[str]:
        """Stream complete lines (newline removed); a missing file yields nothing."""
        path = self.path_for(day)
        try:
            with _open(path) as fh:
                yield from _complete_lines(fh)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("Cannot read %s: %s", path, exc)

    def _tail(self, path: Path, window: int) -> list[str]:
        with _open(path) as fh:
            return list(deque(_complete_lines(fh), maxlen=window))


def _open(path: Path):
    return path.open("r", encoding="utf-8", errors="replace", newline="\n")


def _complete_lines(fh) -> Iterator[str]:
    for line in fh:
        if not line.endswith("\n"):
            # unterminated final line: a writer is mid-append
            return
        yield line[:-1].removesuffix("\r")
