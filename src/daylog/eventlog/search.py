"""
Substring search over one day of a channel.

The two channels search differently:

* ``SearchMode.RAW`` (security): case-sensitive substring of the stored
  line text, whole file; an empty query matches every line.
* ``SearchMode.FIELDS`` (errors): case-insensitive substring of any parsed
  field, over the last 10000 lines; an empty query matches nothing.
"""

from __future__ import annotations

from datetime import date

from daylog.core.constants import SEARCH_WINDOW
from daylog.eventlog.codec import decode_lines
from daylog.eventlog.model import EventRecord
from daylog.eventlog.reader import LogReader
from daylog.eventlog.schema import SearchMode


class LogSearch:
    def __init__(self, reader: LogReader) -> None:
        self.reader = reader
        self.schema = reader.schema

    def search(self, day: date, query: str | None) -> list[EventRecord]:
        if self.schema.search_mode is SearchMode.RAW:
            return self._search_raw(day, query or "")
        return self._search_fields(day, query or "")

    def _search_raw(self, day: date, query: str) -> list[EventRecord]:
        lines = (line for line in self.reader.iter_lines(day) if query in line)
        return list(decode_lines(lines, self.schema.line_format))

    def _search_fields(self, day: date, query: str) -> list[EventRecord]:
        if not query:
            return []
        needle = query.casefold()
        return [
            record
            for record in self.reader.read(day, limit=SEARCH_WINDOW)
            if any(needle in value.casefold() for value in record.field_values())
        ]
