"""
Per-day statistics and N-day series.

Statistics stream the whole day file through the reader and keep only
counters and distinct-value sets, so a large day file never has to be held
in memory.
"""

from __future__ import annotations

from collections import Counter as _Tally
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from daylog.core.constants import DEFAULT_SERIES_DAYS
from daylog.eventlog.reader import LogReader
from daylog.eventlog.schema import ChannelSchema


@dataclass(frozen=True)
class DailyStatistics:
    date: date
    total_events: int = 0
    by_level: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)
    unique_actors: int = 0
    unique_ips: int = 0
    unique_categories: int = 0
    events_by_hour: dict[int, int] = field(default_factory=dict)
    # records whose timestamp did not parse; they are counted in hour 0
    unparsed_timestamps: int = 0

    def count(self, field_name: str, value: str) -> int:
        table = self.by_level if field_name == "level" else self.by_category
        return table.get(value, 0)

    def as_dict(self, schema: ChannelSchema) -> dict[str, Any]:
        """Render the channel's named summary (e.g. ``logins``, ``warnings``)."""
        keys = dict(schema.summary_keys)
        summary: dict[str, Any] = {keys.pop("total_events", "total_events"): self.total_events}
        for counter in schema.counters:
            summary[counter.name] = self.count(counter.field, counter.value)
        for attr, key in keys.items():
            value = getattr(self, attr)
            summary[key] = dict(value) if isinstance(value, dict) else value
        return summary


@dataclass(frozen=True)
class DayStatistics:
    date: date
    stats: DailyStatistics


class StatsAggregator:
    def __init__(self, reader: LogReader) -> None:
        self.reader = reader
        self.schema = reader.schema

    def daily_statistics(self, day: date) -> DailyStatistics:
        total = 0
        unparsed = 0
        levels: _Tally[str] = _Tally()
        categories: _Tally[str] = _Tally()
        hours: _Tally[int] = _Tally()
        actors: set[str] = set()
        ips: set[str] = set()

        for record in self.reader.iter_records(day):
            total += 1
            levels[record.level] += 1
            categories[record.category] += 1
            if record.actor:
                actors.add(record.actor)
            if record.source_ip:
                ips.add(record.source_ip)
            moment = record.moment
            if moment is None:
                unparsed += 1
                hours[0] += 1
            else:
                hours[moment.hour] += 1

        return DailyStatistics(
            date=day,
            total_events=total,
            by_level=dict(levels),
            by_category=dict(categories),
            unique_actors=len(actors),
            unique_ips=len(ips),
            unique_categories=len(categories),
            events_by_hour=dict(sorted(hours.items())),
            unparsed_timestamps=unparsed,
        )

    def series(self, end: date, days: int = DEFAULT_SERIES_DAYS) -> list[DayStatistics]:
        """Statistics for ``[end - days + 1 .. end]``, oldest first."""
        return [
            DayStatistics(date=day, stats=self.daily_statistics(day))
            for day in (end - timedelta(days=offset) for offset in range(days - 1, -1, -1))
        ]
