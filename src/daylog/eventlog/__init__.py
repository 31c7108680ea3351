"""
daylog.eventlog: the dual-channel event log engine.

Modules:
    model     EventRecord, Actor, RequestInfo, field helpers
    schema    per-channel schema (prefix, grammar, search mode, counters)
    codec     bracket-grammar encode/decode with escaping
    limits    read-window clamp policy
    writer    append-only day-partitioned writer
    index     day-file enumeration
    reader    bounded-window tail reader
    search    per-channel substring search
    stats     daily statistics and N-day series
    channel   EventLog / SecurityLog / ErrorLog facades and wiring
"""

from daylog.eventlog.channel import ErrorLog, EventLog, Logs, SecurityLog, open_logs
from daylog.eventlog.index import DayFile, LogFileIndex
from daylog.eventlog.limits import clamp_limit
from daylog.eventlog.model import Actor, EventRecord, Level, RequestInfo, resolve_source_ip
from daylog.eventlog.reader import LogReader
from daylog.eventlog.schema import ERRORS, SECURITY, ChannelSchema, LineFormat, SearchMode
from daylog.eventlog.search import LogSearch
from daylog.eventlog.stats import DailyStatistics, DayStatistics, StatsAggregator
from daylog.eventlog.writer import LogWriter

__all__ = [
    "Actor",
    "ChannelSchema",
    "DailyStatistics",
    "DayFile",
    "DayStatistics",
    "ERRORS",
    "ErrorLog",
    "EventLog",
    "EventRecord",
    "Level",
    "LineFormat",
    "LogFileIndex",
    "LogReader",
    "LogSearch",
    "LogWriter",
    "Logs",
    "RequestInfo",
    "SECURITY",
    "SearchMode",
    "SecurityLog",
    "StatsAggregator",
    "clamp_limit",
    "open_logs",
    "resolve_source_ip",
]
