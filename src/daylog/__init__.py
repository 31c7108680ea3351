"""
daylog: dual-channel structured event log engine.

Two channels (security audit trail and application errors) share one
architecture: append-only, day-partitioned, line-oriented log files with
bounded-window reads, substring search and per-day statistics.

Package layout (src/daylog/):
  core/      : configuration, constants, exceptions, diagnostics logging
  eventlog/  : record model, line codec, writer, index, reader, search, stats
  cli/       : Click CLI entry point for operators
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
