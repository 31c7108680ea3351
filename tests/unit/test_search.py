"""Unit tests for per-channel search semantics."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from daylog.eventlog import ErrorLog, SecurityLog
from daylog.eventlog.model import Actor, Level, RequestInfo

DAY = date(2025, 6, 14)


def _seed_security(log: SecurityLog) -> None:
    request = RequestInfo(remote_addr="10.0.0.5", user_agent="Firefox")
    log.log_login(Actor("alice", 1), request)
    log.log_failed_login("Mallory", request)
    log.log_logout(Actor("alice", 1), request)


class TestSecuritySearch:
    def test_case_sensitive(self, security_log: SecurityLog) -> None:
        _seed_security(security_log)
        assert [r.category for r in security_log.search(DAY, "Mallory")] == ["FAILED_LOGIN"]
        assert security_log.search(DAY, "mallory") == []

    def test_matches_any_part_of_line(self, security_log: SecurityLog) -> None:
        _seed_security(security_log)
        assert len(security_log.search(DAY, "[IP:10.0.0.5]")) == 3
        assert len(security_log.search(DAY, "Firefox")) == 3
        assert len(security_log.search(DAY, "alice(ID:1)")) == 2

    def test_empty_query_matches_everything(self, security_log: SecurityLog) -> None:
        _seed_security(security_log)
        assert len(security_log.search(DAY, "")) == 3
        assert len(security_log.search(DAY, None)) == 3

    def test_scans_whole_file(self, security_log: SecurityLog, clock) -> None:
        security_log.log_action(Actor("first", 1), "needle", None)
        for _ in range(10_050):
            security_log.log_action(None, "filler", None)
        assert [r.actor for r in security_log.search(DAY, "NEEDLE")] == ["first(ID:1)"]

    def test_missing_day(self, security_log: SecurityLog) -> None:
        assert security_log.search(date(2020, 1, 1), "") == []


class TestErrorsSearch:
    def test_case_insensitive_over_fields(self, error_log: ErrorLog) -> None:
        error_log.log_warning("Disk almost FULL", context={"volume": "/var"})
        error_log.log_warning("cpu hot")
        assert [r.message for r in error_log.search(DAY, "full")] == ["Disk almost FULL"]
        assert [r.message for r in error_log.search(DAY, "/VAR")] == ["Disk almost FULL"]
        assert len(error_log.search(DAY, "warning")) == 2

    def test_matches_backtrace_entries(self, error_log: ErrorLog) -> None:
        try:
            {}["missing"]
        except KeyError as exc:
            error_log.log_error(exc)
        assert len(error_log.search(DAY, "test_matches_backtrace_entries")) == 1

    def test_empty_query_matches_nothing(self, error_log: ErrorLog) -> None:
        error_log.log_warning("anything")
        assert error_log.search(DAY, "") == []
        assert error_log.search(DAY, None) == []

    def test_bracket_grammar_not_searchable(self, error_log: ErrorLog) -> None:
        error_log.log_warning("plain")
        assert error_log.search(DAY, "[WARN]") == []


class TestChannelsDiffer:
    def test_empty_query(self, tmp_path: Path, clock) -> None:
        security = SecurityLog(tmp_path, clock=clock)
        errors = ErrorLog(tmp_path, clock=clock)
        security.append(Level.INFO, category="LOGIN")
        errors.append(Level.ERROR, category="RuntimeError", message="x")
        assert len(security.search(DAY, "")) == 1
        assert errors.search(DAY, "") == []
