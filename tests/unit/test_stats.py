"""Unit tests for daily statistics and N-day series."""

from __future__ import annotations

from datetime import date, datetime

from daylog.eventlog import ErrorLog, SecurityLog
from daylog.eventlog.model import Actor, RequestInfo
from daylog.eventlog.schema import ERRORS, SECURITY

DAY = date(2025, 6, 14)


class TestSecurityStats:
    def test_empty_day(self, security_log: SecurityLog) -> None:
        stats = security_log.daily_statistics(DAY)
        assert stats.as_dict(SECURITY) == {
            "total_events": 0,
            "logins": 0,
            "logouts": 0,
            "failed_logins": 0,
            "unauthorized_attempts": 0,
            "unique_users": 0,
            "unique_ips": 0,
            "events_by_hour": {},
        }

    def test_login_failed_unauthorized(self, security_log: SecurityLog) -> None:
        request = RequestInfo(remote_addr="10.0.0.5")
        security_log.log_login(Actor("alice", 1), request)
        security_log.log_failed_login("mallory", RequestInfo(remote_addr="10.0.0.9"))
        security_log.log_unauthorized_access(Actor("alice", 1), "delete_user", request)

        summary = security_log.daily_statistics(DAY).as_dict(SECURITY)
        assert summary["total_events"] == 3
        assert summary["logins"] == 1
        assert summary["failed_logins"] == 1
        assert summary["unauthorized_attempts"] == 1
        assert summary["logouts"] == 0
        # alice(ID:1) and ANONYMOUS
        assert summary["unique_users"] == 2
        assert summary["unique_ips"] == 2
        assert summary["events_by_hour"] == {9: 3}

    def test_events_by_hour(self, security_log: SecurityLog, clock) -> None:
        for hour in (1, 1, 13, 23):
            clock.set(datetime(2025, 6, 14, hour, 30))
            security_log.log_action(None, "tick", None)
        stats = security_log.daily_statistics(DAY)
        assert stats.events_by_hour == {1: 2, 13: 1, 23: 1}
        assert list(stats.events_by_hour) == [1, 13, 23]

    def test_unparseable_timestamp_counted_in_hour_zero(self, security_log: SecurityLog) -> None:
        security_log.log_action(None, "tick", None)
        path = security_log.writer.path_for(DAY)
        with path.open("a", encoding="utf-8") as fh:
            fh.write("[yesterday-ish] [INFO] [ANONYMOUS] [IP:N/A] [ODD]  [UserAgent:Unknown]\n")

        stats = security_log.daily_statistics(DAY)
        assert stats.total_events == 2
        assert stats.events_by_hour == {0: 1, 9: 1}
        assert stats.unparsed_timestamps == 1

    def test_counts_beyond_read_window(self, security_log: SecurityLog) -> None:
        for _ in range(10_001):
            security_log.log_logout(None, None)
        assert security_log.daily_statistics(DAY).count("category", "LOGOUT") == 10_001


class TestErrorStats:
    def test_keys_and_counts(self, error_log: ErrorLog) -> None:
        error_log.log_warning("low disk")
        error_log.log_error(ValueError("bad"))
        error_log.log_error(ValueError("worse"))
        error_log.log_critical(MemoryError("oom"))

        summary = error_log.daily_statistics(DAY).as_dict(ERRORS)
        assert list(summary) == [
            "total_errors",
            "critical_errors",
            "errors",
            "warnings",
            "unique_error_types",
            "errors_by_type",
            "errors_by_hour",
        ]
        assert summary["total_errors"] == 4
        assert summary["critical_errors"] == 1
        assert summary["errors"] == 2
        assert summary["warnings"] == 1
        assert summary["unique_error_types"] == 3
        assert summary["errors_by_type"] == {"WARNING": 1, "ValueError": 2, "MemoryError": 1}


class TestSeries:
    def test_days_oldest_first(self, security_log: SecurityLog, clock) -> None:
        clock.set(datetime(2025, 6, 12, 10, 0))
        security_log.log_logout(None, None)
        clock.set(datetime(2025, 6, 14, 10, 0))
        security_log.log_logout(None, None)
        security_log.log_logout(None, None)

        series = security_log.series(DAY, 3)
        assert [e.date for e in series] == [date(2025, 6, 12), date(2025, 6, 13), DAY]
        assert [e.stats.total_events for e in series] == [1, 0, 2]

    def test_default_seven_days(self, security_log: SecurityLog) -> None:
        series = security_log.series(DAY)
        assert len(series) == 7
        assert series[0].date == date(2025, 6, 8)
        assert series[-1].date == DAY
