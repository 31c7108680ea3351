"""Unit tests for the append-only day-partitioned writer."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path

import pytest

from daylog.eventlog.model import Actor, Level
from daylog.eventlog.schema import ERRORS, SECURITY
from daylog.eventlog.writer import LogWriter


def _lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


class TestSecurityWriter:
    def test_creates_directory_and_day_file_lazily(self, tmp_path: Path, clock) -> None:
        directory = tmp_path / "log" / "security"
        writer = LogWriter(SECURITY, directory, clock=clock)
        assert not directory.exists()

        assert writer.append(Level.INFO, category="LOGIN") is True
        assert (directory / "security_20250614.log").is_file()

    def test_exact_line(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        writer.append(
            Level.INFO,
            category="LOGIN",
            actor=Actor("alice", 7),
            source_ip="10.0.0.5",
            user_agent="Mozilla/5.0",
            details={"role": "admin"},
        )
        assert _lines(tmp_path / "security_20250614.log") == [
            "[2025-06-14 09:15:02.123] [INFO] [alice(ID:7)] [IP:10.0.0.5] [LOGIN] "
            "role=admin [UserAgent:Mozilla/5.0]"
        ]

    def test_defaults_for_missing_fields(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        writer.append(Level.INFO, category="LOGOUT")
        assert _lines(tmp_path / "security_20250614.log") == [
            "[2025-06-14 09:15:02.123] [INFO] [ANONYMOUS] [IP:N/A] [LOGOUT]  [UserAgent:Unknown]"
        ]

    def test_unknown_level_recorded_as_info(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        writer.append("verbose", category="X")
        writer.append("warn", category="Y")
        lines = _lines(tmp_path / "security_20250614.log")
        assert "[INFO]" in lines[0]
        assert "[WARN]" in lines[1]

    def test_user_agent_truncated(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        writer.append(Level.INFO, category="LOGIN", user_agent="A" * 150)
        line = _lines(tmp_path / "security_20250614.log")[0]
        assert line.endswith("[UserAgent:" + "A" * 100 + "...]")

    def test_appends_in_order(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        for i in range(3):
            writer.append(Level.INFO, category=f"E{i}")
            clock.advance(seconds=1)
        lines = _lines(tmp_path / "security_20250614.log")
        assert [f"[E{i}]" in line for i, line in enumerate(lines)] == [True, True, True]

    def test_day_rollover_starts_new_file(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        clock.set(datetime(2025, 6, 14, 23, 59, 59, 999000))
        writer.append(Level.INFO, category="LATE")
        clock.advance(microseconds=2000)
        writer.append(Level.INFO, category="EARLY")

        assert len(_lines(tmp_path / "security_20250614.log")) == 1
        early = _lines(tmp_path / "security_20250615.log")
        assert early[0].startswith("[2025-06-15 00:00:00.001]")

    def test_millisecond_precision(self, tmp_path: Path, clock) -> None:
        clock.set(datetime(2025, 6, 14, 8, 0, 0, 5999))
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        writer.append(Level.INFO, category="X")
        assert _lines(tmp_path / "security_20250614.log")[0].startswith(
            "[2025-06-14 08:00:00.005]"
        )

    def test_concurrent_appends_do_not_interleave(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(SECURITY, tmp_path, clock=clock)
        payload = "x" * 500

        def worker(n: int) -> None:
            for i in range(50):
                writer.append(Level.INFO, category=f"T{n}", details={"i": i, "pad": payload})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = _lines(tmp_path / "security_20250614.log")
        assert len(lines) == 400
        assert all(line.endswith("[UserAgent:Unknown]") for line in lines)


class TestErrorsWriter:
    def test_line_with_location_and_trailers(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(ERRORS, tmp_path, clock=clock, project_root=Path("/srv/app"))
        writer.append(
            Level.ERROR,
            category="KeyError",
            message="'id'",
            details={"order": 42},
            backtrace=["/srv/app/orders.py:10:in total", "/srv/app/views.py:3:in show"],
        )
        assert _lines(tmp_path / "errors_20250614.log") == [
            "[2025-06-14 09:15:02.123] [ERROR] [ANONYMOUS] [IP:N/A] [KeyError] 'id' "
            "| order=42 [orders.py:10:in total]",
            "  /srv/app/orders.py:10:in total",
            "  /srv/app/views.py:3:in show",
        ]

    def test_level_upper_cased_verbatim(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(ERRORS, tmp_path, clock=clock)
        writer.append("notice", category="Custom", message="m")
        assert "[NOTICE]" in _lines(tmp_path / "errors_20250614.log")[0]

    def test_no_user_agent_on_errors_channel(self, tmp_path: Path, clock) -> None:
        writer = LogWriter(ERRORS, tmp_path, clock=clock)
        writer.append(Level.WARN, category="WARNING", message="m", user_agent="curl")
        assert "UserAgent" not in _lines(tmp_path / "errors_20250614.log")[0]


class TestWriteFailure:
    def test_returns_false_and_logs(self, tmp_path: Path, clock, caplog) -> None:
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory")
        writer = LogWriter(SECURITY, blocker / "security", clock=clock)

        with caplog.at_level(logging.ERROR, logger="daylog"):
            assert writer.append(Level.INFO, category="LOGIN") is False
        assert "Failed to write security log" in caplog.text

    def test_clock_failure_does_not_raise(self, tmp_path: Path) -> None:
        def broken_clock() -> datetime:
            raise RuntimeError("clock gone")

        writer = LogWriter(SECURITY, tmp_path, clock=broken_clock)
        assert writer.append(Level.INFO, category="LOGIN") is False

    @pytest.mark.parametrize("schema", [SECURITY, ERRORS])
    def test_unrenderable_details_do_not_raise(self, tmp_path: Path, clock, schema) -> None:
        class Exploding:
            def __str__(self) -> str:
                raise ValueError("boom")

        writer = LogWriter(schema, tmp_path, clock=clock)
        assert writer.append(Level.INFO, category="X", details={"v": Exploding()}) is False
        assert not writer.path_for(clock().date()).exists()
