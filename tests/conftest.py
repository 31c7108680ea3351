"""Shared fixtures: a controllable clock and channel logs under tmp_path."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from daylog.eventlog import ErrorLog, SecurityLog

DAY = datetime(2025, 6, 14, 9, 15, 2, 123456)


class FakeClock:
    def __init__(self, start: datetime = DAY) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)

    def set(self, moment: datetime) -> None:
        self.now = moment


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def security_log(tmp_path: Path, clock: FakeClock) -> SecurityLog:
    return SecurityLog(tmp_path / "log", clock=clock)


@pytest.fixture
def error_log(tmp_path: Path, clock: FakeClock) -> ErrorLog:
    return ErrorLog(tmp_path / "log", clock=clock, project_root=Path(__file__).parent)


@pytest.fixture(autouse=True)
def _reset_daylog_logger():
    # CLI commands attach their own handler and stop propagation; undo that
    # so caplog sees engine diagnostics in later tests.
    yield
    logger = logging.getLogger("daylog")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
