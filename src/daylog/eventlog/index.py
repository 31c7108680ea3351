"""Day-file enumeration for one channel directory."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from daylog.core.constants import DAY_FORMAT
from daylog.eventlog.schema import ChannelSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayFile:
    date: date
    filename: str
    path: Path
    size: int
    modified_at: datetime
    date_inferred: bool = False  # filename did not carry a valid date; "today" was assumed


class LogFileIndex:
    """
    Lists ``<prefix>_*.log`` files, newest partition date first.

    A file whose name does not match ``<prefix>_YYYYMMDD.log`` (or whose
    digits are not a calendar date) is listed under today's date with
    ``date_inferred=True`` rather than being excluded.
    """

    def __init__(
        self,
        schema: ChannelSchema,
        directory: Path,
        *,
        today: Callable[[], date] | None = None,
    ) -> None:
        self.schema = schema
        self.directory = Path(directory)
        self._today = today or date.today

    def path_for(self, day: date) -> Path:
        return self.directory / self.schema.filename(day)

    def existing_path(self, day: date) -> Path | None:
        """The day file when it exists (download support), else None."""
        path = self.path_for(day)
        return path if path.is_file() else None

    def date_from_filename(self, filename: str) -> tuple[date, bool]:
        """Return ``(partition_date, inferred)`` for a file name."""
        m = self.schema.filename_pattern.match(filename)
        if m is None:
            return self._today(), True
        try:
            return datetime.strptime(m.group(1), DAY_FORMAT).date(), False
        except ValueError:
            return self._today(), True

    def list_days(self) -> list[DayFile]:
        if not self.directory.is_dir():
            return []

        days: list[DayFile] = []
        for path in self.directory.glob(self.schema.glob):
            try:
                st = path.stat()
            except OSError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                continue
            if not path.is_file():
                continue
            day, inferred = self.date_from_filename(path.name)
            days.append(
                DayFile(
                    date=day,
                    filename=path.name,
                    path=path,
                    size=st.st_size,
                    modified_at=datetime.fromtimestamp(st.st_mtime),
                    date_inferred=inferred,
                )
            )

        days.sort(key=lambda d: (d.date, d.filename), reverse=True)
        return days
