from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Tuple
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class ScheduledWindow:
    """Scheduled start/end time-of-day for one work date."""

    start_time: time
    end_time: time
    expected_hours: float

    @property
    def is_overnight(self) -> bool:
        return self.end_time <= self.start_time

    def bounds(self, work_date: date, tz: ZoneInfo) -> Tuple[datetime, datetime]:
        """Aware start/end instants. Night shifts end on the following day."""
        start = datetime.combine(work_date, self.start_time, tzinfo=tz)
        end_day = work_date + timedelta(days=1) if self.is_overnight else work_date
        end = datetime.combine(end_day, self.end_time, tzinfo=tz)
        return start, end

    def midpoint(self, work_date: date, tz: ZoneInfo) -> datetime:
        start, end = self.bounds(work_date, tz)
        return start + (end - start) / 2

    @property
    def rollover(self) -> time:
        """Middle of the off-duty gap of a night shift.

        Earlier punches belong to the shift that started the day before.
        """
        end = self.end_time.hour * 60 + self.end_time.minute
        start = self.start_time.hour * 60 + self.start_time.minute
        minutes = end + (start - end) // 2
        return time(minutes // 60, minutes % 60)

    def shift_date_for(self, moment: datetime) -> date:
        """Work date of the shift occurrence a local punch falls into."""
        if self.is_overnight and moment.time() < self.rollover:
            return moment.date() - timedelta(days=1)
        return moment.date()


@dataclass(frozen=True)
class Shift:
    shift_id: int
    tenant_id: str
    shift_name: str
    start_time: time
    end_time: time
    break_minutes: int = 0

    @property
    def expected_hours(self) -> float:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        if end <= start:
            end += 24 * 60
        return round(max(0, end - start - int(self.break_minutes)) / 60.0, 2)

    def window(self) -> ScheduledWindow:
        return ScheduledWindow(start_time=self.start_time, end_time=self.end_time, expected_hours=self.expected_hours)
