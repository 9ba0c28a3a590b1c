from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Mapping, Optional, Tuple

from ..core.constants import DEFAULT_WEEKEND_DAYS, HOLIDAY_NOTE, WEEKEND_NOTE


@dataclass(frozen=True)
class Holiday:
    tenant_id: str
    holiday_date: date
    name: Optional[str] = None


@dataclass(frozen=True)
class HolidayInfo:
    is_holiday: bool
    note: Optional[str] = None


@dataclass(frozen=True)
class CalendarResult:
    work_date: date
    is_weekend: bool
    is_holiday: bool
    note: Optional[str] = None

    @property
    def is_working_day(self) -> bool:
        return not (self.is_weekend or self.is_holiday)

    @property
    def day_of_week(self) -> str:
        return self.work_date.strftime("%A")

    def to_dict(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "is_weekend": self.is_weekend,
            "is_holiday": self.is_holiday,
            "is_working_day": self.is_working_day,
            "note": self.note,
            "day_of_week": self.day_of_week,
        }


@dataclass(frozen=True)
class CalendarOracle:
    """Pure weekend/holiday lookup for one tenant.

    `weekend_days` are ISO weekday numbers. A date listed in
    `weekend_work_days` is a working day even if it falls on a weekend.
    Holidays always win.
    """

    weekend_days: Tuple[int, ...] = DEFAULT_WEEKEND_DAYS
    holidays: Mapping[date, Optional[str]] = field(default_factory=dict)
    weekend_work_days: FrozenSet[date] = frozenset()

    def is_weekend(self, day: date) -> bool:
        if day in self.weekend_work_days:
            return False
        return day.isoweekday() in self.weekend_days

    def holiday_info(self, day: date) -> HolidayInfo:
        if day not in self.holidays:
            return HolidayInfo(is_holiday=False)
        return HolidayInfo(is_holiday=True, note=self.holidays[day] or HOLIDAY_NOTE)

    def check(self, day: date) -> CalendarResult:
        holiday = self.holiday_info(day)
        weekend = self.is_weekend(day)
        if holiday.is_holiday:
            note = holiday.note
        elif weekend:
            note = WEEKEND_NOTE
        else:
            note = None
        return CalendarResult(work_date=day, is_weekend=weekend, is_holiday=holiday.is_holiday, note=note)
