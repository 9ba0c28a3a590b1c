from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def list_holidays(self, tenant_id: str, *, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError

    def list_weekend_work_days(self, tenant_id: str, *, start: date, end: date) -> Sequence[date]:
        raise NotImplementedError

    def add_holiday(self, tenant_id: str, *, holiday_date: date, name: Optional[str] = None) -> None:
        raise NotImplementedError

    def remove_holiday(self, tenant_id: str, *, holiday_date: date) -> bool:
        raise NotImplementedError

    def add_weekend_work_day(self, tenant_id: str, *, work_date: date) -> None:
        raise NotImplementedError

    def remove_weekend_work_day(self, tenant_id: str, *, work_date: date) -> bool:
        raise NotImplementedError
