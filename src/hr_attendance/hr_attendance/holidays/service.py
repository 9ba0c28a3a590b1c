from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.validators import require_tenant
from ..core.exceptions import ValidationError
from ..tenants.service import TenantSettingsService
from .model import CalendarOracle, CalendarResult
from .repository import HolidayRepository


class CalendarProvider:
    """Builds a tenant's CalendarOracle from stored holidays and settings."""

    def __init__(self, holidays: HolidayRepository, tenant_settings: TenantSettingsService):
        self._holidays = holidays
        self._tenant_settings = tenant_settings

    def for_range(self, tenant_id: str, start: date, end: date) -> CalendarOracle:
        tenant_id = require_tenant(tenant_id)
        settings = self._tenant_settings.get(tenant_id)
        holidays = self._holidays.list_holidays(tenant_id, start=start, end=end)
        work_days = self._holidays.list_weekend_work_days(tenant_id, start=start, end=end)
        return CalendarOracle(
            weekend_days=tuple(settings.weekend_days),
            holidays={h.holiday_date: h.name for h in holidays},
            weekend_work_days=frozenset(work_days),
        )

    def check(self, tenant_id: str, day: date) -> CalendarResult:
        return self.for_range(tenant_id, day, day).check(day)

    def add_holiday(self, tenant_id: str, holiday_date: date, name: Optional[str] = None) -> None:
        tenant_id = require_tenant(tenant_id)
        name = name.strip() if name else None
        self._holidays.add_holiday(tenant_id, holiday_date=holiday_date, name=name)

    def remove_holiday(self, tenant_id: str, holiday_date: date) -> None:
        tenant_id = require_tenant(tenant_id)
        if not self._holidays.remove_holiday(tenant_id, holiday_date=holiday_date):
            raise ValidationError(f"No holiday on {holiday_date.isoformat()}")

    def add_weekend_work_day(self, tenant_id: str, work_date: date) -> None:
        tenant_id = require_tenant(tenant_id)
        self._holidays.add_weekend_work_day(tenant_id, work_date=work_date)

    def remove_weekend_work_day(self, tenant_id: str, work_date: date) -> None:
        tenant_id = require_tenant(tenant_id)
        if not self._holidays.remove_weekend_work_day(tenant_id, work_date=work_date):
            raise ValidationError(f"No weekend work day on {work_date.isoformat()}")
