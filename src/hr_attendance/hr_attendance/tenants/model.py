from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple
from zoneinfo import ZoneInfo

from ..common.datetime_utils import load_zone
from ..core.constants import DEFAULT_LATE_TOLERANCE_MINUTES, DEFAULT_TIMEZONE, DEFAULT_WEEKEND_DAYS


@dataclass(frozen=True)
class TenantSettings:
    """Per-tenant attendance settings."""

    tenant_id: str
    timezone: str = DEFAULT_TIMEZONE
    late_tolerance_minutes: int = DEFAULT_LATE_TOLERANCE_MINUTES
    # ISO weekday numbers, Monday=1.
    weekend_days: Tuple[int, ...] = field(default=DEFAULT_WEEKEND_DAYS)

    @property
    def tz(self) -> ZoneInfo:
        return load_zone(self.timezone)

    def to_dict(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "timezone": self.timezone,
            "late_tolerance_minutes": self.late_tolerance_minutes,
            "weekend_days": list(self.weekend_days),
        }
