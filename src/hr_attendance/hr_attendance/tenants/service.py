from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..common.datetime_utils import load_zone
from ..common.validators import require_tenant
from ..core.constants import DEFAULT_LATE_TOLERANCE_MINUTES, DEFAULT_TIMEZONE, DEFAULT_WEEKEND_DAYS
from ..core.exceptions import ValidationError
from .model import TenantSettings
from .repository import TenantSettingsRepository

log = logging.getLogger(__name__)


class TenantSettingsService:
    """Resolves tenant settings, falling back to application defaults."""

    def __init__(
        self,
        settings: TenantSettingsRepository,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
        default_tolerance_minutes: int = DEFAULT_LATE_TOLERANCE_MINUTES,
        default_weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
    ):
        self._settings = settings
        self._default_timezone = default_timezone
        self._default_tolerance = int(default_tolerance_minutes)
        self._default_weekend = tuple(default_weekend_days)

    def get(self, tenant_id: str) -> TenantSettings:
        tenant_id = require_tenant(tenant_id)
        found = self._settings.get(tenant_id)
        if found:
            return found
        return TenantSettings(
            tenant_id=tenant_id,
            timezone=self._default_timezone,
            late_tolerance_minutes=self._default_tolerance,
            weekend_days=self._default_weekend,
        )

    def update(
        self,
        tenant_id: str,
        *,
        timezone: Optional[str] = None,
        late_tolerance_minutes: Optional[int] = None,
        weekend_days: Optional[Iterable[int]] = None,
    ) -> TenantSettings:
        current = self.get(tenant_id)
        if timezone is not None:
            load_zone(timezone)
        try:
            tolerance = (
                int(late_tolerance_minutes) if late_tolerance_minutes is not None else current.late_tolerance_minutes
            )
            days = tuple(sorted({int(d) for d in weekend_days})) if weekend_days is not None else current.weekend_days
        except (TypeError, ValueError) as exc:
            raise ValidationError("late_tolerance_minutes and weekend_days must be integers") from exc
        if tolerance < 0:
            raise ValidationError("late_tolerance_minutes must not be negative")
        if any(d < 1 or d > 7 for d in days):
            raise ValidationError("weekend_days must be ISO weekday numbers (1-7)")

        updated = TenantSettings(
            tenant_id=current.tenant_id,
            timezone=timezone or current.timezone,
            late_tolerance_minutes=tolerance,
            weekend_days=days,
        )
        self._settings.save(updated)
        log.info("Updated settings for tenant %s: %s", updated.tenant_id, updated.to_dict())
        return updated
