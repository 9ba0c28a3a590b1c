from __future__ import annotations

from ...core.enums import PUNCH_DERIVED_STATUSES, AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision


class DayOffStrategy(AttendanceStrategy):
    """Day marked non-working outside the calendar."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        current = ctx.record.status
        if current is not None and current not in PUNCH_DERIVED_STATUSES:
            status = current
        else:
            status = AttendanceStatus.WEEKEND
        return StatusDecision(status=status, is_working_day=False, clear_punches=True)
