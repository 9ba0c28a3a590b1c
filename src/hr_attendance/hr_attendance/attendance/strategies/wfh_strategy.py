from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision, punch_hours


class WorkFromHomeStrategy(AttendanceStrategy):
    """Approved work-from-home day."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.WORK_FROM_HOME, hours=punch_hours(ctx))
