from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision, punch_flags, punch_hours


class PresentStrategy(AttendanceStrategy):
    """Fallback when punches cannot be judged against a schedule."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, flags=punch_flags(ctx), hours=punch_hours(ctx))
