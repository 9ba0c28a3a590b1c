from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision, punch_flags, punch_hours


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, flags=punch_flags(ctx), hours=punch_hours(ctx))
