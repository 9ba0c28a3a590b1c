from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision, punch_flags, punch_hours


class NormalStrategy(AttendanceStrategy):
    """On time at both ends of the scheduled window."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME, flags=punch_flags(ctx), hours=punch_hours(ctx))
