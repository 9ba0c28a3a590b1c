from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision, punch_flags, punch_hours


class EarlyLeaveStrategy(AttendanceStrategy):
    """Early check-out after an on-time check-in."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.EARLY_DEPARTURE,
            flags=punch_flags(ctx),
            hours=punch_hours(ctx),
        )
