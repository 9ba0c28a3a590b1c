from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision, punch_flags, punch_hours


class ForgotCheckOutStrategy(AttendanceStrategy):
    """Check-in without a matching check-out."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.FORGOT_CHECK_OUT,
            flags=punch_flags(ctx, needs_approval=ctx.record.approved_at is None),
            hours=punch_hours(ctx),
        )
