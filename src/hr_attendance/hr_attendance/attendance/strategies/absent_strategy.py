from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import Flags
from .base import AttendanceStrategy, DerivationContext, StatusDecision, punch_hours


class AbsentStrategy(AttendanceStrategy):
    """No check-in on a working day."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        # A lone check-out needs the missing check-in confirmed unless approved.
        orphan_checkout = ctx.record.check_out is not None and ctx.record.approved_at is None
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            flags=Flags(is_missing=True, needs_approval=orphan_checkout),
            hours=punch_hours(ctx),
        )
