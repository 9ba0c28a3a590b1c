from __future__ import annotations

from ...core.constants import HOLIDAY_NOTE
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DerivationContext, StatusDecision


class CalendarDayOffStrategy(AttendanceStrategy):
    """Weekend or official holiday. Overrides any punches on the day."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            is_working_day=False,
            clear_punches=True,
            notes=ctx.calendar.note or HOLIDAY_NOTE,
        )
