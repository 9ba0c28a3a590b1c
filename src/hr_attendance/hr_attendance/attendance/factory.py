from __future__ import annotations

from dataclasses import dataclass

from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy, DerivationContext
from .strategies.calendar_strategy import CalendarDayOffStrategy
from .strategies.day_off_strategy import DayOffStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.forgot_checkout_strategy import ForgotCheckOutStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.leave_strategy import LeaveStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.present_strategy import PresentStrategy
from .strategies.wfh_strategy import WorkFromHomeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the first derivation rule that applies.

    Order matters: calendar, leave, work-from-home, day off, then punches.
    """

    def for_context(self, ctx: DerivationContext) -> AttendanceStrategy:
        record = ctx.record

        if not ctx.calendar.is_working_day:
            return CalendarDayOffStrategy()
        if ctx.has_approved_leave:
            return LeaveStrategy()
        if record.work_from_home and record.work_from_home_approved:
            return WorkFromHomeStrategy()
        if record.is_day_off:
            return DayOffStrategy()
        if record.check_in is None:
            return AbsentStrategy()
        if record.check_out is None:
            return ForgotCheckOutStrategy()
        if record.window is None:
            return PresentStrategy()
        if ctx.timing.is_late:
            return LateStrategy()
        if ctx.timing.is_early:
            return EarlyLeaveStrategy()
        return NormalStrategy()
