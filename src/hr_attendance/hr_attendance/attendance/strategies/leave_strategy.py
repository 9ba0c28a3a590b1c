from __future__ import annotations

from ...core.enums import AttendanceStatus, LeaveType
from ..model import Hours
from .base import AttendanceStrategy, DerivationContext, StatusDecision

_STATUS_BY_LEAVE_TYPE = {
    LeaveType.ANNUAL.value: AttendanceStatus.VACATION,
    LeaveType.CASUAL.value: AttendanceStatus.VACATION,
    LeaveType.SICK.value: AttendanceStatus.SICK_LEAVE,
    LeaveType.MISSION.value: AttendanceStatus.MISSION,
}


class LeaveStrategy(AttendanceStrategy):
    """Approved leave linked to the day."""

    def decide(self, ctx: DerivationContext) -> StatusDecision:
        leave_type = (ctx.record.leave.leave_type or "").strip().lower()
        status = _STATUS_BY_LEAVE_TYPE.get(leave_type, AttendanceStatus.VACATION)
        expected = float(ctx.record.expected_hours)

        if status == AttendanceStatus.MISSION:
            hours = Hours(actual=expected, expected=expected, total=expected)
        else:
            hours = Hours(expected=expected)
        return StatusDecision(status=status, hours=hours)
