from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.constants import DEFAULT_EXPECTED_HOURS
from ..core.enums import AttendanceStatus, CheckLocation, CheckMethod
from ..shifts.model import ScheduledWindow


@dataclass(frozen=True)
class CheckIn:
    time: datetime
    method: CheckMethod = CheckMethod.MANUAL
    location: CheckLocation = CheckLocation.OFFICE
    is_late: bool = False
    late_minutes: int = 0


@dataclass(frozen=True)
class CheckOut:
    time: datetime
    method: CheckMethod = CheckMethod.MANUAL
    location: CheckLocation = CheckLocation.OFFICE
    is_early: bool = False
    early_minutes: int = 0


@dataclass(frozen=True)
class Hours:
    actual: float = 0.0
    expected: float = 0.0
    overtime: float = 0.0
    work_from_home: float = 0.0
    total: float = 0.0


@dataclass(frozen=True)
class Flags:
    is_late: bool = False
    is_early_departure: bool = False
    is_missing: bool = False
    needs_approval: bool = False


@dataclass(frozen=True)
class LeaveLink:
    leave_id: str
    leave_type: str
    is_approved: bool = True


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee-day. Unique per (tenant_id, employee_id, work_date).

    Instants are stored aware; `work_date` is the tenant-local date.
    """

    tenant_id: str
    employee_id: str
    work_date: date
    department_id: Optional[str] = None
    position_id: Optional[str] = None
    scheduled_start: Optional[time] = None
    scheduled_end: Optional[time] = None
    expected_hours: float = DEFAULT_EXPECTED_HOURS
    check_in: Optional[CheckIn] = None
    check_out: Optional[CheckOut] = None
    hours: Hours = field(default_factory=Hours)
    status: Optional[AttendanceStatus] = None
    leave: Optional[LeaveLink] = None
    work_from_home: bool = False
    work_from_home_approved: bool = False
    # Marked non-working by an outside process, independent of the calendar.
    is_day_off: bool = False
    flags: Flags = field(default_factory=Flags)
    is_working_day: bool = True
    auto_generated: bool = False
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    notes: Optional[str] = None
    device_id: Optional[str] = None
    record_id: Optional[int] = None

    @property
    def key(self) -> tuple:
        return (self.tenant_id, self.employee_id, self.work_date)

    @property
    def window(self) -> Optional[ScheduledWindow]:
        if self.scheduled_start is None or self.scheduled_end is None:
            return None
        return ScheduledWindow(
            start_time=self.scheduled_start,
            end_time=self.scheduled_end,
            expected_hours=self.expected_hours,
        )

    @property
    def has_approved_leave(self) -> bool:
        return self.leave is not None and self.leave.is_approved

    def to_dict(self) -> dict:
        def _t(value: Optional[time]) -> Optional[str]:
            return value.strftime("%H:%M") if value else None

        return {
            "tenant_id": self.tenant_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "department_id": self.department_id,
            "position_id": self.position_id,
            "scheduled_start": _t(self.scheduled_start),
            "scheduled_end": _t(self.scheduled_end),
            "check_in": (
                {
                    "time": self.check_in.time.isoformat(),
                    "method": self.check_in.method.value,
                    "location": self.check_in.location.value,
                    "is_late": self.check_in.is_late,
                    "late_minutes": self.check_in.late_minutes,
                }
                if self.check_in
                else None
            ),
            "check_out": (
                {
                    "time": self.check_out.time.isoformat(),
                    "method": self.check_out.method.value,
                    "location": self.check_out.location.value,
                    "is_early": self.check_out.is_early,
                    "early_minutes": self.check_out.early_minutes,
                }
                if self.check_out
                else None
            ),
            "hours": {
                "actual": self.hours.actual,
                "expected": self.hours.expected,
                "overtime": self.hours.overtime,
                "work_from_home": self.hours.work_from_home,
                "total": self.hours.total,
            },
            "status": self.status.value if self.status else None,
            "leave": (
                {
                    "leave_id": self.leave.leave_id,
                    "leave_type": self.leave.leave_type,
                    "is_approved": self.leave.is_approved,
                }
                if self.leave
                else None
            ),
            "work_from_home": self.work_from_home,
            "work_from_home_approved": self.work_from_home_approved,
            "flags": {
                "is_late": self.flags.is_late,
                "is_early_departure": self.flags.is_early_departure,
                "is_missing": self.flags.is_missing,
                "needs_approval": self.flags.needs_approval,
            },
            "is_working_day": self.is_working_day,
            "auto_generated": self.auto_generated,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "notes": self.notes,
            "device_id": self.device_id,
        }
