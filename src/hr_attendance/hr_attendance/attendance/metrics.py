from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable

from ..core.enums import ABSENT_STATUSES, PRESENT_STATUSES, AttendanceStatus
from .model import AttendanceRecord


@dataclass(frozen=True)
class AttendanceMetrics:
    employee_id: str
    start: date
    end: date
    working_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    early_departure_days: int = 0
    vacation_days: int = 0
    sick_leave_days: int = 0
    mission_days: int = 0
    work_from_home_days: int = 0
    expected_hours: float = 0.0
    actual_hours: float = 0.0
    work_from_home_hours: float = 0.0
    total_hours: float = 0.0
    overtime_hours: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["start"] = self.start.isoformat()
        data["end"] = self.end.isoformat()
        return data


def summarize(employee_id: str, start: date, end: date, records: Iterable[AttendanceRecord]) -> AttendanceMetrics:
    """Per-status day counts and hour sums.

    Expected hours and absences only count on working days.
    """

    counts = {
        "working_days": 0,
        "present_days": 0,
        "absent_days": 0,
        "late_days": 0,
        "early_departure_days": 0,
        "vacation_days": 0,
        "sick_leave_days": 0,
        "mission_days": 0,
        "work_from_home_days": 0,
    }
    expected = actual = wfh = total = overtime = 0.0

    for rec in records:
        if rec.is_working_day:
            counts["working_days"] += 1
            expected += rec.hours.expected

        actual += rec.hours.actual
        wfh += rec.hours.work_from_home
        total += rec.hours.total
        overtime += rec.hours.overtime

        status = rec.status
        if status in PRESENT_STATUSES:
            counts["present_days"] += 1
        if status in ABSENT_STATUSES and rec.is_working_day:
            counts["absent_days"] += 1

        if status == AttendanceStatus.LATE:
            counts["late_days"] += 1
        elif status == AttendanceStatus.EARLY_DEPARTURE:
            counts["early_departure_days"] += 1
        elif status == AttendanceStatus.VACATION:
            counts["vacation_days"] += 1
        elif status == AttendanceStatus.SICK_LEAVE:
            counts["sick_leave_days"] += 1
        elif status == AttendanceStatus.MISSION:
            counts["mission_days"] += 1
        elif status == AttendanceStatus.WORK_FROM_HOME:
            counts["work_from_home_days"] += 1

    return AttendanceMetrics(
        employee_id=employee_id,
        start=start,
        end=end,
        expected_hours=round(expected, 2),
        actual_hours=round(actual, 2),
        work_from_home_hours=round(wfh, 2),
        total_hours=round(total, 2),
        overtime_hours=round(overtime, 2),
        **counts,
    )
