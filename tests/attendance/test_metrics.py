from datetime import date, datetime, timezone

from src.hr_attendance.hr_attendance.attendance.metrics import summarize
from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord, Hours
from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus
from src.hr_attendance.hr_attendance.leaves.model import Leave


def _rec(day: int, status: AttendanceStatus, *, working=True, **hours) -> AttendanceRecord:
    return AttendanceRecord(
        tenant_id="acme",
        employee_id="E1",
        work_date=date(2025, 1, day),
        status=status,
        is_working_day=working,
        hours=Hours(**hours),
    )


def test_summarize_counts_and_hours():
    records = [
        _rec(5, AttendanceStatus.ON_TIME, actual=8.25, expected=8, overtime=0.25, total=8.25),
        _rec(6, AttendanceStatus.LATE, actual=7.67, expected=8, total=7.67),
        _rec(7, AttendanceStatus.ABSENT, expected=8),
        _rec(8, AttendanceStatus.MISSION, actual=8, expected=8, total=8),
        _rec(9, AttendanceStatus.SICK_LEAVE, expected=8),
        _rec(10, AttendanceStatus.ABSENT, working=False),
    ]
    m = summarize("E1", date(2025, 1, 5), date(2025, 1, 10), records)

    assert m.working_days == 5
    assert m.present_days == 3
    assert m.absent_days == 1
    assert m.late_days == 1
    assert m.mission_days == 1
    assert m.sick_leave_days == 1
    assert m.expected_hours == 40.0
    assert m.actual_hours == 23.92
    assert m.overtime_hours == 0.25


def test_compute_metrics_over_service(container):
    svc = container.attendance_service
    monday = date(2025, 1, 6)
    svc.record_check_in("acme", "E1", time=datetime(2025, 1, 6, 9, 20, tzinfo=timezone.utc))
    svc.record_check_out("acme", "E1", time=datetime(2025, 1, 6, 17, 0, tzinfo=timezone.utc))
    svc.create_from_leave(
        "acme",
        Leave(leave_id="L9", employee_id="E1", leave_type="annual", start_date=date(2025, 1, 7), end_date=date(2025, 1, 7)),
    )

    data = svc.compute_metrics("acme", "E1", start=monday, end=date(2025, 1, 7)).to_dict()

    assert data["start"] == "2025-01-06"
    assert data["working_days"] == 2
    assert data["late_days"] == 1
    assert data["vacation_days"] == 1
    assert data["present_days"] == 1
