from datetime import date, datetime, time, timezone

import pytest

from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus
from src.hr_attendance.hr_attendance.core.exceptions import ValidationError

TENANT = "acme"
MONDAY = date(2025, 1, 6)


def test_per_date_schedule_overrides_default_shift(world, container):
    world.add_shift(2, time(10, 0), time(18, 0), break_minutes=30)
    container.schedule_service.assign(TENANT, employee_id="E1", work_date=MONDAY, shift_id=2, note=" swap ")

    rec = container.attendance_service.record_check_in(
        TENANT, "E1", time=datetime(2025, 1, 6, 9, 50, tzinfo=timezone.utc)
    )

    assert rec.scheduled_start == time(10, 0)
    assert rec.expected_hours == 7.5
    assert rec.check_in.is_late is False
    assert world.schedules.get_for_employee_and_date(TENANT, employee_id="E1", work_date=MONDAY).note == "swap"


def test_default_shift_applies_on_other_days(world, container):
    world.add_shift(2, time(10, 0), time(18, 0))
    container.schedule_service.assign(TENANT, employee_id="E1", work_date=MONDAY, shift_id=2)

    rec = container.attendance_service.record_check_in(
        TENANT, "E1", time=datetime(2025, 1, 7, 9, 50, tzinfo=timezone.utc)
    )
    assert rec.scheduled_start == time(9, 0)


def test_employee_without_shift_is_present(world, container):
    world.add_employee("E2")
    svc = container.attendance_service
    svc.record_check_in(TENANT, "E2", time=datetime(2025, 1, 6, 11, 0, tzinfo=timezone.utc))
    rec = svc.record_check_out(TENANT, "E2", time=datetime(2025, 1, 6, 15, 0, tzinfo=timezone.utc))

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.expected_hours == 8.0
    assert rec.hours.actual == 4.0


def test_assign_unknown_shift(container):
    with pytest.raises(ValidationError, match="Unknown shift"):
        container.schedule_service.assign(TENANT, employee_id="E1", work_date=MONDAY, shift_id=99)


def test_delete_schedule(world, container):
    schedule_id = container.schedule_service.assign(TENANT, employee_id="E1", work_date=MONDAY, shift_id=1)
    container.schedule_service.delete(TENANT, schedule_id=schedule_id)

    with pytest.raises(ValidationError):
        container.schedule_service.delete(TENANT, schedule_id=schedule_id)


def test_marked_day_off(container):
    svc = container.attendance_service
    svc.record_check_in(TENANT, "E1", time=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc))
    rec = svc.mark_day_off(TENANT, "E1", MONDAY, notes="Compensatory rest")

    assert rec.status == AttendanceStatus.WEEKEND
    assert rec.is_working_day is False
    assert rec.check_in is None
    assert rec.notes == "Compensatory rest"
