from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from src.hr_attendance.hr_attendance.attendance.engine import StatusEngine, compute_timing, derive_status
from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord, CheckIn, CheckOut, LeaveLink
from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus, CheckLocation
from src.hr_attendance.hr_attendance.holidays.model import CalendarOracle

UTC = ZoneInfo("UTC")
MONDAY = date(2025, 1, 6)
FRIDAY = date(2025, 1, 10)
ORACLE = CalendarOracle(weekend_days=(5, 6), holidays={date(2025, 1, 7): "Founders Day"})


def _record(work_date=MONDAY, *, check_in=None, check_out=None, **kwargs) -> AttendanceRecord:
    return AttendanceRecord(
        tenant_id="acme",
        employee_id="E1",
        work_date=work_date,
        scheduled_start=kwargs.pop("scheduled_start", time(9, 0)),
        scheduled_end=kwargs.pop("scheduled_end", time(17, 0)),
        expected_hours=kwargs.pop("expected_hours", 8.0),
        check_in=CheckIn(time=check_in) if isinstance(check_in, datetime) else check_in,
        check_out=CheckOut(time=check_out) if isinstance(check_out, datetime) else check_out,
        **kwargs,
    )


def _at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def test_late_check_in_then_on_time_checkout_stays_late():
    engine = StatusEngine()
    rec = _record(check_in=_at(MONDAY, 9, 20))
    rec = engine.apply(rec, ORACLE.check(MONDAY), tz=UTC)

    assert rec.status == AttendanceStatus.FORGOT_CHECK_OUT
    assert rec.check_in.is_late is True
    assert rec.check_in.late_minutes == 20

    rec = engine.apply(
        _record(check_in=rec.check_in, check_out=_at(MONDAY, 17, 0)),
        ORACLE.check(MONDAY),
        tz=UTC,
    )
    assert rec.status == AttendanceStatus.LATE
    assert rec.hours.actual == 7.67
    assert rec.hours.total == 7.67
    assert rec.hours.overtime == 0
    assert rec.flags.is_late is True
    assert rec.flags.is_early_departure is False


def test_on_time_punches():
    rec = StatusEngine().apply(
        _record(check_in=_at(MONDAY, 8, 55), check_out=_at(MONDAY, 17, 10)),
        ORACLE.check(MONDAY),
        tz=UTC,
    )
    assert rec.status == AttendanceStatus.ON_TIME
    assert rec.check_in.late_minutes == 0
    assert rec.hours.actual == 8.25
    assert rec.hours.overtime == 0.25


def test_tolerance_keeps_minutes_but_not_late_flag():
    rec = _record(check_in=_at(MONDAY, 9, 4), check_out=_at(MONDAY, 17, 0))
    timing = compute_timing(rec, tz=UTC, tolerance_minutes=5)

    assert timing.is_late is False
    assert timing.late_minutes == 4


def test_early_departure():
    decision = derive_status(
        _record(check_in=_at(MONDAY, 9, 0), check_out=_at(MONDAY, 16, 15)),
        ORACLE.check(MONDAY),
        tz=UTC,
    )
    assert decision.status == AttendanceStatus.EARLY_DEPARTURE
    assert decision.flags.is_early_departure is True


def test_weekend_discards_punches():
    rec = StatusEngine().apply(
        _record(FRIDAY, check_in=_at(FRIDAY, 9, 0), check_out=_at(FRIDAY, 17, 0)),
        ORACLE.check(FRIDAY),
        tz=UTC,
    )
    assert rec.status == AttendanceStatus.ABSENT
    assert rec.is_working_day is False
    assert rec.check_in is None and rec.check_out is None
    assert rec.hours.total == 0
    assert rec.notes == "Weekend"


def test_holiday_note_is_holiday_name():
    rec = StatusEngine().apply(_record(date(2025, 1, 7)), ORACLE.check(date(2025, 1, 7)), tz=UTC)
    assert rec.status == AttendanceStatus.ABSENT
    assert rec.notes == "Founders Day"


def test_mission_leave_credits_expected_hours():
    rec = _record(leave=LeaveLink(leave_id="L1", leave_type="mission"))
    decision = derive_status(rec, ORACLE.check(MONDAY), tz=UTC)

    assert decision.status == AttendanceStatus.MISSION
    assert decision.hours.actual == 8.0
    assert decision.hours.total == 8.0


def test_sick_and_unknown_leave_types():
    sick = derive_status(_record(leave=LeaveLink("L2", "sick")), ORACLE.check(MONDAY), tz=UTC)
    other = derive_status(_record(leave=LeaveLink("L3", "bereavement")), ORACLE.check(MONDAY), tz=UTC)

    assert sick.status == AttendanceStatus.SICK_LEAVE
    assert sick.hours.actual == 0
    assert other.status == AttendanceStatus.VACATION


def test_unapproved_leave_is_ignored():
    rec = _record(leave=LeaveLink("L4", "annual", is_approved=False))
    assert derive_status(rec, ORACLE.check(MONDAY), tz=UTC).status == AttendanceStatus.ABSENT


def test_approved_work_from_home():
    rec = _record(
        check_in=CheckIn(time=_at(MONDAY, 9, 0), location=CheckLocation.HOME),
        check_out=_at(MONDAY, 15, 0),
        work_from_home=True,
        work_from_home_approved=True,
    )
    decision = derive_status(rec, ORACLE.check(MONDAY), tz=UTC)

    assert decision.status == AttendanceStatus.WORK_FROM_HOME
    assert decision.hours.work_from_home == 6.0
    assert decision.hours.actual == 0
    assert decision.hours.total == 6.0


def test_day_off_keeps_leave_status_else_weekend():
    plain = StatusEngine().apply(_record(is_day_off=True), ORACLE.check(MONDAY), tz=UTC)
    kept = StatusEngine().apply(
        _record(is_day_off=True, status=AttendanceStatus.VACATION), ORACLE.check(MONDAY), tz=UTC
    )

    assert plain.status == AttendanceStatus.WEEKEND
    assert plain.is_working_day is False
    assert kept.status == AttendanceStatus.VACATION


def test_checkout_without_check_in_is_absent_and_needs_approval():
    decision = derive_status(_record(check_out=_at(MONDAY, 17, 0)), ORACLE.check(MONDAY), tz=UTC)

    assert decision.status == AttendanceStatus.ABSENT
    assert decision.flags.is_missing is True
    assert decision.flags.needs_approval is True


def test_approved_days_do_not_need_approval():
    approved = {"approved_by": "M1", "approved_at": _at(MONDAY, 18, 0)}
    orphan = derive_status(_record(check_out=_at(MONDAY, 17, 0), **approved), ORACLE.check(MONDAY), tz=UTC)
    forgot = derive_status(_record(check_in=_at(MONDAY, 9, 0), **approved), ORACLE.check(MONDAY), tz=UTC)

    assert orphan.status == AttendanceStatus.ABSENT
    assert orphan.flags.needs_approval is False
    assert forgot.status == AttendanceStatus.FORGOT_CHECK_OUT
    assert forgot.flags.needs_approval is False


def test_no_schedule_means_present():
    rec = _record(scheduled_start=None, scheduled_end=None, check_in=_at(MONDAY, 11, 0), check_out=_at(MONDAY, 15, 0))
    decision = derive_status(rec, ORACLE.check(MONDAY), tz=UTC)

    assert decision.status == AttendanceStatus.PRESENT
    assert decision.flags.is_late is False


def test_checkout_before_check_in_gives_zero_hours():
    rec = _record(check_in=_at(MONDAY, 17, 0), check_out=_at(MONDAY, 9, 0))
    assert compute_timing(rec, tz=UTC).actual_hours == 0


def test_lateness_is_measured_in_tenant_timezone():
    cairo = ZoneInfo("Africa/Cairo")
    # 07:10 UTC is 09:10 in Cairo (UTC+2 in January).
    rec = _record(check_in=_at(MONDAY, 7, 10))
    timing = compute_timing(rec, tz=cairo)

    assert timing.is_late is True
    assert timing.late_minutes == 10


def test_night_shift_checkout_next_morning():
    rec = _record(
        scheduled_start=time(22, 0),
        scheduled_end=time(6, 0),
        check_in=_at(MONDAY, 22, 0),
        check_out=_at(date(2025, 1, 7), 6, 0),
    )
    decision = derive_status(rec, ORACLE.check(MONDAY), tz=UTC)

    assert decision.status == AttendanceStatus.ON_TIME
    assert decision.hours.actual == 8.0
