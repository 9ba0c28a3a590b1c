from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..common.datetime_utils import daterange, localize, now_utc
from ..common.validators import require_non_empty, require_tenant
from ..core.constants import DEFAULT_EXPECTED_HOURS
from ..core.enums import AttendanceStatus, CheckLocation, CheckMethod
from ..core.exceptions import InvalidLeaveRange, RecordNotFound, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..holidays.model import CalendarResult
from ..holidays.service import CalendarProvider
from ..leaves.model import Leave
from ..schedules.service import ScheduleService
from ..shifts.model import ScheduledWindow
from ..tenants.model import TenantSettings
from ..tenants.service import TenantSettingsService
from .engine import StatusEngine
from .metrics import AttendanceMetrics, summarize
from .model import AttendanceRecord, CheckIn, CheckOut, LeaveLink
from .repository import AttendanceRepository

log = logging.getLogger(__name__)

CHECK_IN_FIRST = "Attendance record not found. Please check-in first."


class AttendanceService:
    """Owns every mutation of attendance records.

    Each write is a single atomic read-modify-write that re-derives status,
    flags and hours before persisting.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        schedules: ScheduleService,
        calendar: CalendarProvider,
        tenant_settings: TenantSettingsService,
        *,
        engine: Optional[StatusEngine] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._schedules = schedules
        self._calendar = calendar
        self._tenant_settings = tenant_settings
        self._engine = engine or StatusEngine()

    # ---- helpers -------------------------------------------------------

    def _require_employee(self, tenant_id: str, employee_id: str) -> Employee:
        employee_id = require_non_empty(employee_id, "employee_id")
        employee = self._employees.get_by_id(tenant_id, employee_id)
        if not employee:
            raise ValidationError(f"Employee not found: {employee_id}")
        return employee

    def _seed(
        self,
        employee: Employee,
        work_date: date,
        window: Optional[ScheduledWindow],
        *,
        auto_generated: bool = False,
        department_id: Optional[str] = None,
        position_id: Optional[str] = None,
    ) -> AttendanceRecord:
        return AttendanceRecord(
            tenant_id=employee.tenant_id,
            employee_id=employee.employee_id,
            work_date=work_date,
            department_id=department_id or employee.department_id,
            position_id=position_id or employee.position_id,
            scheduled_start=window.start_time if window else None,
            scheduled_end=window.end_time if window else None,
            expected_hours=window.expected_hours if window else DEFAULT_EXPECTED_HOURS,
            auto_generated=auto_generated,
        )

    def _derive(self, record: AttendanceRecord, calendar: CalendarResult, settings: TenantSettings) -> AttendanceRecord:
        return self._engine.apply(
            record,
            calendar,
            tz=settings.tz,
            tolerance_minutes=settings.late_tolerance_minutes,
        )

    # ---- punches -------------------------------------------------------

    def record_check_in(
        self,
        tenant_id: str,
        employee_id: str,
        *,
        time: datetime,
        work_date: Optional[date] = None,
        method: CheckMethod = CheckMethod.MANUAL,
        location: CheckLocation = CheckLocation.OFFICE,
        device_id: Optional[str] = None,
    ) -> AttendanceRecord:
        tenant_id = require_tenant(tenant_id)
        settings = self._tenant_settings.get(tenant_id)
        at = localize(time, settings.tz)
        work_date = work_date or at.date()

        employee = self._require_employee(tenant_id, employee_id)
        calendar = self._calendar.check(tenant_id, work_date)
        window = self._schedules.window_for(employee, work_date)

        def mutate(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            rec = current or self._seed(employee, work_date, window)
            rec = replace(
                rec,
                check_in=CheckIn(time=at, method=method, location=location),
                device_id=device_id or rec.device_id,
            )
            return self._derive(rec, calendar, settings)

        record = self._attendance.update_atomic(tenant_id, employee.employee_id, work_date, mutate)
        log.debug("Check-in %s/%s on %s -> %s", tenant_id, employee.employee_id, work_date, record.status)
        return record

    def record_check_out(
        self,
        tenant_id: str,
        employee_id: str,
        *,
        time: datetime,
        work_date: Optional[date] = None,
        method: CheckMethod = CheckMethod.MANUAL,
        location: CheckLocation = CheckLocation.OFFICE,
        device_id: Optional[str] = None,
        create_missing: bool = False,
    ) -> AttendanceRecord:
        """Set the check-out half of the day.

        Manual callers must check in first. Device logs may arrive out of
        order, so the ingestion path passes `create_missing=True`.
        """
        tenant_id = require_tenant(tenant_id)
        settings = self._tenant_settings.get(tenant_id)
        at = localize(time, settings.tz)
        work_date = work_date or at.date()

        employee = self._require_employee(tenant_id, employee_id)
        calendar = self._calendar.check(tenant_id, work_date)
        window = self._schedules.window_for(employee, work_date)

        def mutate(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            if (current is None or current.check_in is None) and not create_missing:
                raise RecordNotFound(CHECK_IN_FIRST)
            rec = current or self._seed(employee, work_date, window)
            rec = replace(
                rec,
                check_out=CheckOut(time=at, method=method, location=location),
                device_id=device_id or rec.device_id,
            )
            return self._derive(rec, calendar, settings)

        record = self._attendance.update_atomic(tenant_id, employee.employee_id, work_date, mutate)
        log.debug("Check-out %s/%s on %s -> %s", tenant_id, employee.employee_id, work_date, record.status)
        return record

    def correct_record(
        self,
        tenant_id: str,
        employee_id: str,
        work_date: date,
        *,
        approved_by: str,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Manual correction by an approver.

        Given punches replace the stored ones as manual entries; the others
        are kept. The record is stamped as approved, which clears
        `needs_approval`. Weekends and holidays still clear the punches.
        """
        tenant_id = require_tenant(tenant_id)
        approved_by = require_non_empty(approved_by, "approved_by")
        settings = self._tenant_settings.get(tenant_id)
        employee = self._require_employee(tenant_id, employee_id)
        calendar = self._calendar.check(tenant_id, work_date)
        window = self._schedules.window_for(employee, work_date)
        new_in = localize(check_in, settings.tz) if check_in else None
        new_out = localize(check_out, settings.tz) if check_out else None

        def mutate(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            rec = current or self._seed(employee, work_date, window)
            if new_in is not None:
                location = rec.check_in.location if rec.check_in else CheckLocation.OFFICE
                rec = replace(rec, check_in=CheckIn(time=new_in, method=CheckMethod.MANUAL, location=location))
            if new_out is not None:
                location = rec.check_out.location if rec.check_out else CheckLocation.OFFICE
                rec = replace(rec, check_out=CheckOut(time=new_out, method=CheckMethod.MANUAL, location=location))
            if rec.check_in and rec.check_out and rec.check_out.time < rec.check_in.time:
                raise ValidationError("check_out must not be before check_in")
            rec = replace(rec, approved_by=approved_by, approved_at=now_utc(), notes=notes or rec.notes)
            return self._derive(rec, calendar, settings)

        record = self._attendance.update_atomic(tenant_id, employee.employee_id, work_date, mutate)
        log.info(
            "Corrected %s/%s on %s by %s -> %s",
            tenant_id,
            employee.employee_id,
            work_date,
            approved_by,
            record.status,
        )
        return record

    # ---- leave / WFH / day off ----------------------------------------

    def create_from_leave(self, tenant_id: str, leave: Leave) -> List[AttendanceRecord]:
        """Find-or-create one record per covered day and link the leave. Idempotent."""
        tenant_id = require_tenant(tenant_id)
        if leave.end_date < leave.start_date:
            raise InvalidLeaveRange(
                f"Leave {leave.leave_id} ends ({leave.end_date}) before it starts ({leave.start_date})"
            )
        if not leave.is_approved:
            raise ValidationError(f"Leave {leave.leave_id} is not approved")

        settings = self._tenant_settings.get(tenant_id)
        employee = self._require_employee(tenant_id, leave.employee_id)
        oracle = self._calendar.for_range(tenant_id, leave.start_date, leave.end_date)
        link = LeaveLink(leave_id=str(leave.leave_id), leave_type=leave.leave_type, is_approved=True)

        records: List[AttendanceRecord] = []
        for day in daterange(leave.start_date, leave.end_date):
            calendar = oracle.check(day)
            window = self._schedules.window_for(employee, day)

            def mutate(current: Optional[AttendanceRecord], day=day, calendar=calendar, window=window):
                rec = current or self._seed(
                    employee,
                    day,
                    window,
                    auto_generated=True,
                    department_id=leave.department_id,
                    position_id=leave.position_id,
                )
                return self._derive(replace(rec, leave=link), calendar, settings)

            records.append(self._attendance.update_atomic(tenant_id, employee.employee_id, day, mutate))

        log.info(
            "Linked leave %s (%s) to %d day(s) for %s/%s",
            leave.leave_id,
            leave.leave_type,
            len(records),
            tenant_id,
            employee.employee_id,
        )
        return records

    def set_work_from_home(
        self,
        tenant_id: str,
        employee_id: str,
        work_date: date,
        *,
        approved: bool = True,
        approved_by: Optional[str] = None,
    ) -> AttendanceRecord:
        tenant_id = require_tenant(tenant_id)
        settings = self._tenant_settings.get(tenant_id)
        employee = self._require_employee(tenant_id, employee_id)
        calendar = self._calendar.check(tenant_id, work_date)
        window = self._schedules.window_for(employee, work_date)

        def mutate(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            rec = current or self._seed(employee, work_date, window)
            rec = replace(
                rec,
                work_from_home=True,
                work_from_home_approved=bool(approved),
                approved_by=approved_by if approved else rec.approved_by,
                approved_at=now_utc() if approved else rec.approved_at,
            )
            return self._derive(rec, calendar, settings)

        return self._attendance.update_atomic(tenant_id, employee.employee_id, work_date, mutate)

    def mark_day_off(
        self,
        tenant_id: str,
        employee_id: str,
        work_date: date,
        *,
        status: Optional[AttendanceStatus] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Mark a non-calendar day off (e.g. a compensatory rest day)."""
        tenant_id = require_tenant(tenant_id)
        settings = self._tenant_settings.get(tenant_id)
        employee = self._require_employee(tenant_id, employee_id)
        calendar = self._calendar.check(tenant_id, work_date)
        window = self._schedules.window_for(employee, work_date)

        def mutate(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            rec = current or self._seed(employee, work_date, window)
            rec = replace(rec, is_day_off=True, status=status or rec.status, notes=notes or rec.notes)
            return self._derive(rec, calendar, settings)

        return self._attendance.update_atomic(tenant_id, employee.employee_id, work_date, mutate)

    def recompute(self, tenant_id: str, employee_id: str, work_date: date) -> AttendanceRecord:
        """Re-run derivation, e.g. after a holiday was added or removed."""
        tenant_id = require_tenant(tenant_id)
        employee_id = require_non_empty(employee_id, "employee_id")
        settings = self._tenant_settings.get(tenant_id)
        calendar = self._calendar.check(tenant_id, work_date)

        def mutate(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            if current is None:
                raise RecordNotFound(f"No attendance record for {employee_id} on {work_date.isoformat()}")
            return self._derive(current, calendar, settings)

        return self._attendance.update_atomic(tenant_id, employee_id, work_date, mutate)

    # ---- queries -------------------------------------------------------

    def get_record(self, tenant_id: str, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        tenant_id = require_tenant(tenant_id)
        return self._attendance.get(tenant_id, require_non_empty(employee_id, "employee_id"), work_date)

    def get_records_for_range(
        self,
        tenant_id: str,
        *,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
        department_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        tenant_id = require_tenant(tenant_id)
        if not employee_id and not department_id:
            raise ValidationError("employee_id or department_id is required")
        if end < start:
            raise ValidationError("end must not be before start")
        return self._attendance.list_range(
            tenant_id,
            start=start,
            end=end,
            employee_id=employee_id or None,
            department_id=department_id or None,
        )

    def compute_metrics(self, tenant_id: str, employee_id: str, *, start: date, end: date) -> AttendanceMetrics:
        records = self.get_records_for_range(tenant_id, start=start, end=end, employee_id=employee_id)
        return summarize(employee_id, start, end, records)
