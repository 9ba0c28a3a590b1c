from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus, CheckLocation, CheckMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    normalize_mysql_time,
    to_db_datetime,
)
from .model import AttendanceRecord, CheckIn, CheckOut, Flags, Hours, LeaveLink
from .repository import AttendanceRepository, RecordMutator

log = logging.getLogger(__name__)

_DEADLOCK_ATTEMPTS = 2

_COLUMNS = (
    "tenant_id",
    "employee_id",
    "work_date",
    "department_id",
    "position_id",
    "scheduled_start",
    "scheduled_end",
    "expected_hours",
    "check_in_time",
    "check_in_method",
    "check_in_location",
    "check_in_is_late",
    "check_in_late_minutes",
    "check_out_time",
    "check_out_method",
    "check_out_location",
    "check_out_is_early",
    "check_out_early_minutes",
    "hours_actual",
    "hours_expected",
    "hours_overtime",
    "hours_work_from_home",
    "hours_total",
    "status",
    "leave_id",
    "leave_type",
    "leave_is_approved",
    "work_from_home",
    "work_from_home_approved",
    "is_day_off",
    "flag_is_late",
    "flag_is_early_departure",
    "flag_is_missing",
    "flag_needs_approval",
    "is_working_day",
    "auto_generated",
    "approved_by",
    "approved_at",
    "notes",
    "device_id",
)
_KEY_COLUMNS = {"tenant_id", "employee_id", "work_date"}

_SELECT = "SELECT record_id, " + ", ".join(_COLUMNS) + " FROM attendance_records"
_UPSERT = (
    "INSERT INTO attendance_records("
    + ", ".join(_COLUMNS)
    + ") VALUES("
    + ",".join(["%s"] * len(_COLUMNS))
    + ") ON DUPLICATE KEY UPDATE "
    + ", ".join(f"{c}=VALUES({c})" for c in _COLUMNS if c not in _KEY_COLUMNS)
)


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    check_in = None
    if r.get("check_in_time"):
        check_in = CheckIn(
            time=from_db_datetime(r["check_in_time"]),
            method=CheckMethod(r["check_in_method"]),
            location=CheckLocation(r["check_in_location"]),
            is_late=bool(r.get("check_in_is_late")),
            late_minutes=int(r.get("check_in_late_minutes") or 0),
        )
    check_out = None
    if r.get("check_out_time"):
        check_out = CheckOut(
            time=from_db_datetime(r["check_out_time"]),
            method=CheckMethod(r["check_out_method"]),
            location=CheckLocation(r["check_out_location"]),
            is_early=bool(r.get("check_out_is_early")),
            early_minutes=int(r.get("check_out_early_minutes") or 0),
        )
    leave = None
    if r.get("leave_id"):
        leave = LeaveLink(
            leave_id=str(r["leave_id"]),
            leave_type=r["leave_type"],
            is_approved=bool(r.get("leave_is_approved")),
        )

    return AttendanceRecord(
        record_id=int(r["record_id"]),
        tenant_id=r["tenant_id"],
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        department_id=r.get("department_id"),
        position_id=r.get("position_id"),
        scheduled_start=normalize_mysql_time(r.get("scheduled_start")),
        scheduled_end=normalize_mysql_time(r.get("scheduled_end")),
        expected_hours=float(r.get("expected_hours") or 0),
        check_in=check_in,
        check_out=check_out,
        hours=Hours(
            actual=float(r.get("hours_actual") or 0),
            expected=float(r.get("hours_expected") or 0),
            overtime=float(r.get("hours_overtime") or 0),
            work_from_home=float(r.get("hours_work_from_home") or 0),
            total=float(r.get("hours_total") or 0),
        ),
        status=AttendanceStatus(r["status"]) if r.get("status") else None,
        leave=leave,
        work_from_home=bool(r.get("work_from_home")),
        work_from_home_approved=bool(r.get("work_from_home_approved")),
        is_day_off=bool(r.get("is_day_off")),
        flags=Flags(
            is_late=bool(r.get("flag_is_late")),
            is_early_departure=bool(r.get("flag_is_early_departure")),
            is_missing=bool(r.get("flag_is_missing")),
            needs_approval=bool(r.get("flag_needs_approval")),
        ),
        is_working_day=bool(r.get("is_working_day")),
        auto_generated=bool(r.get("auto_generated")),
        approved_by=r.get("approved_by"),
        approved_at=from_db_datetime(r.get("approved_at")),
        notes=r.get("notes"),
        device_id=r.get("device_id"),
    )


def _record_params(rec: AttendanceRecord) -> tuple:
    ci, co, h, f = rec.check_in, rec.check_out, rec.hours, rec.flags
    return (
        rec.tenant_id,
        rec.employee_id,
        rec.work_date,
        rec.department_id,
        rec.position_id,
        rec.scheduled_start,
        rec.scheduled_end,
        rec.expected_hours,
        to_db_datetime(ci.time) if ci else None,
        ci.method.value if ci else None,
        ci.location.value if ci else None,
        int(ci.is_late) if ci else 0,
        ci.late_minutes if ci else 0,
        to_db_datetime(co.time) if co else None,
        co.method.value if co else None,
        co.location.value if co else None,
        int(co.is_early) if co else 0,
        co.early_minutes if co else 0,
        h.actual,
        h.expected,
        h.overtime,
        h.work_from_home,
        h.total,
        rec.status.value if rec.status else None,
        rec.leave.leave_id if rec.leave else None,
        rec.leave.leave_type if rec.leave else None,
        int(rec.leave.is_approved) if rec.leave else 0,
        int(rec.work_from_home),
        int(rec.work_from_home_approved),
        int(rec.is_day_off),
        int(f.is_late),
        int(f.is_early_departure),
        int(f.is_missing),
        int(f.needs_approval),
        int(rec.is_working_day),
        int(rec.auto_generated),
        rec.approved_by,
        to_db_datetime(rec.approved_at),
        rec.notes,
        rec.device_id,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, tenant_id: str, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE tenant_id=%s AND employee_id=%s AND work_date=%s",
                (tenant_id, str(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._write(cur, record)

    def update_atomic(
        self,
        tenant_id: str,
        employee_id: str,
        work_date: date,
        mutate: RecordMutator,
    ) -> AttendanceRecord:
        """Locked read-modify-write of one employee-day.

        Two first writes for the same day only hold gap locks and one of them
        is chosen as the deadlock victim; it is retried against the row the
        other one inserted.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                with db_cursor(self._conn_factory) as (_, cur):
                    cur.execute(
                        f"{_SELECT} WHERE tenant_id=%s AND employee_id=%s AND work_date=%s FOR UPDATE",
                        (tenant_id, str(employee_id), work_date),
                    )
                    r = fetchone(cur)
                    current = _row_to_record(r) if r else None
                    updated = mutate(current)
                    return self._write(cur, updated)
            except mysql.connector.Error as exc:
                if exc.errno != errorcode.ER_LOCK_DEADLOCK or attempt == _DEADLOCK_ATTEMPTS:
                    raise
                log.warning(
                    "Deadlock writing %s/%s on %s, retrying (%d/%d)",
                    tenant_id,
                    employee_id,
                    work_date,
                    attempt,
                    _DEADLOCK_ATTEMPTS,
                )

    def list_range(
        self,
        tenant_id: str,
        *,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
        department_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["tenant_id=%s", "work_date BETWEEN %s AND %s"]
        params: list[object] = [tenant_id, start, end]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(str(employee_id))
        if department_id is not None:
            clauses.append("department_id=%s")
            params.append(str(department_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY work_date ASC, employee_id ASC",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def _write(self, cur, record: AttendanceRecord) -> AttendanceRecord:
        cur.execute(_UPSERT, _record_params(record))
        if record.record_id is not None:
            return record

        # On update lastrowid can be 0; fetch record_id.
        if cur.lastrowid:
            return replace(record, record_id=int(cur.lastrowid))
        cur.execute(
            "SELECT record_id FROM attendance_records WHERE tenant_id=%s AND employee_id=%s AND work_date=%s",
            (record.tenant_id, record.employee_id, record.work_date),
        )
        r = fetchone(cur)
        return replace(record, record_id=int(r["record_id"])) if r else record
