from __future__ import annotations

from datetime import date
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Schedule
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, tenant_id: str, *, employee_id: str, work_date: date) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, tenant_id, employee_id, work_date, shift_id, note
                FROM schedules
                WHERE tenant_id=%s AND employee_id=%s AND work_date=%s
                """,
                (tenant_id, str(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Schedule(
                schedule_id=int(r["schedule_id"]),
                tenant_id=r["tenant_id"],
                employee_id=str(r["employee_id"]),
                work_date=r["work_date"],
                shift_id=int(r["shift_id"]),
                note=r.get("note"),
            )

    def upsert(
        self, tenant_id: str, *, employee_id: str, work_date: date, shift_id: int, note: Optional[str] = None
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(tenant_id, employee_id, work_date, shift_id, note)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE shift_id=VALUES(shift_id), note=VALUES(note)
                """,
                (tenant_id, str(employee_id), work_date, int(shift_id), note),
            )

            # On update lastrowid can be 0; fetch schedule_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT schedule_id FROM schedules WHERE tenant_id=%s AND employee_id=%s AND work_date=%s",
                (tenant_id, str(employee_id), work_date),
            )
            r = fetchone(cur)
            return int(r["schedule_id"]) if r else 0

    def delete(self, tenant_id: str, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE tenant_id=%s AND schedule_id=%s", (tenant_id, int(schedule_id)))
            return cur.rowcount > 0
