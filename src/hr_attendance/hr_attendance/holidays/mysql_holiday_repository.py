from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Holiday
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_holidays(self, tenant_id: str, *, start: date, end: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tenant_id, holiday_date, name
                FROM holidays
                WHERE tenant_id=%s AND holiday_date BETWEEN %s AND %s
                ORDER BY holiday_date
                """,
                (tenant_id, start, end),
            )
            return [
                Holiday(tenant_id=r["tenant_id"], holiday_date=r["holiday_date"], name=r.get("name"))
                for r in fetchall(cur)
            ]

    def list_weekend_work_days(self, tenant_id: str, *, start: date, end: date) -> Sequence[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT work_date
                FROM weekend_work_days
                WHERE tenant_id=%s AND work_date BETWEEN %s AND %s
                """,
                (tenant_id, start, end),
            )
            return [r["work_date"] for r in fetchall(cur)]

    def add_holiday(self, tenant_id: str, *, holiday_date: date, name: Optional[str] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(tenant_id, holiday_date, name)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE name=VALUES(name)
                """,
                (tenant_id, holiday_date, name),
            )

    def remove_holiday(self, tenant_id: str, *, holiday_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE tenant_id=%s AND holiday_date=%s", (tenant_id, holiday_date))
            return cur.rowcount > 0

    def add_weekend_work_day(self, tenant_id: str, *, work_date: date) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO weekend_work_days(tenant_id, work_date) VALUES(%s,%s)",
                (tenant_id, work_date),
            )

    def remove_weekend_work_day(self, tenant_id: str, *, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM weekend_work_days WHERE tenant_id=%s AND work_date=%s", (tenant_id, work_date))
            return cur.rowcount > 0
