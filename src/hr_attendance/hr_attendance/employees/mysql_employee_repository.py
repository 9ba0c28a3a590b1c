from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, tenant_id, full_name, external_id, department_id, position_id, shift_id, is_active"


def _row_to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=str(r["employee_id"]),
        tenant_id=r["tenant_id"],
        full_name=r["full_name"],
        external_id=r.get("external_id"),
        department_id=r.get("department_id"),
        position_id=r.get("position_id"),
        shift_id=int(r["shift_id"]) if r.get("shift_id") else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, tenant_id: str, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE tenant_id=%s AND employee_id=%s",
                (tenant_id, str(employee_id)),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def get_by_external_id(self, tenant_id: str, external_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE tenant_id=%s AND external_id=%s",
                (tenant_id, str(external_id)),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None
