from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.validators import require_non_empty, require_positive_int, require_tenant
from ..core.exceptions import ValidationError
from ..employees.model import Employee
from ..shifts.model import ScheduledWindow, Shift
from ..shifts.repository import ShiftRepository
from .repository import ScheduleRepository


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, shifts: ShiftRepository):
        self._schedules = schedules
        self._shifts = shifts

    def effective_shift(self, employee: Employee, work_date: date) -> Optional[Shift]:
        """Per-date schedule wins over the employee's default shift."""
        sc = self._schedules.get_for_employee_and_date(
            employee.tenant_id, employee_id=employee.employee_id, work_date=work_date
        )
        if sc:
            return self._shifts.get_by_id(employee.tenant_id, sc.shift_id)

        if employee.shift_id:
            return self._shifts.get_by_id(employee.tenant_id, employee.shift_id)
        return None

    def window_for(self, employee: Employee, work_date: date) -> Optional[ScheduledWindow]:
        shift = self.effective_shift(employee, work_date)
        return shift.window() if shift else None

    def assign(
        self,
        tenant_id: str,
        *,
        employee_id: str,
        work_date: date,
        shift_id: int,
        note: Optional[str] = None,
    ) -> int:
        tenant_id = require_tenant(tenant_id)
        employee_id = require_non_empty(employee_id, "employee_id")
        shift_id = require_positive_int(shift_id, "shift_id")
        if not self._shifts.get_by_id(tenant_id, shift_id):
            raise ValidationError(f"Unknown shift: {shift_id}")

        note = note.strip() if note else None
        return self._schedules.upsert(
            tenant_id, employee_id=employee_id, work_date=work_date, shift_id=shift_id, note=note
        )

    def delete(self, tenant_id: str, *, schedule_id: int) -> None:
        tenant_id = require_tenant(tenant_id)
        if not self._schedules.delete(tenant_id, schedule_id=int(schedule_id)):
            raise ValidationError("Schedule not found")
