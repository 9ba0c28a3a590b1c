from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import Schedule


class ScheduleRepository(Protocol):
    def get_for_employee_and_date(self, tenant_id: str, *, employee_id: str, work_date: date) -> Optional[Schedule]:
        raise NotImplementedError

    def upsert(
        self, tenant_id: str, *, employee_id: str, work_date: date, shift_id: int, note: Optional[str] = None
    ) -> int:
        """Create or update a schedule assignment.

        Returns schedule_id.
        """

        raise NotImplementedError

    def delete(self, tenant_id: str, *, schedule_id: int) -> bool:
        raise NotImplementedError
