from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from .model import AttendanceRecord

RecordMutator = Callable[[Optional[AttendanceRecord]], AttendanceRecord]


class AttendanceRepository(Protocol):
    def get(self, tenant_id: str, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def update_atomic(
        self,
        tenant_id: str,
        employee_id: str,
        work_date: date,
        mutate: RecordMutator,
    ) -> AttendanceRecord:
        """Read-modify-write one record under a row lock.

        `mutate` receives the current record (or None) and returns the record
        to persist. Exceptions raised by `mutate` abort the write.
        """

        raise NotImplementedError

    def list_range(
        self,
        tenant_id: str,
        *,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
        department_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
