from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Schedule:
    """Per-date shift assignment overriding the employee's default shift."""

    schedule_id: int
    tenant_id: str
    employee_id: str
    work_date: date
    shift_id: int
    note: Optional[str] = None
