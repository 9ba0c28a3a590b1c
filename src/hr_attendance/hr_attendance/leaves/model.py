from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Leave:
    """An approved leave handed over by the leave workflow. Read-only here."""

    leave_id: str
    employee_id: str
    leave_type: str
    start_date: date
    end_date: date
    department_id: Optional[str] = None
    position_id: Optional[str] = None
    is_approved: bool = True
