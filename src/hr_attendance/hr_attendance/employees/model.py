from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Employee reference data the attendance engine needs.

    `external_id` is the id enrolled on biometric devices. Department and
    position are opaque ids owned elsewhere.
    """

    employee_id: str
    tenant_id: str
    full_name: str
    external_id: Optional[str] = None
    department_id: Optional[str] = None
    position_id: Optional[str] = None
    shift_id: Optional[int] = None
    is_active: bool = True
