from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.enums import CheckLocation, Direction


@dataclass(frozen=True)
class RawLogEntry:
    """One punch as delivered by a device or import, before employee lookup."""

    timestamp: datetime
    external_employee_id: Optional[str] = None
    # Set when the caller already knows the internal id (imports).
    employee_id: Optional[str] = None
    device_id: Optional[str] = None
    direction_hint: Optional[Direction] = None
    location: Optional[CheckLocation] = None
    raw: Optional[Dict[str, Any]] = None

    @property
    def employee_ref(self) -> str:
        return str(self.employee_id or self.external_employee_id or "unknown")


@dataclass(frozen=True)
class EntryError:
    index: int
    employee_ref: str
    message: str

    def to_dict(self) -> dict:
        return {"index": self.index, "employee": self.employee_ref, "message": self.message}


@dataclass
class IngestionResult:
    processed: int = 0
    errors: int = 0
    error_details: List[EntryError] = field(default_factory=list)

    def add_error(self, index: int, employee_ref: str, message: str) -> None:
        self.errors += 1
        self.error_details.append(EntryError(index=index, employee_ref=employee_ref, message=message))

    @property
    def first_error(self) -> Optional[str]:
        return self.error_details[0].message if self.error_details else None

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "errors": self.errors,
            "error_details": [e.to_dict() for e in self.error_details],
        }
