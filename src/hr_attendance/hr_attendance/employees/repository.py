from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, tenant_id: str, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_external_id(self, tenant_id: str, external_id: str) -> Optional[Employee]:
        """Look up an employee by the id enrolled on attendance devices."""

        raise NotImplementedError
