from __future__ import annotations

from typing import Optional, Protocol

from .model import TenantSettings


class TenantSettingsRepository(Protocol):
    def get(self, tenant_id: str) -> Optional[TenantSettings]:
        raise NotImplementedError

    def save(self, settings: TenantSettings) -> None:
        raise NotImplementedError
