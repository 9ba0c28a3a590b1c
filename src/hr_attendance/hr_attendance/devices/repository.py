from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Device


class DeviceRepository(Protocol):
    def create(self, device: Device) -> Device:
        raise NotImplementedError

    def get(self, tenant_id: str, device_id: str) -> Optional[Device]:
        raise NotImplementedError

    def get_by_name(self, tenant_id: str, name: str) -> Optional[Device]:
        raise NotImplementedError

    def update(self, device: Device) -> None:
        """Persist configuration fields. Sync bookkeeping is left untouched."""

        raise NotImplementedError

    def delete(self, tenant_id: str, device_id: str) -> bool:
        raise NotImplementedError

    def list_for_tenant(self, tenant_id: str) -> Sequence[Device]:
        raise NotImplementedError

    def list_auto_sync(self, tenant_id: Optional[str] = None) -> Sequence[Device]:
        """Auto-sync devices of one tenant, or of every tenant when None."""

        raise NotImplementedError

    def try_begin_sync(self, tenant_id: str, device_id: str, *, now: datetime) -> bool:
        """Compare-and-set an active/error device to `syncing`.

        Returns False when the device is already syncing or inactive.
        """

        raise NotImplementedError

    def save_sync_outcome(
        self,
        tenant_id: str,
        device_id: str,
        *,
        success: bool,
        processed_count: int,
        error_summary: Optional[str],
        finished_at: datetime,
    ) -> None:
        raise NotImplementedError

    def release_stale(self, *, stale_before: datetime, message: str, tenant_id: Optional[str] = None) -> int:
        """Move devices stuck in `syncing` since before `stale_before` to `error`."""

        raise NotImplementedError
