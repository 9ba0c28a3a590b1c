from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_enum, require_non_empty, require_positive_int, require_tenant
from ..core.constants import DEFAULT_SYNC_INTERVAL_MINUTES, DEFAULT_SYNC_LEASE_MINUTES, SYNC_LEASE_EXPIRED
from ..core.enums import DeviceStatus, DeviceType
from ..core.exceptions import AuthenticationError, DeviceBusy, DeviceNotFound, DuplicateDeviceName, ValidationError
from .adapters.base import DeviceAdapter
from .adapters.factory import DeviceAdapterFactory
from .model import ConnectionCheck, Device, DeviceConnection
from .repository import DeviceRepository

log = logging.getLogger(__name__)

_CONNECTION_FIELDS = ("ip_address", "port", "api_key", "token", "api_url")


def _as_connection(value: Any, base: Optional[DeviceConnection] = None) -> DeviceConnection:
    if value is None:
        return base or DeviceConnection()
    if isinstance(value, DeviceConnection):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError("connection must be an object")
    current = base or DeviceConnection()
    changes = {k: value[k] for k in _CONNECTION_FIELDS if k in value}
    if changes.get("port") not in (None, ""):
        changes["port"] = require_positive_int(changes["port"], "port")
    return replace(current, **changes)


class DeviceRegistry:
    """Per-tenant device catalog and sync bookkeeping.

    The `syncing` status is a lock taken with compare-and-set. A lock held
    longer than `lease_minutes` is released to `error` on the next lookup.
    """

    def __init__(
        self,
        devices: DeviceRepository,
        *,
        adapters: Optional[DeviceAdapterFactory] = None,
        lease_minutes: int = DEFAULT_SYNC_LEASE_MINUTES,
    ):
        self._devices = devices
        self._adapters = adapters or DeviceAdapterFactory()
        self._lease = timedelta(minutes=int(lease_minutes))

    # ---- catalog -------------------------------------------------------

    def register(
        self,
        tenant_id: str,
        *,
        name: str,
        device_type: DeviceType | str,
        connection: Any = None,
        auto_sync: bool = True,
        sync_interval: int = DEFAULT_SYNC_INTERVAL_MINUTES,
        push_key: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Device:
        tenant_id = require_tenant(tenant_id)
        name = require_non_empty(name, "name")
        if self._devices.get_by_name(tenant_id, name):
            raise DuplicateDeviceName(f"Device name already exists: {name}")

        device = Device(
            device_id=uuid.uuid4().hex,
            tenant_id=tenant_id,
            name=name,
            device_type=require_enum(device_type, DeviceType, "device_type"),
            connection=_as_connection(connection),
            auto_sync=bool(auto_sync),
            sync_interval=require_positive_int(sync_interval, "sync_interval"),
            push_key_hash=generate_password_hash(push_key) if push_key else None,
            notes=notes,
        )
        created = self._devices.create(device)
        log.info("Registered %s device %r for tenant %s", created.device_type.value, created.name, tenant_id)
        return created

    def get(self, tenant_id: str, device_id: str) -> Device:
        tenant_id = require_tenant(tenant_id)
        device = self._devices.get(tenant_id, require_non_empty(device_id, "device_id"))
        if not device:
            raise DeviceNotFound(f"Device not found: {device_id}")
        return device

    def list_devices(self, tenant_id: str) -> Sequence[Device]:
        return self._devices.list_for_tenant(require_tenant(tenant_id))

    def update_config(self, tenant_id: str, device_id: str, changes: Mapping[str, Any]) -> Device:
        device = self.get(tenant_id, device_id)
        updated = device

        if "name" in changes:
            name = require_non_empty(changes["name"], "name")
            other = self._devices.get_by_name(device.tenant_id, name)
            if other and other.device_id != device.device_id:
                raise DuplicateDeviceName(f"Device name already exists: {name}")
            updated = replace(updated, name=name)
        if "device_type" in changes:
            updated = replace(updated, device_type=require_enum(changes["device_type"], DeviceType, "device_type"))
        if "connection" in changes:
            updated = replace(updated, connection=_as_connection(changes["connection"], updated.connection))
        if "auto_sync" in changes:
            updated = replace(updated, auto_sync=bool(changes["auto_sync"]))
        if "sync_interval" in changes:
            updated = replace(updated, sync_interval=require_positive_int(changes["sync_interval"], "sync_interval"))
        if "status" in changes:
            status = require_enum(changes["status"], DeviceStatus, "status")
            if status not in (DeviceStatus.ACTIVE, DeviceStatus.INACTIVE):
                raise ValidationError("status can only be set to active or inactive")
            updated = replace(updated, status=status)
        if "push_key" in changes:
            key = changes["push_key"]
            updated = replace(updated, push_key_hash=generate_password_hash(key) if key else None)
        if "notes" in changes:
            updated = replace(updated, notes=changes["notes"])

        self._devices.update(updated)
        return updated

    def delete(self, tenant_id: str, device_id: str) -> None:
        device = self.get(tenant_id, device_id)
        if device.status == DeviceStatus.SYNCING:
            raise DeviceBusy(f"Device {device.name} is syncing")
        self._devices.delete(device.tenant_id, device.device_id)
        log.info("Deleted device %r for tenant %s", device.name, device.tenant_id)

    # ---- sync bookkeeping ---------------------------------------------

    def release_stale_locks(self, now: datetime | None = None, *, tenant_id: Optional[str] = None) -> int:
        now = now or now_utc()
        released = self._devices.release_stale(
            stale_before=now - self._lease,
            message=SYNC_LEASE_EXPIRED,
            tenant_id=tenant_id,
        )
        if released:
            log.warning("Released %d stale sync lock(s)", released)
        return released

    def list_for_sync(self, tenant_id: str, *, now: datetime | None = None) -> Sequence[Device]:
        """Auto-sync devices that are neither syncing nor inactive."""
        tenant_id = require_tenant(tenant_id)
        self.release_stale_locks(now, tenant_id=tenant_id)
        return [
            d
            for d in self._devices.list_auto_sync(tenant_id)
            if d.status not in (DeviceStatus.SYNCING, DeviceStatus.INACTIVE)
        ]

    def list_due(self, now: datetime | None = None, *, tenant_id: Optional[str] = None) -> Sequence[Device]:
        now = now or now_utc()
        self.release_stale_locks(now, tenant_id=tenant_id)
        return [
            d
            for d in self._devices.list_auto_sync(tenant_id)
            if d.status not in (DeviceStatus.SYNCING, DeviceStatus.INACTIVE) and d.is_due(now)
        ]

    def mark_sync_start(self, tenant_id: str, device_id: str, *, now: datetime | None = None) -> Device:
        now = now or now_utc()
        device = self.get(tenant_id, device_id)
        if device.status == DeviceStatus.INACTIVE:
            raise ValidationError("Device is not active")

        self.release_stale_locks(now, tenant_id=device.tenant_id)
        if not self._devices.try_begin_sync(device.tenant_id, device.device_id, now=now):
            log.info("Device %r is busy, sync skipped", device.name)
            raise DeviceBusy(f"Device {device.name} is already syncing")

        log.debug("Sync lock taken on device %r", device.name)
        return replace(device, status=DeviceStatus.SYNCING, sync_started_at=now)

    def record_sync_outcome(
        self,
        tenant_id: str,
        device_id: str,
        *,
        success: bool,
        processed_count: int,
        error_summary: Optional[str] = None,
        now: datetime | None = None,
    ) -> None:
        self._devices.save_sync_outcome(
            require_tenant(tenant_id),
            device_id,
            success=bool(success),
            processed_count=int(processed_count),
            error_summary=None if success else error_summary,
            finished_at=now or now_utc(),
        )

    # ---- adapters / push ----------------------------------------------

    def adapter_for(self, device: Device) -> DeviceAdapter:
        return self._adapters.for_type(device.device_type)

    def test_connection(self, tenant_id: str, device_id: str) -> ConnectionCheck:
        device = self.get(tenant_id, device_id)
        return self.adapter_for(device).test_connection(device)

    def authenticate_push(self, tenant_id: str, device_id: str, api_key: Optional[str]) -> Device:
        try:
            device = self.get(tenant_id, device_id)
        except DeviceNotFound as exc:
            raise AuthenticationError("Invalid device credentials") from exc
        if not api_key or not device.push_key_hash or not check_password_hash(device.push_key_hash, api_key):
            log.warning("Rejected push for device %s of tenant %s", device_id, tenant_id)
            raise AuthenticationError("Invalid device credentials")
        return device
