from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_SYNC_INTERVAL_MINUTES
from ..core.enums import DeviceStatus, DeviceType, SyncOutcome


@dataclass(frozen=True)
class DeviceConnection:
    """Vendor connection settings. Opaque to the registry."""

    ip_address: Optional[str] = None
    port: Optional[int] = None
    api_key: Optional[str] = None
    token: Optional[str] = None
    api_url: Optional[str] = None


@dataclass(frozen=True)
class SyncStats:
    total_syncs: int = 0
    successful_syncs: int = 0
    failed_syncs: int = 0
    last_record_count: int = 0


@dataclass(frozen=True)
class Device:
    device_id: str
    tenant_id: str
    name: str
    device_type: DeviceType
    connection: DeviceConnection = field(default_factory=DeviceConnection)
    auto_sync: bool = True
    sync_interval: int = DEFAULT_SYNC_INTERVAL_MINUTES
    status: DeviceStatus = DeviceStatus.ACTIVE
    stats: SyncStats = field(default_factory=SyncStats)
    last_sync: Optional[datetime] = None
    last_sync_status: Optional[SyncOutcome] = None
    last_sync_error: Optional[str] = None
    sync_started_at: Optional[datetime] = None
    # werkzeug hash of the key push callers present.
    push_key_hash: Optional[str] = None
    notes: Optional[str] = None

    def is_due(self, now: datetime) -> bool:
        if self.last_sync is None:
            return True
        return now - self.last_sync >= timedelta(minutes=int(self.sync_interval))

    def to_dict(self) -> dict:
        return {
            "device_id": self.device_id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "device_type": self.device_type.value,
            "connection": {
                "ip_address": self.connection.ip_address,
                "port": self.connection.port,
                "api_url": self.connection.api_url,
                "has_api_key": bool(self.connection.api_key),
                "has_token": bool(self.connection.token),
            },
            "auto_sync": self.auto_sync,
            "sync_interval": self.sync_interval,
            "status": self.status.value,
            "stats": {
                "total_syncs": self.stats.total_syncs,
                "successful_syncs": self.stats.successful_syncs,
                "failed_syncs": self.stats.failed_syncs,
                "last_record_count": self.stats.last_record_count,
            },
            "last_sync": self.last_sync.isoformat() if self.last_sync else None,
            "last_sync_status": self.last_sync_status.value if self.last_sync_status else None,
            "last_sync_error": self.last_sync_error,
            "sync_started_at": self.sync_started_at.isoformat() if self.sync_started_at else None,
            "accepts_push": bool(self.push_key_hash),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ConnectionCheck:
    success: bool
    message: str
    record_count: Optional[int] = None

    def to_dict(self) -> dict:
        data = {"success": self.success, "message": self.message}
        if self.record_count is not None:
            data["record_count"] = self.record_count
        return data
