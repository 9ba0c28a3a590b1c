from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import DeviceStatus, DeviceType, SyncOutcome
from ..core.exceptions import DuplicateDeviceName
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import Device, DeviceConnection, SyncStats
from .repository import DeviceRepository

_SELECT = """
    SELECT device_id, tenant_id, name, device_type,
           ip_address, port, api_key, token, api_url,
           auto_sync, sync_interval, status,
           total_syncs, successful_syncs, failed_syncs, last_record_count,
           last_sync, last_sync_status, last_sync_error, sync_started_at,
           push_key_hash, notes
    FROM attendance_devices
"""

_DUPLICATE_ENTRY = 1062


def _row_to_device(r: Dict[str, Any]) -> Device:
    return Device(
        device_id=r["device_id"],
        tenant_id=r["tenant_id"],
        name=r["name"],
        device_type=DeviceType(r["device_type"]),
        connection=DeviceConnection(
            ip_address=r.get("ip_address"),
            port=int(r["port"]) if r.get("port") else None,
            api_key=r.get("api_key"),
            token=r.get("token"),
            api_url=r.get("api_url"),
        ),
        auto_sync=bool(r.get("auto_sync")),
        sync_interval=int(r.get("sync_interval") or 0),
        status=DeviceStatus(r["status"]),
        stats=SyncStats(
            total_syncs=int(r.get("total_syncs") or 0),
            successful_syncs=int(r.get("successful_syncs") or 0),
            failed_syncs=int(r.get("failed_syncs") or 0),
            last_record_count=int(r.get("last_record_count") or 0),
        ),
        last_sync=from_db_datetime(r.get("last_sync")),
        last_sync_status=SyncOutcome(r["last_sync_status"]) if r.get("last_sync_status") else None,
        last_sync_error=r.get("last_sync_error"),
        sync_started_at=from_db_datetime(r.get("sync_started_at")),
        push_key_hash=r.get("push_key_hash"),
        notes=r.get("notes"),
    )


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, device: Device) -> Device:
        c = device.connection
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_devices(
                        device_id, tenant_id, name, device_type,
                        ip_address, port, api_key, token, api_url,
                        auto_sync, sync_interval, status, push_key_hash, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        device.device_id,
                        device.tenant_id,
                        device.name,
                        device.device_type.value,
                        c.ip_address,
                        c.port,
                        c.api_key,
                        c.token,
                        c.api_url,
                        int(device.auto_sync),
                        int(device.sync_interval),
                        device.status.value,
                        device.push_key_hash,
                        device.notes,
                    ),
                )
        except mysql.connector.IntegrityError as exc:
            if exc.errno == _DUPLICATE_ENTRY:
                raise DuplicateDeviceName(f"Device name already exists: {device.name}") from exc
            raise
        return device

    def get(self, tenant_id: str, device_id: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE tenant_id=%s AND device_id=%s", (tenant_id, device_id))
            r = fetchone(cur)
            return _row_to_device(r) if r else None

    def get_by_name(self, tenant_id: str, name: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE tenant_id=%s AND name=%s", (tenant_id, name))
            r = fetchone(cur)
            return _row_to_device(r) if r else None

    def update(self, device: Device) -> None:
        c = device.connection
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE attendance_devices
                    SET name=%s, device_type=%s,
                        ip_address=%s, port=%s, api_key=%s, token=%s, api_url=%s,
                        auto_sync=%s, sync_interval=%s, push_key_hash=%s, notes=%s,
                        status=IF(status='syncing', status, %s)
                    WHERE tenant_id=%s AND device_id=%s
                    """,
                    (
                        device.name,
                        device.device_type.value,
                        c.ip_address,
                        c.port,
                        c.api_key,
                        c.token,
                        c.api_url,
                        int(device.auto_sync),
                        int(device.sync_interval),
                        device.push_key_hash,
                        device.notes,
                        device.status.value,
                        device.tenant_id,
                        device.device_id,
                    ),
                )
        except mysql.connector.IntegrityError as exc:
            if exc.errno == _DUPLICATE_ENTRY:
                raise DuplicateDeviceName(f"Device name already exists: {device.name}") from exc
            raise

    def delete(self, tenant_id: str, device_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_devices WHERE tenant_id=%s AND device_id=%s", (tenant_id, device_id))
            return cur.rowcount > 0

    def list_for_tenant(self, tenant_id: str) -> Sequence[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE tenant_id=%s ORDER BY name", (tenant_id,))
            return [_row_to_device(r) for r in fetchall(cur)]

    def list_auto_sync(self, tenant_id: Optional[str] = None) -> Sequence[Device]:
        clauses = ["auto_sync=1"]
        params: list[object] = []
        if tenant_id is not None:
            clauses.append("tenant_id=%s")
            params.append(tenant_id)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {where} ORDER BY tenant_id, name", tuple(params))
            return [_row_to_device(r) for r in fetchall(cur)]

    def try_begin_sync(self, tenant_id: str, device_id: str, *, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_devices
                SET status='syncing', sync_started_at=%s
                WHERE tenant_id=%s AND device_id=%s AND status NOT IN ('syncing', 'inactive')
                """,
                (to_db_datetime(now), tenant_id, device_id),
            )
            return cur.rowcount == 1

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
        status = DeviceStatus.ACTIVE if success else DeviceStatus.ERROR
        outcome = SyncOutcome.SUCCESS if success else SyncOutcome.FAILED
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_devices
                SET status=%s,
                    last_sync=%s,
                    last_sync_status=%s,
                    last_sync_error=%s,
                    sync_started_at=NULL,
                    total_syncs=total_syncs+1,
                    successful_syncs=successful_syncs+%s,
                    failed_syncs=failed_syncs+%s,
                    last_record_count=%s
                WHERE tenant_id=%s AND device_id=%s
                """,
                (
                    status.value,
                    to_db_datetime(finished_at),
                    outcome.value,
                    error_summary,
                    1 if success else 0,
                    0 if success else 1,
                    int(processed_count),
                    tenant_id,
                    device_id,
                ),
            )

    def release_stale(self, *, stale_before: datetime, message: str, tenant_id: Optional[str] = None) -> int:
        clauses = ["status='syncing'", "(sync_started_at IS NULL OR sync_started_at < %s)"]
        params: list[object] = [message, to_db_datetime(stale_before)]
        if tenant_id is not None:
            clauses.append("tenant_id=%s")
            params.append(tenant_id)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_devices
                SET status='error', last_sync_error=%s, sync_started_at=NULL
                WHERE {where}
                """,
                tuple(params),
            )
            return int(cur.rowcount)
