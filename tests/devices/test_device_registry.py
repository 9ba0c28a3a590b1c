from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from src.hr_attendance.hr_attendance.core.enums import DeviceStatus, DeviceType, SyncOutcome
from src.hr_attendance.hr_attendance.core.exceptions import (
    AuthenticationError,
    DeviceBusy,
    DeviceNotFound,
    DuplicateDeviceName,
    UnsupportedDeviceType,
    ValidationError,
)

TENANT = "acme"
NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def _register(container, name="Lobby", device_type=DeviceType.CLOUD, **kwargs):
    return container.device_registry.register(TENANT, name=name, device_type=device_type, **kwargs)


def test_register_and_list(container):
    device = _register(container, connection={"api_url": "https://vendor.example/logs", "api_key": "k"})

    assert device.status == DeviceStatus.ACTIVE
    assert device.connection.api_url == "https://vendor.example/logs"
    assert device.to_dict()["connection"]["has_api_key"] is True
    assert [d.name for d in container.device_registry.list_devices(TENANT)] == ["Lobby"]


def test_duplicate_name_within_tenant(container):
    _register(container)
    with pytest.raises(DuplicateDeviceName):
        _register(container, device_type=DeviceType.ZKTECO)

    # Other tenants may reuse the name.
    other = container.device_registry.register("other", name="Lobby", device_type=DeviceType.QR)
    assert other.tenant_id == "other"


def test_get_from_another_tenant_is_not_found(container):
    device = _register(container)
    with pytest.raises(DeviceNotFound):
        container.device_registry.get("other", device.device_id)


def test_update_config_rejects_syncing_status(container):
    device = _register(container)
    with pytest.raises(ValidationError):
        container.device_registry.update_config(TENANT, device.device_id, {"status": "syncing"})

    updated = container.device_registry.update_config(TENANT, device.device_id, {"sync_interval": 15, "status": "inactive"})
    assert updated.sync_interval == 15
    assert updated.status == DeviceStatus.INACTIVE


def test_sync_lock_is_exclusive(world, container):
    registry = container.device_registry
    device = _register(container)

    registry.mark_sync_start(TENANT, device.device_id, now=NOW)
    with pytest.raises(DeviceBusy):
        registry.mark_sync_start(TENANT, device.device_id, now=NOW + timedelta(minutes=1))

    assert registry.list_for_sync(TENANT, now=NOW) == []
    with pytest.raises(DeviceBusy):
        registry.delete(TENANT, device.device_id)

    registry.record_sync_outcome(TENANT, device.device_id, success=True, processed_count=3, error_summary="ignored", now=NOW)
    stored = registry.get(TENANT, device.device_id)
    assert stored.status == DeviceStatus.ACTIVE
    assert stored.last_sync_status == SyncOutcome.SUCCESS
    assert stored.last_sync_error is None
    assert stored.stats.total_syncs == 1
    assert stored.stats.last_record_count == 3


def test_stale_lock_is_released(world, container):
    registry = container.device_registry
    device = _register(container)
    registry.mark_sync_start(TENANT, device.device_id, now=NOW)

    later = NOW + timedelta(minutes=31)
    assert [d.device_id for d in registry.list_for_sync(TENANT, now=later)] == [device.device_id]
    assert registry.get(TENANT, device.device_id).last_sync_error == "sync lease expired"


def test_inactive_device_cannot_sync(container):
    device = _register(container)
    container.device_registry.update_config(TENANT, device.device_id, {"status": "inactive"})

    with pytest.raises(ValidationError, match="not active"):
        container.device_registry.mark_sync_start(TENANT, device.device_id, now=NOW)


def test_list_due_honours_interval(world, container):
    registry = container.device_registry
    device = _register(container, sync_interval=10)
    world.devices.devices[(TENANT, device.device_id)] = replace(
        registry.get(TENANT, device.device_id), last_sync=NOW - timedelta(minutes=5)
    )

    assert registry.list_due(NOW, tenant_id=TENANT) == []
    assert len(registry.list_due(NOW + timedelta(minutes=5), tenant_id=TENANT)) == 1


def test_push_authentication(container):
    device = _register(container, name="Gate", device_type=DeviceType.MOBILE, push_key="s3cret")
    registry = container.device_registry

    assert registry.authenticate_push(TENANT, device.device_id, "s3cret").device_id == device.device_id
    with pytest.raises(AuthenticationError):
        registry.authenticate_push(TENANT, device.device_id, "wrong")
    with pytest.raises(AuthenticationError):
        registry.authenticate_push(TENANT, "missing", "s3cret")


def test_push_only_adapter(container):
    device = _register(container, name="Kiosk", device_type=DeviceType.QR)
    adapter = container.device_registry.adapter_for(device)

    check = container.device_registry.test_connection(TENANT, device.device_id)
    assert check.success is True
    assert "does not require connection test" in check.message
    with pytest.raises(UnsupportedDeviceType, match="Sync not supported for device type: qr"):
        adapter.fetch_logs(device, since=NOW)
