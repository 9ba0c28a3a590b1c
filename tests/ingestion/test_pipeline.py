from datetime import date, datetime, time, timedelta, timezone
from unittest import mock

import pytest
import requests

from src.hr_attendance.hr_attendance.core.enums import (
    AttendanceStatus,
    CheckMethod,
    DeviceStatus,
    DeviceType,
    SyncOutcome,
)
from src.hr_attendance.hr_attendance.core.exceptions import AuthenticationError, DeviceBusy
from src.hr_attendance.hr_attendance.ingestion.model import RawLogEntry

TENANT = "acme"
MONDAY = date(2025, 1, 6)
NOW = datetime(2025, 1, 6, 18, 0, tzinfo=timezone.utc)


def _cloud(container, name="Cloud", **kwargs):
    return container.device_registry.register(
        TENANT,
        name=name,
        device_type=DeviceType.CLOUD,
        connection={"api_url": f"https://vendor.example/{name}", "api_key": "k"},
        **kwargs,
    )


def _response(logs):
    resp = mock.Mock()
    resp.content = b"x"
    resp.json.return_value = {"logs": logs}
    return resp


def test_device_batch_builds_on_time_day(container):
    device = _cloud(container)
    logs = [
        {"employeeId": "101", "timestamp": "2025-01-06T08:55:00Z"},
        {"employeeId": "101", "timestamp": "2025-01-06T17:10:00Z"},
    ]
    with mock.patch("requests.get", return_value=_response(logs)):
        result = container.ingestion.sync_device(TENANT, device.device_id, now=NOW)

    assert result.to_dict() == {"processed": 2, "errors": 0, "error_details": []}
    rec = container.attendance_service.get_record(TENANT, "E1", MONDAY)
    assert rec.status == AttendanceStatus.ON_TIME
    assert rec.check_in.method == CheckMethod.BIOMETRIC
    assert rec.device_id == device.device_id

    stored = container.device_registry.get(TENANT, device.device_id)
    assert stored.status == DeviceStatus.ACTIVE
    assert stored.last_sync_status == SyncOutcome.SUCCESS
    assert stored.stats.last_record_count == 2


def test_bad_entries_do_not_stop_the_batch(world, container):
    world.add_employee("E9", external_id="109", is_active=False)
    device = _cloud(container)
    logs = [
        {"employeeId": "101", "timestamp": "2025-01-06T09:00:00Z"},
        {"employeeId": "404", "timestamp": "2025-01-06T09:00:00Z"},
        {"employeeId": "109", "timestamp": "2025-01-06T09:00:00Z"},
        {"timestamp": "2025-01-06T09:00:00Z"},
        {"employeeId": "101", "timestamp": "2025-01-06T17:00:00Z"},
    ]
    with mock.patch("requests.get", return_value=_response(logs)):
        result = container.ingestion.sync_device(TENANT, device.device_id, now=NOW)

    assert result.processed + result.errors == len(logs)
    assert result.errors == 3
    assert [e.index for e in result.error_details] == [1, 2, 3]
    assert result.error_details[0].employee_ref == "404"
    assert "Employee not found" in result.error_details[0].message

    stored = container.device_registry.get(TENANT, device.device_id)
    assert stored.status == DeviceStatus.ERROR
    assert stored.last_sync_status == SyncOutcome.FAILED
    assert stored.last_sync_error == result.first_error


def test_checkout_before_check_in_creates_record(container):
    entry = RawLogEntry(timestamp=datetime(2025, 1, 6, 17, 0, tzinfo=timezone.utc), employee_id="E1")
    result = container.ingestion.ingest(TENANT, [entry])

    assert result.processed == 1
    rec = container.attendance_service.get_record(TENANT, "E1", MONDAY)
    assert rec.status == AttendanceStatus.ABSENT
    assert rec.flags.needs_approval is True
    assert rec.check_out.method == CheckMethod.MANUAL


def test_night_shift_checkout_lands_on_previous_day(world, container):
    world.add_shift(2, time(22, 0), time(6, 0))
    world.add_employee("N1", external_id="201", shift_id=2)
    entries = [
        RawLogEntry(timestamp=datetime(2025, 1, 6, 22, 5, tzinfo=timezone.utc), external_employee_id="201"),
        RawLogEntry(timestamp=datetime(2025, 1, 7, 6, 2, tzinfo=timezone.utc), external_employee_id="201"),
    ]
    result = container.ingestion.ingest(TENANT, entries)

    assert result.errors == 0
    rec = container.attendance_service.get_record(TENANT, "N1", MONDAY)
    assert rec.status == AttendanceStatus.LATE
    assert rec.check_in.late_minutes == 5
    assert rec.hours.actual == 7.95
    assert container.attendance_service.get_record(TENANT, "N1", date(2025, 1, 7)) is None


def test_early_arrival_for_night_shift_is_a_check_in(world, container):
    world.add_shift(2, time(22, 0), time(6, 0))
    world.add_employee("N1", external_id="201", shift_id=2)
    entries = [
        RawLogEntry(timestamp=datetime(2025, 1, 6, 21, 50, tzinfo=timezone.utc), external_employee_id="201"),
        RawLogEntry(timestamp=datetime(2025, 1, 7, 6, 2, tzinfo=timezone.utc), external_employee_id="201"),
    ]
    result = container.ingestion.ingest(TENANT, entries)

    assert result.errors == 0
    rec = container.attendance_service.get_record(TENANT, "N1", MONDAY)
    assert rec.check_in is not None
    assert rec.check_in.time == datetime(2025, 1, 6, 21, 50, tzinfo=timezone.utc)
    assert rec.check_out.time == datetime(2025, 1, 7, 6, 2, tzinfo=timezone.utc)
    assert rec.status == AttendanceStatus.ON_TIME
    assert rec.flags.needs_approval is False
    assert container.attendance_service.get_record(TENANT, "N1", date(2025, 1, 7)) is None


def test_morning_punch_after_night_shift_goes_to_nearest_shift(world, container):
    world.add_shift(2, time(22, 0), time(6, 0))
    world.add_employee("N1", external_id="201", shift_id=2)
    # Tuesday switches N1 to the day shift.
    world.schedules.upsert(TENANT, employee_id="N1", work_date=date(2025, 1, 7), shift_id=1)
    entries = [
        RawLogEntry(timestamp=datetime(2025, 1, 7, 6, 0, tzinfo=timezone.utc), external_employee_id="201"),
        RawLogEntry(timestamp=datetime(2025, 1, 7, 8, 55, tzinfo=timezone.utc), external_employee_id="201"),
    ]
    result = container.ingestion.ingest(TENANT, entries)

    assert result.errors == 0
    monday = container.attendance_service.get_record(TENANT, "N1", MONDAY)
    assert monday.check_out is not None and monday.check_in is None
    tuesday = container.attendance_service.get_record(TENANT, "N1", date(2025, 1, 7))
    assert tuesday.check_in.time == datetime(2025, 1, 7, 8, 55, tzinfo=timezone.utc)


def test_sync_failure_is_recorded_and_raised(container):
    device = _cloud(container)
    with mock.patch("requests.get", side_effect=requests.Timeout("slow vendor")):
        with pytest.raises(requests.Timeout):
            container.ingestion.sync_device(TENANT, device.device_id, now=NOW)

    stored = container.device_registry.get(TENANT, device.device_id)
    assert stored.status == DeviceStatus.ERROR
    assert stored.last_sync_error == "slow vendor"
    assert stored.stats.failed_syncs == 1


def test_sync_since_uses_last_sync_or_lookback(container):
    device = _cloud(container)
    with mock.patch("requests.get", return_value=_response([])) as get:
        container.ingestion.sync_device(TENANT, device.device_id, now=NOW)
        container.ingestion.sync_device(TENANT, device.device_id, now=NOW + timedelta(minutes=10))

    first, second = (c.kwargs["params"]["since"] for c in get.call_args_list)
    assert first == (NOW - timedelta(hours=24)).isoformat()
    assert second == NOW.isoformat()


def test_push_logs_requires_device_key(container):
    device = container.device_registry.register(
        TENANT, name="Phone", device_type=DeviceType.MOBILE, auto_sync=False, push_key="s3cret"
    )
    payload = [{"employeeId": "101", "timestamp": "2025-01-06T09:00:00Z", "type": "in"}]

    with pytest.raises(AuthenticationError):
        container.ingestion.push_logs(TENANT, device.device_id, "nope", payload)

    result = container.ingestion.push_logs(TENANT, device.device_id, "s3cret", payload)
    assert result.processed == 1


def test_push_to_busy_device_is_rejected(container):
    device = container.device_registry.register(TENANT, name="Phone", device_type=DeviceType.MOBILE, push_key="k")
    container.device_registry.mark_sync_start(TENANT, device.device_id)

    with pytest.raises(DeviceBusy):
        container.ingestion.push_logs(TENANT, device.device_id, "k", [])


def test_import_rows_without_device(container):
    rows = [
        {"employee_id": "E1", "date": "2025-01-06", "time": "09:00", "direction": "in"},
        {"external_id": "101", "date": "2025-01-06", "time": "17:00", "direction": "out"},
        {"employee_id": "E1", "date": "not-a-date", "time": "09:00"},
    ]
    result = container.ingestion.import_rows(TENANT, rows)

    assert result.processed == 2
    assert result.errors == 1
    rec = container.attendance_service.get_record(TENANT, "E1", MONDAY)
    assert rec.status == AttendanceStatus.ON_TIME
    assert rec.check_in.method == CheckMethod.MANUAL


def test_sync_all_due_reports_each_device(world, container):
    ok_device = _cloud(container, name="A")
    busy = _cloud(container, name="B")
    container.device_registry.register(TENANT, name="C", device_type=DeviceType.QR)
    container.device_registry.mark_sync_start(TENANT, busy.device_id, now=NOW)

    with mock.patch("requests.get", return_value=_response([])):
        summaries = container.ingestion.sync_all_due(NOW, tenant_id=TENANT)

    by_name = {s["name"]: s for s in summaries}
    assert by_name["A"]["status"] == "synced"
    assert "B" not in by_name
    assert by_name["C"]["status"] == "failed"
    assert "Sync not supported" in by_name["C"]["error"]
    assert container.device_registry.get(TENANT, ok_device.device_id).last_sync == NOW
