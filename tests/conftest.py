from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord
from src.hr_attendance.hr_attendance.container import Container, assemble_container
from src.hr_attendance.hr_attendance.core.enums import DeviceStatus, SyncOutcome
from src.hr_attendance.hr_attendance.devices.model import Device, SyncStats
from src.hr_attendance.hr_attendance.employees.model import Employee
from src.hr_attendance.hr_attendance.holidays.model import Holiday
from src.hr_attendance.hr_attendance.schedules.model import Schedule
from src.hr_attendance.hr_attendance.shifts.model import Shift
from src.hr_attendance.hr_attendance.tenants.model import TenantSettings

TENANT = "acme"


@dataclass
class InMemoryTenantSettings:
    by_tenant: dict[str, TenantSettings] = field(default_factory=dict)

    def get(self, tenant_id: str) -> Optional[TenantSettings]:
        return self.by_tenant.get(tenant_id)

    def save(self, settings: TenantSettings) -> None:
        self.by_tenant[settings.tenant_id] = settings


@dataclass
class InMemoryHolidays:
    names: dict[tuple[str, date], Optional[str]] = field(default_factory=dict)
    work_days: set[tuple[str, date]] = field(default_factory=set)

    def list_holidays(self, tenant_id: str, *, start: date, end: date):
        return [
            Holiday(tenant_id=t, holiday_date=d, name=n)
            for (t, d), n in sorted(self.names.items())
            if t == tenant_id and start <= d <= end
        ]

    def list_weekend_work_days(self, tenant_id: str, *, start: date, end: date):
        return [d for (t, d) in self.work_days if t == tenant_id and start <= d <= end]

    def add_holiday(self, tenant_id: str, *, holiday_date: date, name: Optional[str] = None) -> None:
        self.names[(tenant_id, holiday_date)] = name

    def remove_holiday(self, tenant_id: str, *, holiday_date: date) -> bool:
        return self.names.pop((tenant_id, holiday_date), "missing") != "missing"

    def add_weekend_work_day(self, tenant_id: str, *, work_date: date) -> None:
        self.work_days.add((tenant_id, work_date))

    def remove_weekend_work_day(self, tenant_id: str, *, work_date: date) -> bool:
        if (tenant_id, work_date) not in self.work_days:
            return False
        self.work_days.discard((tenant_id, work_date))
        return True


@dataclass
class InMemoryShifts:
    shifts: dict[tuple[str, int], Shift] = field(default_factory=dict)

    def get_by_id(self, tenant_id: str, shift_id: int) -> Optional[Shift]:
        return self.shifts.get((tenant_id, int(shift_id)))


@dataclass
class InMemorySchedules:
    items: dict[tuple[str, str, date], Schedule] = field(default_factory=dict)
    next_id: int = 1

    def get_for_employee_and_date(self, tenant_id: str, *, employee_id: str, work_date: date):
        return self.items.get((tenant_id, employee_id, work_date))

    def upsert(self, tenant_id: str, *, employee_id: str, work_date: date, shift_id: int, note=None) -> int:
        key = (tenant_id, employee_id, work_date)
        existing = self.items.get(key)
        schedule_id = existing.schedule_id if existing else self.next_id
        if not existing:
            self.next_id += 1
        self.items[key] = Schedule(schedule_id, tenant_id, employee_id, work_date, int(shift_id), note)
        return schedule_id

    def delete(self, tenant_id: str, *, schedule_id: int) -> bool:
        for key, sc in list(self.items.items()):
            if sc.tenant_id == tenant_id and sc.schedule_id == schedule_id:
                del self.items[key]
                return True
        return False


@dataclass
class InMemoryEmployees:
    by_id: dict[tuple[str, str], Employee] = field(default_factory=dict)

    def get_by_id(self, tenant_id: str, employee_id: str) -> Optional[Employee]:
        return self.by_id.get((tenant_id, str(employee_id)))

    def get_by_external_id(self, tenant_id: str, external_id: str) -> Optional[Employee]:
        for (t, _), e in self.by_id.items():
            if t == tenant_id and e.external_id == str(external_id):
                return e
        return None


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[tuple[str, str, date], AttendanceRecord] = {}
        self._id = 0
        self.writes = 0

    def get(self, tenant_id: str, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self.records.get((tenant_id, str(employee_id), work_date))

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.record_id is None:
            existing = self.get(record.tenant_id, record.employee_id, record.work_date)
            if existing:
                record = replace(record, record_id=existing.record_id)
            else:
                self._id += 1
                record = replace(record, record_id=self._id)
        self.records[record.key] = record
        self.writes += 1
        return record

    def update_atomic(self, tenant_id: str, employee_id: str, work_date: date, mutate):
        return self.upsert(mutate(self.get(tenant_id, employee_id, work_date)))

    def list_range(self, tenant_id: str, *, start: date, end: date, employee_id=None, department_id=None):
        items = [
            r
            for r in self.records.values()
            if r.tenant_id == tenant_id
            and start <= r.work_date <= end
            and (employee_id is None or r.employee_id == employee_id)
            and (department_id is None or r.department_id == department_id)
        ]
        return sorted(items, key=lambda r: (r.work_date, r.employee_id))


@dataclass
class InMemoryDevices:
    devices: dict[tuple[str, str], Device] = field(default_factory=dict)

    def create(self, device: Device) -> Device:
        self.devices[(device.tenant_id, device.device_id)] = device
        return device

    def get(self, tenant_id: str, device_id: str) -> Optional[Device]:
        return self.devices.get((tenant_id, device_id))

    def get_by_name(self, tenant_id: str, name: str) -> Optional[Device]:
        return next((d for d in self.devices.values() if d.tenant_id == tenant_id and d.name == name), None)

    def update(self, device: Device) -> None:
        current = self.devices[(device.tenant_id, device.device_id)]
        if current.status == DeviceStatus.SYNCING:
            device = replace(device, status=current.status, sync_started_at=current.sync_started_at)
        self.devices[(device.tenant_id, device.device_id)] = device

    def delete(self, tenant_id: str, device_id: str) -> bool:
        return self.devices.pop((tenant_id, device_id), None) is not None

    def list_for_tenant(self, tenant_id: str):
        return sorted((d for d in self.devices.values() if d.tenant_id == tenant_id), key=lambda d: d.name)

    def list_auto_sync(self, tenant_id: Optional[str] = None):
        return [d for d in self.devices.values() if d.auto_sync and (tenant_id is None or d.tenant_id == tenant_id)]

    def try_begin_sync(self, tenant_id: str, device_id: str, *, now: datetime) -> bool:
        device = self.devices.get((tenant_id, device_id))
        if device is None or device.status in (DeviceStatus.SYNCING, DeviceStatus.INACTIVE):
            return False
        self.devices[(tenant_id, device_id)] = replace(device, status=DeviceStatus.SYNCING, sync_started_at=now)
        return True

    def save_sync_outcome(self, tenant_id, device_id, *, success, processed_count, error_summary, finished_at):
        device = self.devices[(tenant_id, device_id)]
        stats = device.stats
        self.devices[(tenant_id, device_id)] = replace(
            device,
            status=DeviceStatus.ACTIVE if success else DeviceStatus.ERROR,
            last_sync=finished_at,
            last_sync_status=SyncOutcome.SUCCESS if success else SyncOutcome.FAILED,
            last_sync_error=error_summary,
            sync_started_at=None,
            stats=SyncStats(
                total_syncs=stats.total_syncs + 1,
                successful_syncs=stats.successful_syncs + (1 if success else 0),
                failed_syncs=stats.failed_syncs + (0 if success else 1),
                last_record_count=processed_count,
            ),
        )

    def release_stale(self, *, stale_before: datetime, message: str, tenant_id: Optional[str] = None) -> int:
        released = 0
        for key, d in list(self.devices.items()):
            if d.status != DeviceStatus.SYNCING or (tenant_id is not None and d.tenant_id != tenant_id):
                continue
            if d.sync_started_at is None or d.sync_started_at < stale_before:
                self.devices[key] = replace(d, status=DeviceStatus.ERROR, last_sync_error=message, sync_started_at=None)
                released += 1
        return released


@dataclass
class World:
    """In-memory repositories plus the services wired over them."""

    tenant_settings: InMemoryTenantSettings = field(default_factory=InMemoryTenantSettings)
    holidays: InMemoryHolidays = field(default_factory=InMemoryHolidays)
    shifts: InMemoryShifts = field(default_factory=InMemoryShifts)
    schedules: InMemorySchedules = field(default_factory=InMemorySchedules)
    employees: InMemoryEmployees = field(default_factory=InMemoryEmployees)
    attendance: InMemoryAttendance = field(default_factory=InMemoryAttendance)
    devices: InMemoryDevices = field(default_factory=InMemoryDevices)

    def container(self, **options) -> Container:
        return assemble_container(
            tenant_settings_repo=self.tenant_settings,
            holidays_repo=self.holidays,
            shifts_repo=self.shifts,
            schedules_repo=self.schedules,
            employees_repo=self.employees,
            attendance_repo=self.attendance,
            devices_repo=self.devices,
            options=options,
        )

    def add_shift(self, shift_id: int, start: time, end: time, *, break_minutes: int = 0, tenant_id: str = TENANT):
        shift = Shift(shift_id, tenant_id, f"shift-{shift_id}", start, end, break_minutes)
        self.shifts.shifts[(tenant_id, shift_id)] = shift
        return shift

    def add_employee(self, employee_id: str, *, tenant_id: str = TENANT, **kwargs) -> Employee:
        employee = Employee(employee_id=employee_id, tenant_id=tenant_id, full_name=f"Employee {employee_id}", **kwargs)
        self.employees.by_id[(tenant_id, employee_id)] = employee
        return employee


@pytest.fixture
def world() -> World:
    w = World()
    # Sunday..Thursday week: Friday and Saturday off.
    w.tenant_settings.save(TenantSettings(tenant_id=TENANT, timezone="UTC", weekend_days=(5, 6)))
    w.add_shift(1, time(9, 0), time(17, 0))
    w.add_employee("E1", external_id="101", department_id="D1", shift_id=1)
    return w


@pytest.fixture
def container(world: World) -> Container:
    return world.container()
