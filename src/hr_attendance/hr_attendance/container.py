from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.engine import StatusEngine
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_CLOUD_FETCH_LIMIT,
    DEFAULT_CLOUD_TIMEOUT_SECONDS,
    DEFAULT_LATE_TOLERANCE_MINUTES,
    DEFAULT_SYNC_LEASE_MINUTES,
    DEFAULT_TIMEZONE,
    DEFAULT_WEEKEND_DAYS,
)
from .database.connection import DBConfig, DatabaseConnection
from .devices.adapters.factory import DeviceAdapterFactory
from .devices.mysql_device_repository import MySQLDeviceRepository
from .devices.repository import DeviceRepository
from .devices.service import DeviceRegistry
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import CalendarProvider
from .ingestion.pipeline import IngestionPipeline
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .tenants.mysql_tenant_settings_repository import MySQLTenantSettingsRepository
from .tenants.repository import TenantSettingsRepository
from .tenants.service import TenantSettingsService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    tenant_settings_repo: TenantSettingsRepository
    holidays_repo: HolidayRepository
    shifts_repo: ShiftRepository
    schedules_repo: ScheduleRepository
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    devices_repo: DeviceRepository

    tenant_settings: TenantSettingsService
    calendar: CalendarProvider
    schedule_service: ScheduleService
    attendance_service: AttendanceService
    device_registry: DeviceRegistry
    ingestion: IngestionPipeline


def assemble_container(
    *,
    tenant_settings_repo: TenantSettingsRepository,
    holidays_repo: HolidayRepository,
    shifts_repo: ShiftRepository,
    schedules_repo: ScheduleRepository,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    devices_repo: DeviceRepository,
    options: Optional[Mapping[str, Any]] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL or in-memory)."""
    options = dict(options or {})

    tenant_settings = TenantSettingsService(
        tenant_settings_repo,
        default_timezone=options.get("DEFAULT_TIMEZONE", DEFAULT_TIMEZONE),
        default_tolerance_minutes=int(options.get("LATE_TOLERANCE_MINUTES", DEFAULT_LATE_TOLERANCE_MINUTES)),
        default_weekend_days=tuple(options.get("DEFAULT_WEEKEND_DAYS", DEFAULT_WEEKEND_DAYS)),
    )
    calendar = CalendarProvider(holidays_repo, tenant_settings)
    schedule_service = ScheduleService(schedules_repo, shifts_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        schedule_service,
        calendar,
        tenant_settings,
        engine=StatusEngine(AttendanceStrategyFactory()),
    )
    device_registry = DeviceRegistry(
        devices_repo,
        adapters=DeviceAdapterFactory(
            cloud_limit=int(options.get("CLOUD_FETCH_LIMIT", DEFAULT_CLOUD_FETCH_LIMIT)),
            cloud_timeout=int(options.get("CLOUD_TIMEOUT_SECONDS", DEFAULT_CLOUD_TIMEOUT_SECONDS)),
        ),
        lease_minutes=int(options.get("SYNC_LEASE_MINUTES", DEFAULT_SYNC_LEASE_MINUTES)),
    )
    ingestion = IngestionPipeline(
        attendance_service,
        device_registry,
        employees_repo,
        schedule_service,
        tenant_settings,
    )

    return Container(
        conn=conn,
        tenant_settings_repo=tenant_settings_repo,
        holidays_repo=holidays_repo,
        shifts_repo=shifts_repo,
        schedules_repo=schedules_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        devices_repo=devices_repo,
        tenant_settings=tenant_settings,
        calendar=calendar,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        device_registry=device_registry,
        ingestion=ingestion,
    )


def build_container(*, db_config: dict, options: Optional[Mapping[str, Any]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble_container(
        tenant_settings_repo=MySQLTenantSettingsRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        devices_repo=MySQLDeviceRepository(conn),
        options=options,
        conn=conn,
    )
