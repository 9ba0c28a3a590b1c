from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..attendance.service import AttendanceService
from ..common.datetime_utils import localize, now_utc
from ..common.validators import require_tenant
from ..core.constants import DEFAULT_PULL_LOOKBACK_HOURS
from ..core.enums import CheckLocation, CheckMethod, DeviceType, Direction
from ..core.exceptions import DeviceBusy, DomainError, EntryResolutionError
from ..devices.model import Device
from ..devices.service import DeviceRegistry
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..schedules.service import ScheduleService
from ..shifts.model import ScheduledWindow
from ..tenants.model import TenantSettings
from ..tenants.service import TenantSettingsService
from .direction import classify_direction
from .model import IngestionResult, RawLogEntry
from .normalizer import normalize_log

log = logging.getLogger(__name__)


def _distance(moment: datetime, bounds: Tuple[datetime, datetime]) -> timedelta:
    start, end = bounds
    if moment < start:
        return start - moment
    if moment > end:
        return moment - end
    return timedelta(0)


class IngestionPipeline:
    """Folds device and import batches into attendance records.

    Entries are processed sequentially in the supplied order. A failing entry
    is counted and reported; the rest of the batch continues.
    """

    def __init__(
        self,
        attendance: AttendanceService,
        registry: DeviceRegistry,
        employees: EmployeeRepository,
        schedules: ScheduleService,
        tenant_settings: TenantSettingsService,
        *,
        lookback_hours: int = DEFAULT_PULL_LOOKBACK_HOURS,
    ):
        self._attendance = attendance
        self._registry = registry
        self._employees = employees
        self._schedules = schedules
        self._tenant_settings = tenant_settings
        self._lookback = timedelta(hours=int(lookback_hours))

    # ---- per entry -----------------------------------------------------

    def _resolve_employee(self, tenant_id: str, entry: RawLogEntry) -> Employee:
        if entry.employee_id:
            employee = self._employees.get_by_id(tenant_id, entry.employee_id)
        elif entry.external_employee_id:
            employee = self._employees.get_by_external_id(tenant_id, entry.external_employee_id)
        else:
            employee = None
        if not employee:
            raise EntryResolutionError(f"Employee not found: {entry.employee_ref}")
        if not employee.is_active:
            raise EntryResolutionError(f"Employee is not active: {entry.employee_ref}")
        return employee

    def _owning_shift(self, employee: Employee, local: datetime) -> Tuple[date, Optional[ScheduledWindow]]:
        """Pick the shift occurrence a punch belongs to.

        A punch before the rollover of last night's shift belongs to it unless
        today's shift is closer.
        """
        today = local.date()
        window = self._schedules.window_for(employee, today)
        yesterday = today - timedelta(days=1)
        previous = self._schedules.window_for(employee, yesterday)
        if previous is None or not previous.is_overnight or local.time() >= previous.rollover:
            return today, window
        if window is None:
            return yesterday, previous

        tz = local.tzinfo
        if _distance(local, previous.bounds(yesterday, tz)) < _distance(local, window.bounds(today, tz)):
            return yesterday, previous
        return today, window

    def _apply_entry(
        self,
        tenant_id: str,
        entry: RawLogEntry,
        settings: TenantSettings,
        device: Optional[Device],
    ) -> None:
        employee = self._resolve_employee(tenant_id, entry)
        local = localize(entry.timestamp, settings.tz)
        work_date, window = self._owning_shift(employee, local)
        direction = classify_direction(entry.direction_hint, local, window, work_date)

        method = CheckMethod.BIOMETRIC if device else CheckMethod.MANUAL
        location = entry.location or CheckLocation.OFFICE
        device_id = device.device_id if device else None

        if direction == Direction.CHECK_IN:
            self._attendance.record_check_in(
                tenant_id,
                employee.employee_id,
                time=local,
                work_date=work_date,
                method=method,
                location=location,
                device_id=device_id,
            )
        else:
            self._attendance.record_check_out(
                tenant_id,
                employee.employee_id,
                time=local,
                work_date=work_date,
                method=method,
                location=location,
                device_id=device_id,
                create_missing=True,
            )

    def _run_batch(
        self,
        tenant_id: str,
        payloads: Sequence[Any],
        *,
        device_type: DeviceType,
        device: Optional[Device],
    ) -> IngestionResult:
        settings = self._tenant_settings.get(tenant_id)
        result = IngestionResult()
        source = device.name if device else "import"
        log.info("Processing %d log(s) from %s for tenant %s", len(payloads), source, tenant_id)

        for index, payload in enumerate(payloads):
            ref = "unknown"
            try:
                if isinstance(payload, RawLogEntry):
                    entry = payload
                else:
                    entry = normalize_log(
                        payload,
                        device_type,
                        settings.tz,
                        device_id=device.device_id if device else None,
                    )
                ref = entry.employee_ref
                self._apply_entry(tenant_id, entry, settings, device)
                result.processed += 1
            except DomainError as exc:
                if ref == "unknown" and isinstance(payload, Mapping):
                    ref = str(payload.get("employeeId") or payload.get("userId") or payload.get("employee_id") or ref)
                log.warning("Skipped log %d for employee %s: %s", index, ref, exc)
                result.add_error(index, ref, str(exc))
            except Exception as exc:
                log.exception("Unexpected error on log %d for employee %s", index, ref)
                result.add_error(index, ref, str(exc) or exc.__class__.__name__)

        log.info(
            "Finished %s for tenant %s: processed=%d errors=%d",
            source,
            tenant_id,
            result.processed,
            result.errors,
        )
        return result

    def _locked_batch(
        self,
        tenant_id: str,
        device: Device,
        load: Callable[[Device], Sequence[Any]],
        *,
        device_type: Optional[DeviceType] = None,
        now: Optional[datetime] = None,
    ) -> IngestionResult:
        """Hold the device's sync lock around one batch and record the outcome.

        `last_sync` is stamped with the start of the batch, so the next pull
        asks again for logs recorded while this one was running.
        """
        now = now or now_utc()
        device = self._registry.mark_sync_start(tenant_id, device.device_id, now=now)
        try:
            payloads = load(device)
            result = self._run_batch(
                tenant_id,
                payloads,
                device_type=device_type or device.device_type,
                device=device,
            )
        except Exception as exc:
            log.exception("Sync of device %r failed", device.name)
            self._registry.record_sync_outcome(
                tenant_id,
                device.device_id,
                success=False,
                processed_count=0,
                error_summary=str(exc) or exc.__class__.__name__,
                now=now,
            )
            raise

        self._registry.record_sync_outcome(
            tenant_id,
            device.device_id,
            success=result.errors == 0,
            processed_count=result.processed,
            error_summary=result.first_error,
            now=now,
        )
        return result

    # ---- entry paths ---------------------------------------------------

    def ingest(
        self,
        tenant_id: str,
        entries: Iterable[RawLogEntry],
        *,
        device_id: Optional[str] = None,
    ) -> IngestionResult:
        """Process already-normalised entries, under the device lock when a device is given."""
        tenant_id = require_tenant(tenant_id)
        entries = list(entries)
        if device_id is None:
            return self._run_batch(tenant_id, entries, device_type=DeviceType.MANUAL, device=None)

        device = self._registry.get(tenant_id, device_id)
        return self._locked_batch(tenant_id, device, lambda _d: entries)

    def sync_device(self, tenant_id: str, device_id: str, *, now: Optional[datetime] = None) -> IngestionResult:
        """Pull new logs from the device and ingest them."""
        tenant_id = require_tenant(tenant_id)
        now = now or now_utc()
        device = self._registry.get(tenant_id, device_id)

        def load(locked: Device) -> Sequence[Any]:
            since = locked.last_sync or (now - self._lookback)
            return self._registry.adapter_for(locked).fetch_logs(locked, since=since)

        return self._locked_batch(tenant_id, device, load, now=now)

    def push_logs(
        self,
        tenant_id: str,
        device_id: str,
        api_key: Optional[str],
        payloads: Sequence[Mapping[str, Any]],
    ) -> IngestionResult:
        """Logs pushed by a device that authenticated with its push key."""
        tenant_id = require_tenant(tenant_id)
        device = self._registry.authenticate_push(tenant_id, device_id, api_key)
        return self._locked_batch(tenant_id, device, lambda _d: list(payloads))

    def import_rows(
        self,
        tenant_id: str,
        rows: Sequence[Mapping[str, Any]],
        *,
        device_id: Optional[str] = None,
    ) -> IngestionResult:
        """Already-parsed CSV rows. Without a device the punches count as manual."""
        tenant_id = require_tenant(tenant_id)
        if device_id is None:
            return self._run_batch(tenant_id, list(rows), device_type=DeviceType.CSV, device=None)

        device = self._registry.get(tenant_id, device_id)
        return self._locked_batch(tenant_id, device, lambda _d: list(rows), device_type=DeviceType.CSV)

    def sync_all_due(self, now: Optional[datetime] = None, *, tenant_id: Optional[str] = None) -> List[dict]:
        """Sync every auto-sync device whose interval has elapsed. Devices are independent."""
        now = now or now_utc()
        summaries: List[dict] = []

        for device in self._registry.list_due(now, tenant_id=tenant_id):
            summary = {"tenant_id": device.tenant_id, "device_id": device.device_id, "name": device.name}
            try:
                result = self.sync_device(device.tenant_id, device.device_id, now=now)
            except DeviceBusy:
                summary["status"] = "skipped"
            except Exception as exc:
                summary.update(status="failed", error=str(exc) or exc.__class__.__name__)
            else:
                summary.update(status="synced", **result.to_dict())
            summaries.append(summary)

        log.info("Due-device sync finished: %d device(s)", len(summaries))
        return summaries
