from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import localize, parse_iso_date, parse_iso_datetime, parse_time_of_day
from ..core.enums import CheckLocation, DeviceType
from ..core.exceptions import EntryResolutionError
from .direction import parse_direction_hint
from .model import RawLogEntry

# Field aliases per device type: (external employee id, timestamp, direction).
_FIELDS = {
    DeviceType.ZKTECO: (("userId", "userID", "user_id"), ("timestamp", "time", "recordTime"), ("type", "checkType")),
    DeviceType.CLOUD: (("employeeId", "employee_id", "userId"), ("timestamp", "datetime", "time"), ("type", "action")),
    DeviceType.MOBILE: (("employeeId",), ("timestamp",), ("type",)),
    DeviceType.QR: (("employeeId",), ("scanTime", "timestamp"), ("type",)),
    DeviceType.CSV: (
        ("external_employee_id", "external_id", "employeeId", "userId"),
        ("timestamp", "datetime"),
        ("direction", "type", "action"),
    ),
}
_GENERIC_FIELDS = (("employeeId", "userId"), ("timestamp", "time"), ("type",))

MISSING_FIELDS = "Missing required fields: employeeId or timestamp"


def _first(raw: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def parse_timestamp(value: Any, tz: ZoneInfo) -> datetime:
    """Accept datetimes, ISO strings and epoch seconds/milliseconds."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        seconds = value / 1000.0 if value > 1e12 else float(value)
        parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
    else:
        parsed = parse_iso_datetime(str(value))
    return localize(parsed, tz)


def _csv_timestamp(raw: Mapping[str, Any], tz: ZoneInfo) -> Optional[datetime]:
    stamp = _first(raw, ("timestamp", "datetime"))
    if stamp is not None:
        return parse_timestamp(stamp, tz)

    day = raw.get("date")
    if day in (None, ""):
        return None
    clock = raw.get("time")
    if clock in (None, ""):
        return parse_timestamp(day, tz)

    work_date = day if isinstance(day, date) else parse_iso_date(str(day).strip())
    at = clock if not isinstance(clock, str) else parse_time_of_day(clock)
    return localize(datetime.combine(work_date, at), tz)


def _location(value: Any) -> Optional[CheckLocation]:
    if value in (None, ""):
        return None
    try:
        return CheckLocation(str(value).strip().lower())
    except ValueError:
        return None


def normalize_log(
    raw: Mapping[str, Any],
    device_type: DeviceType,
    tz: ZoneInfo,
    *,
    device_id: Optional[str] = None,
) -> RawLogEntry:
    """Turn one vendor payload into a RawLogEntry.

    Naive timestamps are read in the tenant timezone `tz`.
    Raises EntryResolutionError when the employee id or timestamp is missing
    or unreadable.
    """
    if not isinstance(raw, Mapping):
        raise EntryResolutionError("Log entry must be an object")

    id_keys, ts_keys, dir_keys = _FIELDS.get(device_type, _GENERIC_FIELDS)
    external_id = _first(raw, id_keys)
    employee_id = raw.get("employee_id") if device_type == DeviceType.CSV else None

    try:
        if device_type == DeviceType.CSV:
            timestamp = _csv_timestamp(raw, tz)
        else:
            value = _first(raw, ts_keys)
            timestamp = parse_timestamp(value, tz) if value is not None else None
    except (TypeError, ValueError, OverflowError) as exc:
        raise EntryResolutionError(f"Invalid timestamp: {exc}") from exc

    if not (external_id or employee_id) or timestamp is None:
        raise EntryResolutionError(MISSING_FIELDS)

    return RawLogEntry(
        timestamp=timestamp,
        external_employee_id=str(external_id).strip() if external_id else None,
        employee_id=str(employee_id).strip() if employee_id else None,
        device_id=device_id,
        direction_hint=parse_direction_hint(_first(raw, dir_keys)),
        location=_location(raw.get("location")),
        raw=dict(raw),
    )
