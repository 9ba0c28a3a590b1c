from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Canonical per-day attendance status stored on a record."""

    ON_TIME = "on-time"
    PRESENT = "present"
    LATE = "late"
    EARLY_DEPARTURE = "early-departure"
    ABSENT = "absent"
    FORGOT_CHECK_IN = "forgot-check-in"
    FORGOT_CHECK_OUT = "forgot-check-out"
    WORK_FROM_HOME = "work-from-home"
    VACATION = "vacation"
    SICK_LEAVE = "sick-leave"
    MISSION = "mission"
    WEEKEND = "weekend"


# Statuses produced from punches alone; anything else was set by leave/WFH/calendar.
PUNCH_DERIVED_STATUSES = frozenset(
    {
        AttendanceStatus.ON_TIME,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.EARLY_DEPARTURE,
        AttendanceStatus.ABSENT,
        AttendanceStatus.FORGOT_CHECK_IN,
        AttendanceStatus.FORGOT_CHECK_OUT,
    }
)

PRESENT_STATUSES = frozenset(
    {
        AttendanceStatus.ON_TIME,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.EARLY_DEPARTURE,
        AttendanceStatus.WORK_FROM_HOME,
        AttendanceStatus.MISSION,
    }
)

ABSENT_STATUSES = frozenset(
    {
        AttendanceStatus.ABSENT,
        AttendanceStatus.FORGOT_CHECK_IN,
        AttendanceStatus.FORGOT_CHECK_OUT,
    }
)


class CheckMethod(str, Enum):
    BIOMETRIC = "biometric"
    MANUAL = "manual"
    WFH = "wfh"


class CheckLocation(str, Enum):
    OFFICE = "office"
    HOME = "home"
    REMOTE = "remote"


class LeaveType(str, Enum):
    ANNUAL = "annual"
    CASUAL = "casual"
    SICK = "sick"
    MISSION = "mission"


class Direction(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"


class DeviceType(str, Enum):
    ZKTECO = "zkteco"
    CLOUD = "cloud"
    MOBILE = "mobile"
    QR = "qr"
    CSV = "csv"
    BIOMETRIC_GENERIC = "biometric-generic"
    MANUAL = "manual"


class DeviceStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"
    SYNCING = "syncing"


class SyncOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
