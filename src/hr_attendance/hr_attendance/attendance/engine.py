from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import hours_between, localize, whole_minutes
from ..core.enums import CheckLocation
from ..holidays.model import CalendarResult
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, Hours
from .strategies.base import DerivationContext, PunchTiming, StatusDecision


def compute_timing(record: AttendanceRecord, *, tz: ZoneInfo, tolerance_minutes: int = 0) -> PunchTiming:
    """Measure punches against the scheduled window in the tenant timezone."""
    check_in = localize(record.check_in.time, tz) if record.check_in else None
    check_out = localize(record.check_out.time, tz) if record.check_out else None
    tolerance = timedelta(minutes=max(0, int(tolerance_minutes)))

    is_late = is_early = False
    late_minutes = early_minutes = 0
    window = record.window
    if window is not None:
        start, end = window.bounds(record.work_date, tz)
        if check_in is not None:
            is_late = check_in > start + tolerance
            late_minutes = max(0, whole_minutes(check_in - start))
        if check_out is not None:
            is_early = check_out < end - tolerance
            early_minutes = max(0, whole_minutes(end - check_out))

    actual = wfh = 0.0
    if check_in is not None and check_out is not None:
        span = hours_between(check_in, check_out)
        if record.check_in.location == CheckLocation.HOME:
            wfh = span
        else:
            actual = span

    return PunchTiming(
        is_late=is_late,
        late_minutes=late_minutes,
        is_early=is_early,
        early_minutes=early_minutes,
        actual_hours=actual,
        work_from_home_hours=wfh,
    )


def build_context(
    record: AttendanceRecord,
    calendar: CalendarResult,
    has_approved_leave: Optional[bool] = None,
    *,
    tz: ZoneInfo,
    tolerance_minutes: int = 0,
) -> DerivationContext:
    if has_approved_leave is None:
        has_approved_leave = record.has_approved_leave
    return DerivationContext(
        record=record,
        calendar=calendar,
        has_approved_leave=bool(has_approved_leave),
        timing=compute_timing(record, tz=tz, tolerance_minutes=tolerance_minutes),
    )


def derive_status(
    record: AttendanceRecord,
    calendar: CalendarResult,
    has_approved_leave: Optional[bool] = None,
    *,
    tz: ZoneInfo,
    tolerance_minutes: int = 0,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> StatusDecision:
    """Pure status derivation: first matching rule wins."""
    ctx = build_context(record, calendar, has_approved_leave, tz=tz, tolerance_minutes=tolerance_minutes)
    return (factory or AttendanceStrategyFactory()).for_context(ctx).decide(ctx)


def apply_decision(record: AttendanceRecord, decision: StatusDecision, timing: PunchTiming) -> AttendanceRecord:
    notes = decision.notes if decision.notes is not None else record.notes

    if decision.clear_punches:
        return replace(
            record,
            check_in=None,
            check_out=None,
            hours=Hours(),
            status=decision.status,
            flags=decision.flags,
            is_working_day=decision.is_working_day,
            notes=notes,
        )

    check_in = record.check_in
    if check_in is not None:
        check_in = replace(check_in, is_late=timing.is_late, late_minutes=timing.late_minutes)
    check_out = record.check_out
    if check_out is not None:
        check_out = replace(check_out, is_early=timing.is_early, early_minutes=timing.early_minutes)

    return replace(
        record,
        check_in=check_in,
        check_out=check_out,
        hours=decision.hours,
        status=decision.status,
        flags=decision.flags,
        is_working_day=decision.is_working_day,
        notes=notes,
    )


class StatusEngine:
    """Re-derives status, flags and hours. Runs before every persist."""

    def __init__(self, factory: Optional[AttendanceStrategyFactory] = None):
        self._factory = factory or AttendanceStrategyFactory()

    def apply(
        self,
        record: AttendanceRecord,
        calendar: CalendarResult,
        *,
        tz: ZoneInfo,
        tolerance_minutes: int = 0,
    ) -> AttendanceRecord:
        ctx = build_context(record, calendar, tz=tz, tolerance_minutes=tolerance_minutes)
        decision = self._factory.for_context(ctx).decide(ctx)
        return apply_decision(record, decision, ctx.timing)
