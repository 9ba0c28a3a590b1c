from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ...core.enums import AttendanceStatus
from ...holidays.model import CalendarResult
from ..model import AttendanceRecord, Flags, Hours


@dataclass(frozen=True)
class PunchTiming:
    """Lateness, earliness and worked spans measured in the tenant timezone."""

    is_late: bool = False
    late_minutes: int = 0
    is_early: bool = False
    early_minutes: int = 0
    actual_hours: float = 0.0
    work_from_home_hours: float = 0.0


@dataclass(frozen=True)
class DerivationContext:
    record: AttendanceRecord
    calendar: CalendarResult
    has_approved_leave: bool
    timing: PunchTiming = field(default_factory=PunchTiming)


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    flags: Flags = field(default_factory=Flags)
    hours: Hours = field(default_factory=Hours)
    is_working_day: bool = True
    clear_punches: bool = False
    notes: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: one derivation rule per class."""

    @abstractmethod
    def decide(self, ctx: DerivationContext) -> StatusDecision:
        raise NotImplementedError


def punch_hours(ctx: DerivationContext) -> Hours:
    expected = float(ctx.record.expected_hours)
    actual = ctx.timing.actual_hours
    wfh = ctx.timing.work_from_home_hours
    total = round(actual + wfh, 2)
    return Hours(
        actual=actual,
        expected=expected,
        overtime=round(max(0.0, total - expected), 2),
        work_from_home=wfh,
        total=total,
    )


def punch_flags(ctx: DerivationContext, *, is_missing: bool = False, needs_approval: bool = False) -> Flags:
    return Flags(
        is_late=ctx.timing.is_late,
        is_early_departure=ctx.timing.is_early,
        is_missing=is_missing,
        needs_approval=needs_approval,
    )
