from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

from ..core.enums import Direction
from ..shifts.model import ScheduledWindow

_CHECK_OUT_WORDS = ("out", "exit")
_CHECK_OUT_CODES = {"1", "checkout"}
NOON = time(12, 0)


def parse_direction_hint(value: Any) -> Optional[Direction]:
    """Map a vendor direction field onto a Direction.

    Values mentioning out/exit, the code "1" and "checkout" mean check-out.
    Any other non-empty value means check-in. Empty means no hint.
    """
    if value is None:
        return None
    if isinstance(value, Direction):
        return value
    text = str(value).strip().lower()
    if not text:
        return None
    if text in _CHECK_OUT_CODES or any(word in text for word in _CHECK_OUT_WORDS):
        return Direction.CHECK_OUT
    return Direction.CHECK_IN


def classify_direction(
    hint: Optional[Direction],
    local_time: datetime,
    window: Optional[ScheduledWindow] = None,
    work_date: Optional[date] = None,
) -> Direction:
    """Explicit hint wins; otherwise punches before mid-shift are check-ins.

    `local_time` must already be in the tenant timezone. `work_date` is the
    date the shift started on; by default it is inferred from the window.
    Without a schedule the midpoint is noon.
    """
    if hint is not None:
        return hint

    if window is None:
        return Direction.CHECK_IN if local_time.time() < NOON else Direction.CHECK_OUT

    if work_date is None:
        work_date = window.shift_date_for(local_time)
    midpoint = window.midpoint(work_date, local_time.tzinfo)
    return Direction.CHECK_IN if local_time < midpoint else Direction.CHECK_OUT
