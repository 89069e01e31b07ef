"""Overlap rules between events of the same type.

An event occupies the afternoon of its start date when ``start_half_day`` is
set, the morning of its end date when ``end_half_day`` is set, and the whole
of every other date. A single-day event with either flag takes one half: the
afternoon for ``start_half_day``, otherwise the morning.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Optional

from leaveplanner.common.constants import DayHalf, OverlapPolicy


def occupied_half(event: Any, day: date) -> Optional[DayHalf]:
    """Half of *day* taken by *event*, or ``None`` when it takes the whole day."""
    if event.start_date == event.end_date:
        if event.start_half_day:
            return DayHalf.afternoon
        if event.end_half_day:
            return DayHalf.morning
        return None
    if day == event.start_date and event.start_half_day:
        return DayHalf.afternoon
    if day == event.end_date and event.end_half_day:
        return DayHalf.morning
    return None


def events_conflict(first: Any, second: Any, policy: OverlapPolicy) -> bool:
    """Whether two events' date ranges clash under *policy*.

    Callers are expected to have matched type and participants already.
    """
    overlap_start = max(first.start_date, second.start_date)
    overlap_end = min(first.end_date, second.end_date)
    if overlap_start > overlap_end:
        return False
    if policy == OverlapPolicy.strict:
        return True

    day = overlap_start
    while day <= overlap_end:
        a = occupied_half(first, day)
        b = occupied_half(second, day)
        if a is None or b is None or a == b:
            return True
        day += timedelta(days=1)
    return False
