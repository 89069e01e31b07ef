"""Accrual period resolution — annual allowance windows anchored on a reset date.

A period is the half-open interval ``[start, end)``: it starts on a reset
date and ends on the next year's reset date. Reset days that do not exist in
a month (31 April, 29 February in common years) are clamped to the month's
last day, independently for every year, so consecutive periods always share
a boundary.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

from leaveplanner.common.constants import EventType


@dataclass(frozen=True)
class AccrualPeriod:
    """One year of allowance for one leave type: ``[start, end)``."""

    start: date
    end: date

    @property
    def last_day(self) -> date:
        return self.end - timedelta(days=1)

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


def reset_date(year: int, reset_day: int, reset_month: int) -> date:
    """Reset date for *year*, clamping the day to the last day of the month."""
    last = calendar.monthrange(year, reset_month)[1]
    return date(year, reset_month, min(reset_day, last))


def resolve_period(
    reset_day: int,
    reset_month: int,
    year_offset: int = 0,
    reference: Optional[Union[date, datetime]] = None,
) -> AccrualPeriod:
    """Return the period containing *reference*, shifted by *year_offset* years.

    The containing period starts at the most recent reset date on or before
    *reference* (today by default). A reference equal to the reset date
    starts a new period. A datetime reference is reduced to its calendar date.
    """
    if isinstance(reference, datetime):
        today = reference.date()
    else:
        today = reference or date.today()

    base_year = today.year
    if today < reset_date(base_year, reset_day, reset_month):
        base_year -= 1

    start_year = base_year + year_offset
    return AccrualPeriod(
        start=reset_date(start_year, reset_day, reset_month),
        end=reset_date(start_year + 1, reset_day, reset_month),
    )


def period_for(
    profile,
    event_type: EventType,
    year_offset: int = 0,
    reference: Optional[Union[date, datetime]] = None,
) -> AccrualPeriod:
    """Resolve a period using the profile's reset settings for *event_type*."""
    if EventType(event_type) == EventType.holiday:
        day, month = profile.holiday_reset_day, profile.holiday_reset_month
    else:
        day, month = profile.remote_work_reset_day, profile.remote_work_reset_month
    return resolve_period(day, month, year_offset, reference)
