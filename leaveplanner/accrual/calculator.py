"""Balance engine — business-day costing of events and remaining allowance.

Business logic:
  - Weekends and bank holidays cost nothing
  - Half-day flags discount the event's first and/or last day to 0.5
  - A single-day event costs 0.5 when either flag is set (flags never stack)
  - Costs are clipped to an accrual period ``[start, end)``; a half-day
    discount survives clipping only while its flagged date is still inside
    the clipped range
  - Balances are floored at zero, never negative

Everything here is pure: callers pass in snapshots of the profile, the events
and the bank holidays, and nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

from leaveplanner.accrual.periods import AccrualPeriod, period_for
from leaveplanner.common.constants import EventType

FULL_DAY = Decimal("1")
HALF_DAY = Decimal("0.5")
ZERO = Decimal("0")


@dataclass(frozen=True)
class BalanceResult:
    """Remaining allowance per leave type, for the current and next period."""

    holiday_balance: Decimal
    wfa_balance: Decimal
    next_period_holiday_balance: Decimal
    next_period_wfa_balance: Decimal
    show_next_period_holiday: bool
    show_next_period_wfa: bool

    holiday_used: Decimal
    wfa_used: Decimal
    next_period_holiday_used: Decimal
    next_period_wfa_used: Decimal

    holiday_period: AccrualPeriod
    wfa_period: AccrualPeriod
    next_holiday_period: AccrualPeriod
    next_wfa_period: AccrualPeriod


# ── Input normalisation ─────────────────────────────────────────────

def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def bank_holiday_dates(bank_holidays: Iterable[Any] = ()) -> frozenset[date]:
    """Normalise bank holidays (records with ``.date``, dates or ISO strings)."""
    dates: set[date] = set()
    for holiday in bank_holidays:
        value = holiday if isinstance(holiday, (date, str)) else holiday.date
        dates.add(_as_date(value))
    return frozenset(dates)


def _is_business_day(day: date, holidays: frozenset[date]) -> bool:
    return day.weekday() < 5 and day not in holidays


# ── Day counting ────────────────────────────────────────────────────

def _count_days(
    event_start: date,
    event_end: date,
    from_date: date,
    to_date: date,
    start_half_day: bool,
    end_half_day: bool,
    holidays: frozenset[date],
) -> Decimal:
    """Cost of the days ``from_date..to_date`` of an event, inclusive.

    Half-day multipliers are keyed on the event's original boundaries, so a
    flag only matters while its date is part of the counted range.
    """
    if from_date > to_date:
        return ZERO

    single_day = event_start == event_end
    total = ZERO
    current = from_date
    while current <= to_date:
        if _is_business_day(current, holidays):
            if single_day:
                total += HALF_DAY if (start_half_day or end_half_day) else FULL_DAY
            elif current == event_start and start_half_day:
                total += HALF_DAY
            elif current == event_end and end_half_day:
                total += HALF_DAY
            else:
                total += FULL_DAY
        current += timedelta(days=1)
    return total


def business_days_in_event(
    event: Any,
    bank_holidays: Iterable[Any] = (),
) -> Decimal:
    """Allowance cost of the whole event, ignoring accrual periods."""
    start = _as_date(event.start_date)
    end = _as_date(event.end_date)
    return _count_days(
        start,
        end,
        start,
        end,
        bool(event.start_half_day),
        bool(event.end_half_day),
        bank_holiday_dates(bank_holidays),
    )


def business_days_in_event_within_period(
    event: Any,
    period_start: date,
    period_end: date,
    bank_holidays: Iterable[Any] = (),
) -> Decimal:
    """Allowance cost of the part of the event inside ``[period_start, period_end)``."""
    start = _as_date(event.start_date)
    end = _as_date(event.end_date)
    return _count_days(
        start,
        end,
        max(start, period_start),
        min(end, period_end - timedelta(days=1)),
        bool(event.start_half_day),
        bool(event.end_half_day),
        bank_holiday_dates(bank_holidays),
    )


# ── Balance ─────────────────────────────────────────────────────────

def event_includes(event: Any, profile_id: Any) -> bool:
    return str(profile_id) in {str(uid) for uid in event.user_ids}


def _as_decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_balance(
    profile: Any,
    events: Iterable[Any],
    bank_holidays: Iterable[Any] = (),
    reference: Optional[date | datetime] = None,
) -> BalanceResult:
    """Remaining holiday and remote-work allowance for *profile*.

    Only events the profile takes part in count. Usage is clipped to the
    current and the next accrual period of each type; each type may reset on
    a different day of the year.
    """
    holidays = bank_holiday_dates(bank_holidays)

    periods: dict[tuple[EventType, int], AccrualPeriod] = {
        (event_type, offset): period_for(profile, event_type, offset, reference)
        for event_type in EventType
        for offset in (0, 1)
    }
    used: dict[tuple[EventType, int], Decimal] = {key: ZERO for key in periods}

    for event in events:
        if not event_includes(event, profile.id):
            continue
        event_type = EventType(event.type)
        for offset in (0, 1):
            period = periods[(event_type, offset)]
            used[(event_type, offset)] += business_days_in_event_within_period(
                event, period.start, period.end, holidays,
            )

    holiday_allowance = _as_decimal(profile.holiday_allowance_days)
    wfa_allowance = _as_decimal(profile.remote_work_days)

    def remaining(allowance: Decimal, spent: Decimal) -> Decimal:
        return max(ZERO, allowance - spent)

    holiday_used = used[(EventType.holiday, 0)]
    wfa_used = used[(EventType.remote_work, 0)]
    next_holiday_used = used[(EventType.holiday, 1)]
    next_wfa_used = used[(EventType.remote_work, 1)]

    return BalanceResult(
        holiday_balance=remaining(holiday_allowance, holiday_used),
        wfa_balance=remaining(wfa_allowance, wfa_used),
        next_period_holiday_balance=remaining(holiday_allowance, next_holiday_used),
        next_period_wfa_balance=remaining(wfa_allowance, next_wfa_used),
        show_next_period_holiday=next_holiday_used > 0,
        show_next_period_wfa=next_wfa_used > 0,
        holiday_used=holiday_used,
        wfa_used=wfa_used,
        next_period_holiday_used=next_holiday_used,
        next_period_wfa_used=next_wfa_used,
        holiday_period=periods[(EventType.holiday, 0)],
        wfa_period=periods[(EventType.remote_work, 0)],
        next_holiday_period=periods[(EventType.holiday, 1)],
        next_wfa_period=periods[(EventType.remote_work, 1)],
    )
