"""Accrual engine — period resolution and allowance balances.

Public API
----------
resolve_period                        Accrual window containing a date
business_days_in_event                Allowance cost of an event
business_days_in_event_within_period  Cost clipped to ``[start, end)``
calculate_balance                     Remaining allowance per leave type
"""

from leaveplanner.accrual.calculator import (
    BalanceResult,
    bank_holiday_dates,
    business_days_in_event,
    business_days_in_event_within_period,
    calculate_balance,
)
from leaveplanner.accrual.periods import (
    AccrualPeriod,
    period_for,
    reset_date,
    resolve_period,
)

__all__ = [
    "AccrualPeriod",
    "BalanceResult",
    "bank_holiday_dates",
    "business_days_in_event",
    "business_days_in_event_within_period",
    "calculate_balance",
    "period_for",
    "reset_date",
    "resolve_period",
]
