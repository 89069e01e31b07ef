"""Balance Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from leaveplanner.accrual.calculator import BalanceResult
from leaveplanner.accrual.periods import AccrualPeriod
from leaveplanner.profiles.schemas import ProfileBrief


class PeriodOut(BaseModel):
    """Accrual period ``[start, end)``; ``last_day`` is the final day inside it."""

    start: date
    end: date
    last_day: date

    @classmethod
    def from_period(cls, period: AccrualPeriod) -> "PeriodOut":
        return cls(start=period.start, end=period.end, last_day=period.last_day)


class BalanceOut(BaseModel):
    """Remaining allowance of one household member."""

    profile: ProfileBrief
    holiday_allowance_days: Decimal
    remote_work_days: Decimal

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

    holiday_period: PeriodOut
    wfa_period: PeriodOut
    next_holiday_period: PeriodOut
    next_wfa_period: PeriodOut

    @classmethod
    def from_result(cls, profile, result: BalanceResult) -> "BalanceOut":
        return cls(
            profile=ProfileBrief.model_validate(profile),
            holiday_allowance_days=profile.holiday_allowance_days,
            remote_work_days=profile.remote_work_days,
            holiday_balance=result.holiday_balance,
            wfa_balance=result.wfa_balance,
            next_period_holiday_balance=result.next_period_holiday_balance,
            next_period_wfa_balance=result.next_period_wfa_balance,
            show_next_period_holiday=result.show_next_period_holiday,
            show_next_period_wfa=result.show_next_period_wfa,
            holiday_used=result.holiday_used,
            wfa_used=result.wfa_used,
            next_period_holiday_used=result.next_period_holiday_used,
            next_period_wfa_used=result.next_period_wfa_used,
            holiday_period=PeriodOut.from_period(result.holiday_period),
            wfa_period=PeriodOut.from_period(result.wfa_period),
            next_holiday_period=PeriodOut.from_period(result.next_holiday_period),
            next_wfa_period=PeriodOut.from_period(result.next_wfa_period),
        )
