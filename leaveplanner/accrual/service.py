"""Balance service — household balances from stored events."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from leaveplanner.accrual.calculator import bank_holiday_dates, calculate_balance
from leaveplanner.accrual.periods import period_for
from leaveplanner.accrual.schemas import BalanceOut
from leaveplanner.common.constants import EventType
from leaveplanner.common.exceptions import NotFoundException
from leaveplanner.events.service import EventService
from leaveplanner.holidays.schemas import BankHoliday
from leaveplanner.profiles.models import Profile
from leaveplanner.profiles.service import ProfileService


class BalanceService:
    """Read-only balance computation for the caller's household."""

    @staticmethod
    async def get_household_balances(
        db: AsyncSession,
        actor: Profile,
        bank_holidays: Iterable[BankHoliday] = (),
        *,
        today: Optional[date] = None,
    ) -> list[BalanceOut]:
        """Balances for the caller and partner, sorted by display name."""

        members = await ProfileService.get_household(db, actor)
        earliest = min(
            period_for(p, event_type, 0, today).start
            for p in members
            for event_type in EventType
        )
        events = await EventService.load_events(
            db, [p.id for p in members], from_date=earliest,
        )
        holidays = bank_holiday_dates(bank_holidays)

        balances = [
            BalanceOut.from_result(p, calculate_balance(p, events, holidays, today))
            for p in members
        ]
        return sorted(balances, key=lambda b: b.profile.display_name.lower())

    @staticmethod
    async def get_member_balance(
        db: AsyncSession,
        actor: Profile,
        profile_id: uuid.UUID,
        bank_holidays: Iterable[BankHoliday] = (),
        *,
        today: Optional[date] = None,
    ) -> BalanceOut:
        balances = await BalanceService.get_household_balances(
            db, actor, bank_holidays, today=today,
        )
        for balance in balances:
            if balance.profile.id == profile_id:
                return balance
        raise NotFoundException("Profile", str(profile_id))
