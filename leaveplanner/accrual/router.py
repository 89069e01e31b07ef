"""Balance router — remaining holiday and remote-work allowance."""


import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leaveplanner.accrual.schemas import BalanceOut
from leaveplanner.accrual.service import BalanceService
from leaveplanner.auth.dependencies import get_current_profile
from leaveplanner.database import get_db
from leaveplanner.dependencies import get_bank_holiday_feed
from leaveplanner.holidays.feed import BankHolidayFeed
from leaveplanner.profiles.models import Profile

router = APIRouter(prefix="", tags=["balances"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[BalanceOut])
async def get_balances(
    profile: Profile = Depends(get_current_profile),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
    db: AsyncSession = Depends(get_db),
):
    """Current and next-period balances for you and your partner."""
    return await BalanceService.get_household_balances(
        db, profile, await feed.get_holidays(),
    )


# ── GET /{profile_id} ───────────────────────────────────────────────

@router.get("/{profile_id}", response_model=BalanceOut)
async def get_member_balance(
    profile_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
    db: AsyncSession = Depends(get_db),
):
    """Balance of one household member."""
    return await BalanceService.get_member_balance(
        db, profile, profile_id, await feed.get_holidays(),
    )
