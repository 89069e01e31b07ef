"""Bank holiday router — read-only view of the cached public holiday feed."""


from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from leaveplanner.common.exceptions import ValidationException
from leaveplanner.dependencies import get_bank_holiday_feed
from leaveplanner.holidays.feed import BankHolidayFeed, holidays_in_range
from leaveplanner.holidays.schemas import BankHolidayListOut

router = APIRouter(prefix="", tags=["bank-holidays"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=BankHolidayListOut)
async def list_bank_holidays(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
):
    """Bank holidays for the configured division, optionally within a range."""
    if from_date and to_date and from_date > to_date:
        raise ValidationException({"from_date": ["from_date must be on or before to_date."]})

    holidays = await feed.get_holidays()
    if from_date or to_date:
        holidays = holidays_in_range(
            holidays, from_date or date.min, to_date or date.max,
        )
    return BankHolidayListOut(
        division=feed.division,
        from_date=from_date,
        to_date=to_date,
        holidays=holidays,
        total=len(holidays),
    )
