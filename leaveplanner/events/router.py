"""Event router — household calendar events, cost preview.

All endpoints require a profile. Bank holidays come from the app's feed and
are used both for costing and for validation.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaveplanner.auth.dependencies import get_current_profile
from leaveplanner.common.constants import EventType
from leaveplanner.database import get_db
from leaveplanner.dependencies import get_bank_holiday_feed
from leaveplanner.events.schemas import (
    EventCreate,
    EventOut,
    EventPreviewOut,
    EventUpdate,
)
from leaveplanner.events.service import EventService
from leaveplanner.holidays.feed import BankHolidayFeed
from leaveplanner.profiles.models import Profile

router = APIRouter(prefix="", tags=["events"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[EventOut])
async def list_events(
    from_date: Optional[date] = Query(None, description="Include events ending on/after"),
    to_date: Optional[date] = Query(None, description="Include events starting on/before"),
    type: Optional[EventType] = Query(None),
    profile: Profile = Depends(get_current_profile),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
    db: AsyncSession = Depends(get_db),
):
    """Events for you and your partner, each with its business-day cost."""
    return await EventService.list_events(
        db,
        profile,
        await feed.get_holidays(),
        from_date=from_date,
        to_date=to_date,
        event_type=type,
    )


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    profile: Profile = Depends(get_current_profile),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
    db: AsyncSession = Depends(get_db),
):
    """Create an event. Checks overlaps and remaining allowance."""
    return await EventService.create_event(
        db, profile, body, await feed.get_holidays(),
    )


# ── POST /preview ───────────────────────────────────────────────────

@router.post("/preview", response_model=EventPreviewOut)
async def preview_event(
    body: EventCreate,
    event_id: Optional[uuid.UUID] = Query(
        None, description="Event being edited; left out of the balance"
    ),
    profile: Profile = Depends(get_current_profile),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
    db: AsyncSession = Depends(get_db),
):
    """Cost an event per participant before saving it."""
    return await EventService.preview_event(
        db, profile, body, await feed.get_holidays(), exclude_id=event_id,
    )


# ── GET /{id} ───────────────────────────────────────────────────────

@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
    db: AsyncSession = Depends(get_db),
):
    return await EventService.get_event(
        db, profile, event_id, await feed.get_holidays(),
    )


# ── PUT /{id} ───────────────────────────────────────────────────────

@router.put("/{event_id}", response_model=EventOut)
async def update_event(
    event_id: uuid.UUID,
    body: EventUpdate,
    profile: Profile = Depends(get_current_profile),
    feed: BankHolidayFeed = Depends(get_bank_holiday_feed),
    db: AsyncSession = Depends(get_db),
):
    """Replace an event. Same checks as creation, ignoring the old version."""
    return await EventService.update_event(
        db, profile, event_id, body, await feed.get_holidays(),
    )


# ── DELETE /{id} ────────────────────────────────────────────────────

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    await EventService.delete_event(db, profile, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
