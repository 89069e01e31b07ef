"""Event service layer — household events, conflict checks, allowance checks.

Business logic:
  - Participants must be the caller or the caller's linked partner
  - Only events with a household participant are visible or editable
  - Same-type events for a shared participant may not overlap (policy:
    strict, or half-day aware)
  - A new or edited event must fit in each participant's remaining
    allowance for the current and the next accrual period
  - Existing events are never revalidated when allowances change
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leaveplanner.accrual.calculator import (
    bank_holiday_dates,
    business_days_in_event,
    business_days_in_event_within_period,
    calculate_balance,
)
from leaveplanner.accrual.periods import AccrualPeriod, period_for
from leaveplanner.common.constants import (
    EventType,
    OverlapPolicy,
    event_type_display_name,
)
from leaveplanner.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leaveplanner.config import settings
from leaveplanner.events.conflicts import events_conflict
from leaveplanner.events.models import Event
from leaveplanner.events.schemas import (
    EventCreate,
    EventOut,
    EventPreviewOut,
    EventUpdate,
    ParticipantCostOut,
)
from leaveplanner.holidays.schemas import BankHoliday
from leaveplanner.profiles.models import Profile
from leaveplanner.profiles.schemas import ProfileBrief
from leaveplanner.profiles.service import ProfileService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantCost:
    """Clipped cost of a draft event against one participant's balance."""

    profile: Profile
    period: AccrualPeriod
    period_cost: Decimal
    balance: Decimal
    next_period_cost: Decimal
    next_period_balance: Decimal

    @property
    def sufficient(self) -> bool:
        return (
            self.period_cost <= self.balance
            and self.next_period_cost <= self.next_period_balance
        )


def _participant_clause(db: AsyncSession, wanted: set[str]) -> sa.ColumnElement[bool]:
    """SQL filter matching events whose ``user_ids`` hold any of *wanted*."""

    ids = sorted(wanted)
    if db.get_bind().dialect.name == "postgresql":
        # JSONB containment, served by ix_events_user_ids (GIN)
        return sa.or_(*(Event.user_ids.contains([pid]) for pid in ids))
    as_text = sa.cast(Event.user_ids, sa.Text)
    return sa.or_(*(as_text.like(f'%"{pid}"%') for pid in ids))


# ═════════════════════════════════════════════════════════════════════
# EventService
# ═════════════════════════════════════════════════════════════════════


class EventService:
    """Async event operations: list, create, edit, delete, preview."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _draft(data: EventCreate, participants: Sequence[uuid.UUID]) -> Event:
        """Build a transient (never added) Event from a request payload."""
        return Event(
            user_ids=[str(pid) for pid in participants],
            type=data.type,
            name=data.name,
            start_date=data.start_date,
            end_date=data.end_date,
            start_half_day=data.start_half_day,
            end_half_day=data.end_half_day,
        )

    @staticmethod
    async def load_events(
        db: AsyncSession,
        participant_ids: Iterable[uuid.UUID],
        *,
        event_type: Optional[EventType] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> list[Event]:
        """Events with at least one of *participant_ids* overlapping the range."""

        query = select(Event).order_by(Event.start_date, Event.created_at)
        if event_type is not None:
            query = query.where(Event.type == event_type)
        if from_date is not None:
            query = query.where(Event.end_date >= from_date)
        if to_date is not None:
            query = query.where(Event.start_date <= to_date)
        if exclude_id is not None:
            query = query.where(Event.id != exclude_id)

        wanted = {str(pid) for pid in participant_ids}
        if not wanted:
            return []
        query = query.where(_participant_clause(db, wanted))
        result = await db.execute(query)
        # The SQL clause narrows by id; the exact membership test runs here.
        return [e for e in result.scalars().all() if wanted.intersection(e.user_ids)]

    @staticmethod
    async def _get_visible_event(
        db: AsyncSession,
        event_id: uuid.UUID,
        household_ids: set[uuid.UUID],
    ) -> Event:
        event = await db.get(Event, event_id)
        if event is None or not any(event.includes(pid) for pid in household_ids):
            raise NotFoundException("Event", str(event_id))
        return event

    @staticmethod
    def _resolve_participants(
        actor: Profile,
        household_ids: set[uuid.UUID],
        requested: Optional[list[uuid.UUID]],
    ) -> list[uuid.UUID]:
        if not requested:
            return [actor.id]
        outsiders = [pid for pid in requested if pid not in household_ids]
        if outsiders:
            raise ForbiddenException(
                "Events can only include you and your linked partner."
            )
        return list(requested)

    @staticmethod
    def _build_response(
        event: Event,
        holidays: frozenset[date],
        members: dict[uuid.UUID, Profile],
    ) -> EventOut:
        out = EventOut.model_validate(event)
        out.business_days = business_days_in_event(event, holidays)
        out.participants = [
            ProfileBrief.model_validate(members[pid])
            for pid in out.user_ids
            if pid in members
        ]
        return out

    @staticmethod
    def _check_conflicts(
        draft: Event,
        existing: Sequence[Event],
        policy: OverlapPolicy,
    ) -> None:
        clashing = [
            e for e in existing
            if e.type == draft.type
            and set(e.user_ids).intersection(draft.user_ids)
            and events_conflict(draft, e, policy)
        ]
        if clashing:
            label = event_type_display_name(draft.type).lower()
            logger.warning(
                "Rejected %s %s..%s: clashes with %s",
                draft.type.value, draft.start_date, draft.end_date,
                ", ".join(str(e.id) for e in clashing),
            )
            raise ConflictError(
                f"There is already a {label} event on these dates.",
                {"dates": [
                    f"Overlaps {e.name or label} "
                    f"({e.start_date.isoformat()} – {e.end_date.isoformat()})."
                    for e in clashing
                ]},
            )

    @staticmethod
    def participant_cost(
        profile: Profile,
        draft: Event,
        existing: Iterable[Event],
        holidays: frozenset[date],
        today: Optional[date] = None,
    ) -> ParticipantCost:
        """Cost of *draft* for *profile* next to the balance left by *existing*."""

        balance = calculate_balance(profile, existing, holidays, reference=today)
        if draft.type == EventType.holiday:
            period, next_period = balance.holiday_period, balance.next_holiday_period
            remaining, next_remaining = (
                balance.holiday_balance, balance.next_period_holiday_balance,
            )
        else:
            period, next_period = balance.wfa_period, balance.next_wfa_period
            remaining, next_remaining = (
                balance.wfa_balance, balance.next_period_wfa_balance,
            )

        return ParticipantCost(
            profile=profile,
            period=period,
            period_cost=business_days_in_event_within_period(
                draft, period.start, period.end, holidays,
            ),
            balance=remaining,
            next_period_cost=business_days_in_event_within_period(
                draft, next_period.start, next_period.end, holidays,
            ),
            next_period_balance=next_remaining,
        )

    @staticmethod
    async def _participant_costs(
        db: AsyncSession,
        draft: Event,
        participants: Sequence[Profile],
        holidays: frozenset[date],
        *,
        exclude_id: Optional[uuid.UUID] = None,
        today: Optional[date] = None,
    ) -> list[ParticipantCost]:
        earliest = min(
            period_for(p, event_type, 0, today).start
            for p in participants
            for event_type in EventType
        )
        existing = await EventService.load_events(
            db,
            [p.id for p in participants],
            from_date=earliest,
            exclude_id=exclude_id,
        )
        return [
            EventService.participant_cost(p, draft, existing, holidays, today)
            for p in participants
        ]

    @staticmethod
    def _check_allowance(draft: Event, costs: Sequence[ParticipantCost]) -> None:
        label = event_type_display_name(draft.type).lower()
        errors = [
            f"Insufficient {label} balance for {c.profile.display_name}. "
            f"Available: {c.balance} (next period {c.next_period_balance}), "
            f"Requested: {c.period_cost} (next period {c.next_period_cost})."
            for c in costs
            if not c.sufficient
        ]
        if errors:
            logger.warning(
                "Rejected %s %s..%s: insufficient allowance",
                draft.type.value, draft.start_date, draft.end_date,
            )
            raise ValidationException({"balance": errors})

    @staticmethod
    async def _validate_draft(
        db: AsyncSession,
        draft: Event,
        participants: Sequence[Profile],
        holidays: frozenset[date],
        *,
        exclude_id: Optional[uuid.UUID],
        overlap_policy: Optional[OverlapPolicy],
        enforce_allowance: Optional[bool],
        today: Optional[date],
    ) -> None:
        policy = overlap_policy or settings.EVENT_OVERLAP_POLICY
        existing = await EventService.load_events(
            db,
            [p.id for p in participants],
            event_type=draft.type,
            from_date=draft.start_date,
            to_date=draft.end_date,
            exclude_id=exclude_id,
        )
        EventService._check_conflicts(draft, existing, policy)

        if enforce_allowance is None:
            enforce_allowance = settings.ENFORCE_ALLOWANCE
        if enforce_allowance:
            costs = await EventService._participant_costs(
                db, draft, participants, holidays,
                exclude_id=exclude_id, today=today,
            )
            EventService._check_allowance(draft, costs)

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_events(
        db: AsyncSession,
        actor: Profile,
        bank_holidays: Iterable[BankHoliday] = (),
        *,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        event_type: Optional[EventType] = None,
    ) -> list[EventOut]:
        """Household events overlapping the optional range, oldest first."""

        members = {p.id: p for p in await ProfileService.get_household(db, actor)}
        events = await EventService.load_events(
            db,
            members,
            event_type=event_type,
            from_date=from_date,
            to_date=to_date,
        )
        holidays = bank_holiday_dates(bank_holidays)
        return [EventService._build_response(e, holidays, members) for e in events]

    @staticmethod
    async def get_event(
        db: AsyncSession,
        actor: Profile,
        event_id: uuid.UUID,
        bank_holidays: Iterable[BankHoliday] = (),
    ) -> EventOut:
        members = {p.id: p for p in await ProfileService.get_household(db, actor)}
        event = await EventService._get_visible_event(db, event_id, set(members))
        return EventService._build_response(
            event, bank_holiday_dates(bank_holidays), members,
        )

    # ─────────────────────────────────────────────────────────────────
    # Create / Update / Delete
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_event(
        db: AsyncSession,
        actor: Profile,
        data: EventCreate,
        bank_holidays: Iterable[BankHoliday] = (),
        *,
        overlap_policy: Optional[OverlapPolicy] = None,
        enforce_allowance: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> EventOut:
        """Create an event after conflict and allowance checks."""

        members = {p.id: p for p in await ProfileService.get_household(db, actor)}
        participant_ids = EventService._resolve_participants(
            actor, set(members), data.user_ids,
        )
        draft = EventService._draft(data, participant_ids)
        holidays = bank_holiday_dates(bank_holidays)

        await EventService._validate_draft(
            db, draft, [members[pid] for pid in participant_ids], holidays,
            exclude_id=None,
            overlap_policy=overlap_policy,
            enforce_allowance=enforce_allowance,
            today=today,
        )

        draft.created_by = actor.id
        db.add(draft)
        await db.flush()
        await db.refresh(draft)

        logger.info(
            "Created %s event %s (%s..%s) for %s",
            draft.type.value, draft.id, draft.start_date, draft.end_date,
            ", ".join(draft.user_ids),
        )
        return EventService._build_response(draft, holidays, members)

    @staticmethod
    async def update_event(
        db: AsyncSession,
        actor: Profile,
        event_id: uuid.UUID,
        data: EventUpdate,
        bank_holidays: Iterable[BankHoliday] = (),
        *,
        overlap_policy: Optional[OverlapPolicy] = None,
        enforce_allowance: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> EventOut:
        """Replace an event's fields; the old version is ignored by the checks."""

        members = {p.id: p for p in await ProfileService.get_household(db, actor)}
        event = await EventService._get_visible_event(db, event_id, set(members))

        participant_ids = EventService._resolve_participants(
            actor, set(members), data.user_ids,
        )
        draft = EventService._draft(data, participant_ids)
        holidays = bank_holiday_dates(bank_holidays)

        await EventService._validate_draft(
            db, draft, [members[pid] for pid in participant_ids], holidays,
            exclude_id=event.id,
            overlap_policy=overlap_policy,
            enforce_allowance=enforce_allowance,
            today=today,
        )

        event.user_ids = draft.user_ids
        event.type = draft.type
        event.name = draft.name
        event.start_date = draft.start_date
        event.end_date = draft.end_date
        event.start_half_day = draft.start_half_day
        event.end_half_day = draft.end_half_day
        await db.flush()
        await db.refresh(event)

        logger.info("Updated event %s", event.id)
        return EventService._build_response(event, holidays, members)

    @staticmethod
    async def delete_event(
        db: AsyncSession,
        actor: Profile,
        event_id: uuid.UUID,
    ) -> None:
        household_ids = await ProfileService.get_household_ids(db, actor)
        event = await EventService._get_visible_event(db, event_id, household_ids)
        await db.delete(event)
        await db.flush()
        logger.info("Deleted event %s", event_id)

    # ─────────────────────────────────────────────────────────────────
    # Preview
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def preview_event(
        db: AsyncSession,
        actor: Profile,
        data: EventCreate,
        bank_holidays: Iterable[BankHoliday] = (),
        *,
        exclude_id: Optional[uuid.UUID] = None,
        today: Optional[date] = None,
    ) -> EventPreviewOut:
        """Cost a prospective event per participant without saving it."""

        members = {p.id: p for p in await ProfileService.get_household(db, actor)}
        participant_ids = EventService._resolve_participants(
            actor, set(members), data.user_ids,
        )
        draft = EventService._draft(data, participant_ids)
        holidays = bank_holiday_dates(bank_holidays)

        costs = await EventService._participant_costs(
            db, draft, [members[pid] for pid in participant_ids], holidays,
            exclude_id=exclude_id, today=today,
        )
        participants = [
            ParticipantCostOut(
                profile=ProfileBrief.model_validate(c.profile),
                period_start=c.period.start,
                period_end=c.period.end,
                period_cost=c.period_cost,
                balance=c.balance,
                next_period_cost=c.next_period_cost,
                next_period_balance=c.next_period_balance,
                sufficient=c.sufficient,
            )
            for c in costs
        ]
        return EventPreviewOut(
            type=draft.type,
            start_date=draft.start_date,
            end_date=draft.end_date,
            business_days=business_days_in_event(draft, holidays),
            participants=participants,
            sufficient=all(p.sufficient for p in participants),
        )
