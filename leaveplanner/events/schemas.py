"""Event Pydantic v2 schemas — request / response validation."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from leaveplanner.common.constants import (
    MAX_EVENT_SPAN_DAYS,
    MAX_HOUSEHOLD_SIZE,
    EventType,
    event_type_display_name,
)
from leaveplanner.profiles.schemas import ProfileBrief


# ═════════════════════════════════════════════════════════════════════
# Event — Create / Update
# ═════════════════════════════════════════════════════════════════════


class EventCreate(BaseModel):
    """Payload for creating (or fully replacing) an event."""

    type: EventType
    name: Optional[str] = Field(None, max_length=200)
    start_date: date = Field(..., description="First day (inclusive)")
    end_date: date = Field(..., description="Last day (inclusive)")
    start_half_day: bool = Field(
        False, description="Leave starts at midday on start_date"
    )
    end_half_day: bool = Field(
        False, description="Leave ends at midday on end_date"
    )
    user_ids: Optional[list[uuid.UUID]] = Field(
        default=None,
        description="Participants: yourself and/or your partner. Defaults to yourself.",
    )

    @field_validator("name")
    @classmethod
    def blank_name_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None

    @field_validator("user_ids")
    @classmethod
    def validate_participants(
        cls, v: Optional[list[uuid.UUID]],
    ) -> Optional[list[uuid.UUID]]:
        if v is None:
            return v
        unique = list(dict.fromkeys(v))
        if not 1 <= len(unique) <= MAX_HOUSEHOLD_SIZE:
            raise ValueError(
                f"An event needs between 1 and {MAX_HOUSEHOLD_SIZE} participants."
            )
        return unique

    @model_validator(mode="after")
    def validate_dates(self) -> "EventCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        if (self.end_date - self.start_date).days >= MAX_EVENT_SPAN_DAYS:
            raise ValueError(
                f"An event cannot span more than {MAX_EVENT_SPAN_DAYS} days."
            )
        return self


class EventUpdate(EventCreate):
    """Full replacement of an existing event."""


# ═════════════════════════════════════════════════════════════════════
# Event — Response
# ═════════════════════════════════════════════════════════════════════


class EventOut(BaseModel):
    """Full event response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_ids: list[uuid.UUID]
    type: EventType
    name: Optional[str] = None
    start_date: date
    end_date: date
    start_half_day: bool = False
    end_half_day: bool = False
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Enriched by service
    business_days: Decimal = Decimal("0")
    participants: list[ProfileBrief] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        return self.name or event_type_display_name(self.type)


# ═════════════════════════════════════════════════════════════════════
# Event — Preview (cost before submitting)
# ═════════════════════════════════════════════════════════════════════


class ParticipantCostOut(BaseModel):
    """What an event would cost one participant, per accrual period."""

    profile: ProfileBrief
    period_start: date
    period_end: date
    period_cost: Decimal
    balance: Decimal
    next_period_cost: Decimal
    next_period_balance: Decimal
    sufficient: bool


class EventPreviewOut(BaseModel):
    """Cost of a prospective event, without saving it."""

    type: EventType
    start_date: date
    end_date: date
    business_days: Decimal
    participants: list[ParticipantCostOut]
    sufficient: bool
