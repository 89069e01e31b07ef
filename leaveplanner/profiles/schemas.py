"""Profile Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update / *Request  → request bodies (write)
  - *Out                          → response bodies (read)
  - *Brief                        → compact embedded representations
"""

from __future__ import annotations

import calendar
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from leaveplanner.common.colors import user_color
from leaveplanner.common.constants import DEFAULT_RESET_DAY, DEFAULT_RESET_MONTH


def _check_half_days(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and (v * 2) % 1 != 0:
        raise ValueError("Allowance must be a whole or half number of days.")
    return v


def check_reset_date(day: Optional[int], month: Optional[int], label: str) -> None:
    # Day 29 is allowed for February; it is clamped to the 28th in common years.
    if day is None or month is None:
        return
    longest = 29 if month == 2 else calendar.monthrange(2001, month)[1]
    if day > longest:
        raise ValueError(
            f"{label} reset day {day} never occurs in {calendar.month_name[month]}."
        )


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class ProfileBrief(BaseModel):
    """Minimal profile info embedded in event and balance responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    display_name: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def color(self) -> str:
        return user_color(self.id)


# ═════════════════════════════════════════════════════════════════════
# Profile — Create / Update
# ═════════════════════════════════════════════════════════════════════


class _AllowanceSettings(BaseModel):
    holiday_allowance_days: Optional[Decimal] = Field(
        None, ge=0, le=366, description="Holiday days per accrual year"
    )
    remote_work_days: Optional[Decimal] = Field(
        None, ge=0, le=366, description="Remote-work days per accrual year"
    )
    holiday_reset_day: Optional[int] = Field(None, ge=1, le=31)
    holiday_reset_month: Optional[int] = Field(None, ge=1, le=12)
    remote_work_reset_day: Optional[int] = Field(None, ge=1, le=31)
    remote_work_reset_month: Optional[int] = Field(None, ge=1, le=12)

    @field_validator("holiday_allowance_days", "remote_work_days")
    @classmethod
    def half_day_steps(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _check_half_days(v)


class ProfileCreate(_AllowanceSettings):
    """Payload for signing up. Omitted settings take the defaults."""

    display_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(
        None, description="Used when the identity token carries no email claim"
    )
    holiday_allowance_days: Decimal = Field(Decimal("25"), ge=0, le=366)
    remote_work_days: Decimal = Field(Decimal("0"), ge=0, le=366)
    holiday_reset_day: int = Field(DEFAULT_RESET_DAY, ge=1, le=31)
    holiday_reset_month: int = Field(DEFAULT_RESET_MONTH, ge=1, le=12)
    remote_work_reset_day: int = Field(DEFAULT_RESET_DAY, ge=1, le=31)
    remote_work_reset_month: int = Field(DEFAULT_RESET_MONTH, ge=1, le=12)

    @field_validator("display_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("display_name must not be blank.")
        return v

    @model_validator(mode="after")
    def validate_reset_dates(self) -> "ProfileCreate":
        check_reset_date(self.holiday_reset_day, self.holiday_reset_month, "Holiday")
        check_reset_date(
            self.remote_work_reset_day, self.remote_work_reset_month, "Remote work",
        )
        return self


class ProfileUpdate(_AllowanceSettings):
    """Partial settings edit; only provided fields change."""

    display_name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("display_name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("display_name must not be blank.")
        return v


class PartnerLinkRequest(BaseModel):
    """Link the caller to another signed-up person by email."""

    partner_email: EmailStr


# ═════════════════════════════════════════════════════════════════════
# Profile — Response
# ═════════════════════════════════════════════════════════════════════


class ProfileOut(BaseModel):
    """Full profile representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: Optional[str] = None
    display_name: str
    partner_id: Optional[uuid.UUID] = None
    holiday_allowance_days: Decimal
    remote_work_days: Decimal
    holiday_reset_day: int
    holiday_reset_month: int
    remote_work_reset_day: int
    remote_work_reset_month: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def color(self) -> str:
        return user_color(self.id)


class HouseholdOut(BaseModel):
    """The caller and, when linked, their partner."""

    members: list[ProfileBrief]
    is_linked: bool = False
