"""Profile ORM model — one person and their allowance settings."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from leaveplanner.common.constants import DEFAULT_RESET_DAY, DEFAULT_RESET_MONTH
from leaveplanner.database import Base


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (
        sa.CheckConstraint(
            "holiday_allowance_days >= 0", name="ck_profile_holiday_allowance",
        ),
        sa.CheckConstraint(
            "remote_work_days >= 0", name="ck_profile_remote_work_allowance",
        ),
        sa.CheckConstraint(
            "holiday_reset_day BETWEEN 1 AND 31", name="ck_profile_holiday_reset_day",
        ),
        sa.CheckConstraint(
            "holiday_reset_month BETWEEN 1 AND 12", name="ck_profile_holiday_reset_month",
        ),
        sa.CheckConstraint(
            "remote_work_reset_day BETWEEN 1 AND 31",
            name="ck_profile_remote_work_reset_day",
        ),
        sa.CheckConstraint(
            "remote_work_reset_month BETWEEN 1 AND 12",
            name="ck_profile_remote_work_reset_month",
        ),
        sa.Index("uq_profiles_partner_id", "partner_id", unique=True),
    )

    # Same value as the identity provider's subject claim
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[Optional[str]] = mapped_column(sa.String(320), unique=True)
    display_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    partner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="SET NULL"),
    )
    holiday_allowance_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(4, 1), nullable=False, default=Decimal("25")
    )
    remote_work_days: Mapped[Decimal] = mapped_column(
        sa.Numeric(4, 1), nullable=False, default=Decimal("0")
    )
    holiday_reset_day: Mapped[int] = mapped_column(
        sa.SmallInteger, nullable=False, default=DEFAULT_RESET_DAY
    )
    holiday_reset_month: Mapped[int] = mapped_column(
        sa.SmallInteger, nullable=False, default=DEFAULT_RESET_MONTH
    )
    remote_work_reset_day: Mapped[int] = mapped_column(
        sa.SmallInteger, nullable=False, default=DEFAULT_RESET_DAY
    )
    remote_work_reset_month: Mapped[int] = mapped_column(
        sa.SmallInteger, nullable=False, default=DEFAULT_RESET_MONTH
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
