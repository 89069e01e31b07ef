"""Event ORM model — a span of holiday or remote work for one or two people."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from leaveplanner.common.constants import EventType
from leaveplanner.database import Base


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_event_date_order"),
        sa.Index("ix_events_type_dates", "type", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    # Participant profile ids as strings; one or two entries
    user_ids: Mapped[list] = mapped_column(JSONB, nullable=False)
    type: Mapped[EventType] = mapped_column(
        sa.Enum(EventType, name="event_type", create_type=False), nullable=False
    )
    name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    start_half_day: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=False
    )
    end_half_day: Mapped[bool] = mapped_column(
        sa.Boolean, nullable=False, default=False
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("profiles.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def includes(self, profile_id: uuid.UUID) -> bool:
        return str(profile_id) in self.user_ids
