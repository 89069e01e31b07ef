"""Enums and constants for the leave planner — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Events ──────────────────────────────────────────────────────────

class EventType(str, enum.Enum):
    holiday = "holiday"
    remote_work = "remote_work"


class DayHalf(str, enum.Enum):
    morning = "morning"
    afternoon = "afternoon"


class OverlapPolicy(str, enum.Enum):
    """How same-type events for a shared participant may overlap."""

    strict = "strict"
    half_day_aware = "half_day_aware"


def event_type_display_name(event_type: EventType | str) -> str:
    value = EventType(event_type)
    return "Remote work" if value == EventType.remote_work else value.value


# ── Profiles ────────────────────────────────────────────────────────

# Palette for per-user colours (readable on light and dark backgrounds)
USER_COLORS: tuple[str, ...] = (
    "#059669",  # emerald-600
    "#2563eb",  # blue-600
    "#7c3aed",  # violet-600
    "#c026d3",  # fuchsia-600
    "#dc2626",  # red-600
    "#ea580c",  # orange-600
    "#ca8a04",  # yellow-600
    "#0891b2",  # cyan-600
)

MAX_HOUSEHOLD_SIZE = 2

# ── Misc constants ──────────────────────────────────────────────────

MAX_EVENT_SPAN_DAYS = 366
DEFAULT_RESET_DAY = 1
DEFAULT_RESET_MONTH = 1
