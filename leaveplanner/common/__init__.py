"""Common module — shared utilities for the leave planner."""

from leaveplanner.common.colors import user_color
from leaveplanner.common.constants import (
    MAX_EVENT_SPAN_DAYS,
    USER_COLORS,
    DayHalf,
    EventType,
    OverlapPolicy,
    event_type_display_name,
)
from leaveplanner.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    UpstreamServiceException,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Colours
    "user_color",
    # Constants / Enums
    "DayHalf",
    "EventType",
    "OverlapPolicy",
    "event_type_display_name",
    "MAX_EVENT_SPAN_DAYS",
    "USER_COLORS",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "UpstreamServiceException",
    "ValidationException",
    "register_exception_handlers",
]
