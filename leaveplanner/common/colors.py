"""Deterministic per-user display colours."""

from __future__ import annotations

from leaveplanner.common.constants import USER_COLORS


def _hash_id(value: str) -> int:
    """Rolling ``h * 31 + c`` hash wrapped to a signed 32-bit integer."""
    h = 0
    for ch in value:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def user_color(user_id: object) -> str:
    """Return the palette colour assigned to *user_id*.

    Stable across processes, so both members of a household always see the
    same colours for each other.
    """
    return USER_COLORS[abs(_hash_id(str(user_id))) % len(USER_COLORS)]
