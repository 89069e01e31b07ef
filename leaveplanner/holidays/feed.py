"""Bank holiday feed — fetches the GOV.UK JSON and caches it per application.

The feed object is created once in the app factory and stored on
``app.state``; there is no module-level cache. Expiry is driven by an
injectable clock so tests can move time forward without sleeping.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date
from typing import Any, Callable, Iterable, Optional

import httpx
from pydantic import ValidationError

from leaveplanner.common.exceptions import UpstreamServiceException
from leaveplanner.holidays.schemas import BankHoliday

logger = logging.getLogger(__name__)

_SERVICE_NAME = "Bank Holiday Feed"


class BankHolidayFeed:
    """Async, TTL-cached supplier of bank holidays for one division."""

    def __init__(
        self,
        url: str,
        division: str,
        *,
        ttl_seconds: float = 0,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.division = division
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._clock = clock
        self._transport = transport
        self._cached: Optional[list[BankHoliday]] = None
        self._fetched_at: Optional[float] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> "BankHolidayFeed":
        return cls(
            settings.BANK_HOLIDAYS_URL,
            settings.BANK_HOLIDAYS_DIVISION,
            ttl_seconds=settings.BANK_HOLIDAYS_TTL_SECONDS,
            timeout=settings.BANK_HOLIDAYS_TIMEOUT_SECONDS,
            **kwargs,
        )

    # ── cache state ──────────────────────────────────────────────────

    def _is_fresh(self) -> bool:
        if self._cached is None or self._fetched_at is None:
            return False
        if self.ttl_seconds <= 0:
            return True
        return self._clock() - self._fetched_at < self.ttl_seconds

    def invalidate(self) -> None:
        self._cached = None
        self._fetched_at = None

    # ── public API ───────────────────────────────────────────────────

    async def get_holidays(self) -> list[BankHoliday]:
        """Return the cached holiday list, fetching it when missing or stale."""
        if self._is_fresh():
            return self._cached  # type: ignore[return-value]

        async with self._lock:
            # Another caller may have refreshed while we waited.
            if self._is_fresh():
                return self._cached  # type: ignore[return-value]
            holidays = await self._fetch()
            self._cached = holidays
            self._fetched_at = self._clock()
            return holidays

    # ── fetching ─────────────────────────────────────────────────────

    async def _fetch(self) -> list[BankHoliday]:
        logger.info("Fetching bank holidays (%s) from %s", self.division, self.url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport,
            ) as client:
                resp = await client.get(self.url)
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Bank holiday fetch failed: %s", exc)
            raise UpstreamServiceException(
                _SERVICE_NAME, f"Could not load bank holidays: {exc}",
            ) from exc

        holidays = self._parse(payload)
        logger.info("Loaded %d bank holidays for %s", len(holidays), self.division)
        return holidays

    def _parse(self, payload: Any) -> list[BankHoliday]:
        division = payload.get(self.division) if isinstance(payload, dict) else None
        if not isinstance(division, dict):
            raise UpstreamServiceException(
                _SERVICE_NAME,
                f"Bank holidays data not found for division '{self.division}'.",
            )
        try:
            return sorted(
                (BankHoliday.model_validate(item) for item in division.get("events", [])),
                key=lambda h: h.date,
            )
        except ValidationError as exc:
            raise UpstreamServiceException(
                _SERVICE_NAME, "Bank holidays feed returned malformed events.",
            ) from exc


def holidays_in_range(
    holidays: Iterable[BankHoliday],
    start: date,
    end: date,
) -> list[BankHoliday]:
    """Holidays falling on ``start..end`` inclusive."""
    return [h for h in holidays if start <= h.date <= end]
