"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (profiles, events, balances, holidays).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL, and an
httpx MockTransport in place of the GOV.UK bank holiday feed.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leaveplanner.config import settings
from leaveplanner.database import Base, get_db
from leaveplanner.holidays.feed import BankHolidayFeed
from leaveplanner.main import create_app

# Import ALL model modules so SQLAlchemy can resolve the foreign keys
import leaveplanner.profiles.models  # noqa: F401
import leaveplanner.events.models  # noqa: F401

from leaveplanner.profiles.models import Profile

# ── SQLite compat: compile PG-specific types to TEXT/BLOB ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leaveplanner.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Bank holiday feed (GOV.UK shape) ────────────────────────────────

BANK_HOLIDAYS: list[tuple[str, str]] = [
    ("New Year’s Day", "2025-01-01"),
    ("Good Friday", "2025-04-18"),
    ("Easter Monday", "2025-04-21"),
    ("Early May bank holiday", "2025-05-05"),
    ("Spring bank holiday", "2025-05-26"),
    ("Summer bank holiday", "2025-08-25"),
    ("Christmas Day", "2025-12-25"),
    ("Boxing Day", "2025-12-26"),
    ("New Year’s Day", "2026-01-01"),
]

BANK_HOLIDAY_DATES = frozenset(date.fromisoformat(d) for _, d in BANK_HOLIDAYS)


def bank_holiday_payload(
    holidays: list[tuple[str, str]] = BANK_HOLIDAYS,
    division: str = "england-and-wales",
) -> dict:
    payload = {
        division: {
            "division": division,
            "events": [
                {"title": title, "date": day, "notes": "", "bunting": True}
                for title, day in holidays
            ],
        },
    }
    payload.setdefault("scotland", {"division": "scotland", "events": []})
    return payload


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_feed(
    handler=None,
    *,
    ttl_seconds: float = 0,
    clock=None,
    division: str = "england-and-wales",
) -> BankHolidayFeed:
    """Feed backed by an httpx MockTransport; serves ``BANK_HOLIDAYS`` by default."""
    if handler is None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=bank_holiday_payload())

    kwargs = {"clock": clock} if clock is not None else {}
    return BankHolidayFeed(
        "https://bank-holidays.test/bank-holidays.json",
        division,
        ttl_seconds=ttl_seconds,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
def feed() -> BankHolidayFeed:
    return make_feed()


@pytest.fixture
async def app(feed):
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app(bank_holiday_feed=feed)
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_profile(
    *,
    email: str = "alex@example.com",
    display_name: str = "Alex",
    holiday_allowance_days: Decimal = Decimal("25"),
    remote_work_days: Decimal = Decimal("10"),
    holiday_reset_day: int = 1,
    holiday_reset_month: int = 1,
    remote_work_reset_day: int = 1,
    remote_work_reset_month: int = 1,
    partner_id: Optional[uuid.UUID] = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        email=email,
        display_name=display_name,
        partner_id=partner_id,
        holiday_allowance_days=holiday_allowance_days,
        remote_work_days=remote_work_days,
        holiday_reset_day=holiday_reset_day,
        holiday_reset_month=holiday_reset_month,
        remote_work_reset_day=remote_work_reset_day,
        remote_work_reset_month=remote_work_reset_month,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def seed_profile(db: AsyncSession, **overrides) -> Profile:
    """Insert a profile and commit it."""
    profile = Profile(**_make_profile(**overrides))
    db.add(profile)
    await db.commit()
    return profile


async def seed_couple(db: AsyncSession, **overrides) -> tuple[Profile, Profile]:
    """Insert two linked profiles (Alex and Sam)."""
    alex = Profile(**_make_profile(**overrides))
    sam = Profile(**_make_profile(
        email="sam@example.com", display_name="Sam", **overrides,
    ))
    alex.partner_id = sam.id
    sam.partner_id = alex.id
    db.add_all([alex, sam])
    await db.commit()
    return alex, sam


@pytest.fixture
async def alex(db) -> Profile:
    """A single, unlinked profile."""
    return await seed_profile(db)


@pytest.fixture
async def couple(db) -> tuple[Profile, Profile]:
    return await seed_couple(db)


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    subject: uuid.UUID,
    email: Optional[str] = None,
    expired: bool = False,
    secret: Optional[str] = None,
) -> str:
    """Generate an identity-provider style JWT for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {"sub": str(subject), "exp": exp}
    if email is not None:
        payload["email"] = email
    return jwt.encode(
        payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM,
    )


def auth_headers_for(profile: Profile) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(profile.id, profile.email)}"}


@pytest.fixture
def auth_headers(alex) -> dict[str, str]:
    """Bearer auth headers for the ``alex`` profile."""
    return auth_headers_for(alex)


# ── Date helpers ────────────────────────────────────────────────────

def upcoming_clear_week(after_days: int = 7) -> date:
    """Monday of the first week after ``today + after_days`` with no bank holiday."""
    monday = date.today() + timedelta(days=after_days)
    monday += timedelta(days=(7 - monday.weekday()) % 7)
    while any(monday + timedelta(days=i) in BANK_HOLIDAY_DATES for i in range(5)):
        monday += timedelta(days=7)
    return monday
