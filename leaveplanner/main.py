"""Leave Planner — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from leaveplanner.accrual.router import router as balances_router
from leaveplanner.common.exceptions import register_exception_handlers
from leaveplanner.common.rate_limit import limiter
from leaveplanner.config import settings
from leaveplanner.events.router import router as events_router
from leaveplanner.holidays.feed import BankHolidayFeed
from leaveplanner.holidays.router import router as bank_holidays_router
from leaveplanner.profiles.router import router as profiles_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    feed: BankHolidayFeed = app.state.bank_holiday_feed
    logger.info(
        "Leave Planner starting (%s); bank holidays: %s [%s]",
        settings.ENVIRONMENT, feed.url, feed.division,
    )
    yield
    logger.info("Leave Planner shutting down")


def create_app(bank_holiday_feed: Optional[BankHolidayFeed] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Leave Planner",
        description="Shared holiday and remote-work calendar for a two-person household",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # One feed (and cache) per application
    app.state.bank_holiday_feed = bank_holiday_feed or BankHolidayFeed.from_settings(settings)

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    # Applies RATE_LIMIT_DEFAULT to every route without its own @limiter.limit
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    @limiter.exempt
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(profiles_router, prefix="/api/v1/profiles", tags=["profiles"])
    app.include_router(events_router, prefix="/api/v1/events", tags=["events"])
    app.include_router(balances_router, prefix="/api/v1/balances", tags=["balances"])
    app.include_router(
        bank_holidays_router, prefix="/api/v1/bank-holidays", tags=["bank-holidays"],
    )

    return app


app = create_app()
