"""Shared FastAPI dependencies."""

from fastapi import Request

from leaveplanner.holidays.feed import BankHolidayFeed


def get_bank_holiday_feed(request: Request) -> BankHolidayFeed:
    """Return the application's bank holiday feed (created in ``create_app``)."""
    return request.app.state.bank_holiday_feed
