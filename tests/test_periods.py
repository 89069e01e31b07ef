"""Accrual period tests — reset-date anchoring, year offsets, month-end clamping."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from leaveplanner.accrual.periods import (
    AccrualPeriod,
    period_for,
    reset_date,
    resolve_period,
)
from leaveplanner.common.constants import EventType


class TestResolvePeriod:
    def test_calendar_year(self):
        period = resolve_period(1, 1, reference=date(2025, 6, 15))
        assert period == AccrualPeriod(date(2025, 1, 1), date(2026, 1, 1))

    def test_reference_before_reset_uses_previous_year(self):
        """6 April reset: 1 March still belongs to the period that began last April."""
        period = resolve_period(6, 4, reference=date(2025, 3, 1))
        assert period.start == date(2024, 4, 6)
        assert period.end == date(2025, 4, 6)

    def test_reference_on_reset_date_starts_new_period(self):
        period = resolve_period(6, 4, reference=date(2025, 4, 6))
        assert period.start == date(2025, 4, 6)

    def test_day_before_reset_is_last_day(self):
        period = resolve_period(6, 4, reference=date(2025, 4, 5))
        assert period.last_day == date(2025, 4, 5)
        assert period.contains(date(2025, 4, 5))
        assert not period.contains(date(2025, 4, 6))

    def test_next_period(self):
        period = resolve_period(1, 9, 1, date(2025, 10, 1))
        assert period == AccrualPeriod(date(2026, 9, 1), date(2027, 9, 1))

    def test_negative_offset(self):
        period = resolve_period(1, 1, -1, date(2025, 6, 15))
        assert period == AccrualPeriod(date(2024, 1, 1), date(2025, 1, 1))

    def test_defaults_to_today(self):
        assert resolve_period(1, 1).contains(date.today())

    def test_datetime_reference_uses_its_date(self):
        """A moment on the reset day belongs to the new period, whatever the hour."""
        morning = datetime(2025, 4, 6, 0, 0, 1)
        evening = datetime(2025, 4, 5, 23, 59, tzinfo=timezone.utc)

        assert resolve_period(6, 4, 0, morning).start == date(2025, 4, 6)
        assert resolve_period(6, 4, 0, evening).start == date(2024, 4, 6)
        assert resolve_period(1, 1, 1, datetime(2025, 3, 10, 9, 30)) == resolve_period(
            1, 1, 1, date(2025, 3, 10),
        )

    @pytest.mark.parametrize("month", range(1, 13))
    @pytest.mark.parametrize("day", [1, 15, 28, 29, 30, 31])
    def test_adjacent_periods_are_contiguous(self, day, month):
        for reference in (date(2023, 12, 31), date(2024, 2, 29), date(2025, 7, 1)):
            current = resolve_period(day, month, 0, reference)
            following = resolve_period(day, month, 1, reference)
            assert current.start <= reference < current.end
            assert following.start == current.end
            assert following.end > following.start


class TestResetDateClamping:
    def test_31st_of_february_clamps_to_month_end(self):
        assert reset_date(2025, 31, 2) == date(2025, 2, 28)
        assert reset_date(2024, 31, 2) == date(2024, 2, 29)

    def test_31st_of_april(self):
        period = resolve_period(31, 4, reference=date(2025, 5, 1))
        assert period == AccrualPeriod(date(2025, 4, 30), date(2026, 4, 30))

    def test_leap_day_reset(self):
        """29 February resets on the 28th in common years, on the 29th in leap years."""
        period = resolve_period(29, 2, reference=date(2024, 3, 1))
        assert period == AccrualPeriod(date(2024, 2, 29), date(2025, 2, 28))

        following = resolve_period(29, 2, 1, date(2024, 3, 1))
        assert following.start == date(2025, 2, 28)

    def test_clamped_reset_date_counts_as_reset(self):
        period = resolve_period(29, 2, reference=date(2025, 2, 28))
        assert period.start == date(2025, 2, 28)

    def test_periods_are_about_one_year(self):
        for day, month in ((31, 1), (29, 2), (31, 12)):
            period = resolve_period(day, month, reference=date(2025, 6, 1))
            assert (period.end - period.start).days in (365, 366)


class TestPeriodFor:
    def test_uses_type_specific_reset(self):
        profile = SimpleNamespace(
            holiday_reset_day=1,
            holiday_reset_month=1,
            remote_work_reset_day=6,
            remote_work_reset_month=4,
        )
        ref = date(2025, 3, 1)

        holiday = period_for(profile, EventType.holiday, 0, ref)
        remote = period_for(profile, "remote_work", 0, ref)

        assert holiday.start == date(2025, 1, 1)
        assert remote.start == date(2024, 4, 6)
        assert remote.last_day == date(2025, 4, 6) - timedelta(days=1)
