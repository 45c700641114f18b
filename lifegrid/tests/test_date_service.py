"""
Tests for DateService.

Tests cover:
1. Calendar-day truncation (naive and timezone-aware)
2. Signed day offsets and inclusive day counts
3. Inclusive date range iteration
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

from lifegrid.services.date_service import DateService


class TestToday:
    """Tests for today function"""

    def test_uses_local_clock(self):
        """Should return the calendar day of datetime.now()"""
        with patch('lifegrid.services.date_service.datetime') as mock_dt:
            mock_dt.now.return_value = datetime(2026, 1, 30, 23, 59, 0)
            result = DateService.today()

        assert result == date(2026, 1, 30)


class TestToDay:
    """Tests for to_day and start_of_day"""

    def test_date_passes_through(self):
        assert DateService.to_day(date(2025, 3, 1)) == date(2025, 3, 1)

    def test_drops_time_of_day(self):
        assert DateService.to_day(datetime(2025, 3, 1, 23, 59, 59)) == date(2025, 3, 1)

    def test_aware_datetime_uses_local_day(self):
        """Aware timestamps map to the local calendar day of the same instant"""
        instant = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert DateService.to_day(instant) == instant.astimezone().date()

    def test_start_of_day_is_midnight(self):
        result = DateService.start_of_day(datetime(2025, 3, 1, 15, 30))
        assert result == datetime(2025, 3, 1, 0, 0)


class TestDaysBetween:
    """Tests for days_between, day_count and weeks_between"""

    def test_counts_calendar_days_not_hours(self):
        """23:59 to 00:01 the next day is one day apart"""
        start = datetime(2025, 3, 1, 23, 59)
        end = datetime(2025, 3, 2, 0, 1)
        assert DateService.days_between(start, end) == 1

    def test_signed_when_inverted(self):
        assert DateService.days_between(date(2025, 3, 5), date(2025, 3, 1)) == -4

    def test_same_day_is_zero(self):
        assert DateService.days_between(datetime(2025, 3, 1, 1), datetime(2025, 3, 1, 22)) == 0

    def test_day_count_is_inclusive(self):
        assert DateService.day_count(date(2025, 3, 1), date(2025, 3, 7)) == 7

    def test_day_count_single_day(self):
        assert DateService.day_count(date(2025, 3, 1), datetime(2025, 3, 1, 18)) == 1

    def test_day_count_inverted_is_zero(self):
        assert DateService.day_count(date(2025, 3, 7), date(2025, 3, 1)) == 0

    def test_leap_year_february(self):
        assert DateService.day_count(date(2024, 2, 1), date(2024, 2, 29)) == 29

    @pytest.mark.parametrize("days,weeks", [(0, 0), (6, 0), (7, 1), (13, 1), (14, 2)])
    def test_weeks_between(self, days, weeks):
        start = date(2025, 3, 1)
        assert DateService.weeks_between(start, start + timedelta(days=days)) == weeks

    def test_weeks_between_never_negative(self):
        assert DateService.weeks_between(date(2025, 3, 20), date(2025, 3, 1)) == 0


class TestDateRange:
    """Tests for date_range, add_days and contains"""

    def test_inclusive_range(self):
        result = list(DateService.date_range(date(2025, 2, 27), date(2025, 3, 2)))
        assert result == [
            date(2025, 2, 27),
            date(2025, 2, 28),
            date(2025, 3, 1),
            date(2025, 3, 2),
        ]

    def test_accepts_datetimes(self):
        result = list(DateService.date_range(datetime(2025, 3, 1, 18), datetime(2025, 3, 2, 6)))
        assert result == [date(2025, 3, 1), date(2025, 3, 2)]

    def test_empty_when_inverted(self):
        assert list(DateService.date_range(date(2025, 3, 2), date(2025, 3, 1))) == []

    def test_each_call_is_a_fresh_iterator(self):
        start, end = date(2025, 3, 1), date(2025, 3, 3)
        first = list(DateService.date_range(start, end))
        second = list(DateService.date_range(start, end))
        assert first == second

    def test_add_days_returns_date(self):
        assert DateService.add_days(datetime(2025, 2, 28, 10), 1) == date(2025, 3, 1)
        assert DateService.add_days(date(2025, 3, 1), -1) == date(2025, 2, 28)

    def test_contains_is_inclusive_by_day(self):
        start = datetime(2025, 3, 1, 9, 0)
        end = datetime(2025, 3, 7, 9, 0)

        assert DateService.contains(start, end, datetime(2025, 3, 1, 0, 5))
        assert DateService.contains(start, end, datetime(2025, 3, 7, 23, 0))
        assert not DateService.contains(start, end, date(2025, 3, 8))
        assert not DateService.contains(start, end, date(2025, 2, 28))
