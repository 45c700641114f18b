"""
Date calculation service.
Calendar-day truncation, day/week counting and inclusive range iteration.
All day arithmetic works on calendar dates, never on elapsed seconds.
"""
from datetime import datetime, timedelta, date
from typing import Iterator, Union

DateLike = Union[date, datetime]


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def today() -> date:
        """Current local calendar day"""
        return datetime.now().date()

    @staticmethod
    def to_day(value: DateLike) -> date:
        """
        Get the calendar day a timestamp falls on, in local time.

        Timezone-aware datetimes are converted to the local zone first so
        that the same instant always maps to the same day key.

        Args:
            value: Date or datetime

        Returns:
            Calendar date
        """
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone()
            return value.date()
        return value

    @staticmethod
    def start_of_day(value: DateLike) -> datetime:
        """
        Normalize a timestamp to local midnight (naive datetime).

        Args:
            value: Date or datetime to normalize

        Returns:
            Datetime set to midnight
        """
        return datetime.combine(DateService.to_day(value), datetime.min.time())

    @staticmethod
    def days_between(start: DateLike, end: DateLike) -> int:
        """Signed number of calendar days from start to end"""
        return (DateService.to_day(end) - DateService.to_day(start)).days

    @staticmethod
    def day_count(start: DateLike, end: DateLike) -> int:
        """
        Inclusive number of days covered by start..end.

        A range whose start and end fall on the same day counts as one day;
        an inverted range counts as zero.
        """
        return max(0, DateService.days_between(start, end) + 1)

    @staticmethod
    def weeks_between(start: DateLike, end: DateLike) -> int:
        """Whole weeks from start to end (never negative)"""
        return max(0, DateService.days_between(start, end)) // 7

    @staticmethod
    def add_days(value: DateLike, days: int) -> date:
        return DateService.to_day(value) + timedelta(days=days)

    @staticmethod
    def date_range(start: DateLike, end: DateLike) -> Iterator[date]:
        """
        Yield one date per calendar day from start to end inclusive.

        Empty when end is before start. Each call produces a fresh iterator.
        """
        current = DateService.to_day(start)
        last = DateService.to_day(end)
        while current <= last:
            yield current
            current += timedelta(days=1)

    @staticmethod
    def contains(start: DateLike, end: DateLike, value: DateLike) -> bool:
        """True if value's day lies within start..end (inclusive, by day)"""
        day = DateService.to_day(value)
        return DateService.to_day(start) <= day <= DateService.to_day(end)

