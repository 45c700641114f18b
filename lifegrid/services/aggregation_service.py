"""
Aggregation and trend service.
Derives averages, streaks, completion rates and trends from day-level data.

Every function degrades to a neutral default (0, None, NEUTRAL, empty list)
on sparse input instead of raising.
"""
import calendar
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from lifegrid.constants import (
    STREAK_THRESHOLD, TREND_UP_FACTOR, TREND_DOWN_FACTOR,
    SLOPE_STRONG, SLOPE_MILD, MIN_POINTS_FOR_SLOPES,
    SLOPE_WINDOW_SHORT, SLOPE_WINDOW_WEEK
)
from lifegrid.schemas import DayData, MonthData, YearData, TrendDirection, TrendLine


class AggregationService:
    """Pure statistics over day-level scores"""

    @staticmethod
    def scored_days(days: Iterable[DayData]) -> List[DayData]:
        return [day for day in days if day.score is not None]

    @staticmethod
    def average_score(days: Iterable[DayData]) -> Optional[float]:
        """Mean of present scores, None when no day has a score"""
        scored = AggregationService.scored_days(days)
        if not scored:
            return None
        return sum(day.score for day in scored) / len(scored)

    @staticmethod
    def average_over_period(days: Iterable[DayData]) -> float:
        """Mean of present scores, 0.0 when no day has a score"""
        average = AggregationService.average_score(days)
        return average if average is not None else 0.0

    @staticmethod
    def completion_rate(days: Sequence[DayData]) -> float:
        """Share of days in the window that have a score"""
        if not days:
            return 0.0
        return len(AggregationService.scored_days(days)) / len(days)

    @staticmethod
    def current_streak(
        scores_newest_first: Iterable[Optional[float]],
        threshold: float = STREAK_THRESHOLD
    ) -> int:
        """
        Count consecutive qualifying days, starting from the most recent.

        A day qualifies when it has a score strictly above threshold. The
        walk stops at the first missing or non-qualifying day.

        Args:
            scores_newest_first: Day scores, today first
            threshold: Minimum (exclusive) score of a qualifying day

        Returns:
            Streak length in days
        """
        streak = 0
        for score in scores_newest_first:
            if score is None or score <= threshold:
                break
            streak += 1
        return streak

    @staticmethod
    def longest_streak(
        days: Iterable[DayData],
        threshold: float = STREAK_THRESHOLD
    ) -> int:
        """Longest run of consecutive qualifying days in chronological data"""
        longest = 0
        current = 0
        previous_date = None

        for day in sorted(days, key=lambda d: d.date):
            qualifies = day.score is not None and day.score > threshold
            contiguous = previous_date is not None and (day.date - previous_date).days == 1
            if qualifies:
                current = current + 1 if contiguous else 1
                longest = max(longest, current)
            else:
                current = 0
            previous_date = day.date

        return longest

    @staticmethod
    def classify_trend(first: float, second: float) -> TrendDirection:
        """
        Compare two period values with a +/-5% hysteresis band.

        UP when second > first * 1.05, DOWN when second < first * 0.95,
        otherwise NEUTRAL.
        """
        if second > first * TREND_UP_FACTOR:
            return TrendDirection.UP
        if second < first * TREND_DOWN_FACTOR:
            return TrendDirection.DOWN
        return TrendDirection.NEUTRAL

    @staticmethod
    def trend(days: Sequence[DayData], period_days: int) -> TrendDirection:
        """
        Trend of the average score over the last two periods.

        The last 2 * period_days entries of chronological day data are split
        into an older and a recent half. A half without any scored day makes
        the comparison meaningless and yields NEUTRAL.
        """
        if period_days <= 0 or not days:
            return TrendDirection.NEUTRAL

        ordered = sorted(days, key=lambda d: d.date)
        recent = ordered[-period_days:]
        older = ordered[-2 * period_days:-period_days]

        older_average = AggregationService.average_score(older)
        recent_average = AggregationService.average_score(recent)
        if older_average is None or recent_average is None:
            return TrendDirection.NEUTRAL

        return AggregationService.classify_trend(older_average, recent_average)

    @staticmethod
    def linear_regression(points: Sequence[Tuple[float, float]]) -> Optional[TrendLine]:
        """
        Least-squares line through (x, y) points.

        Returns None for fewer than two points or when all x are equal.
        """
        if len(points) < 2:
            return None

        n = float(len(points))
        sum_x = sum(x for x, _ in points)
        sum_y = sum(y for _, y in points)
        sum_xy = sum(x * y for x, y in points)
        sum_x2 = sum(x * x for x, _ in points)

        denominator = n * sum_x2 - sum_x * sum_x
        if denominator == 0:
            return None

        slope = (n * sum_xy - sum_x * sum_y) / denominator
        intercept = (sum_y - slope * sum_x) / n
        return TrendLine(slope=slope, intercept=intercept)

    @staticmethod
    def regression_for_days(days: Iterable[DayData]) -> Optional[TrendLine]:
        """Trend line over scored days, x = days since the first scored day"""
        scored = sorted(AggregationService.scored_days(days), key=lambda d: d.date)
        if not scored:
            return None
        origin = scored[0].date
        points = [(float((day.date - origin).days), day.score) for day in scored]
        return AggregationService.linear_regression(points)

    @staticmethod
    def trend_slopes(days: Iterable[DayData]) -> Optional[Dict[str, float]]:
        """
        Slopes over the last 4, the last 7 and all scored days.

        Returns None unless at least seven days have a score and all three
        slopes are defined.
        """
        scored = sorted(AggregationService.scored_days(days), key=lambda d: d.date)
        if len(scored) < MIN_POINTS_FOR_SLOPES:
            return None

        overall = AggregationService.regression_for_days(scored)
        short = AggregationService.regression_for_days(scored[-SLOPE_WINDOW_SHORT:])
        week = AggregationService.regression_for_days(scored[-SLOPE_WINDOW_WEEK:])
        if overall is None or short is None or week is None:
            return None

        return {
            "last_4_days": short.slope,
            "last_week": week.slope,
            "overall": overall.slope,
        }

    @staticmethod
    def describe_slope(slope: float) -> str:
        if slope > SLOPE_STRONG:
            return "Strong positive trend"
        elif slope > SLOPE_MILD:
            return "Positive trend"
        elif slope < -SLOPE_STRONG:
            return "Strong negative trend"
        elif slope < -SLOPE_MILD:
            return "Negative trend"
        return "Stable"

    @staticmethod
    def group_by_month(days: Iterable[DayData]) -> List[MonthData]:
        """Group chronological day data into months (sorted by year, month)"""
        groups: "OrderedDict[Tuple[int, int], List[DayData]]" = OrderedDict()
        for day in sorted(days, key=lambda d: d.date):
            groups.setdefault((day.date.year, day.date.month), []).append(day)

        return [
            MonthData(
                year=year,
                month=month,
                title=calendar.month_name[month],
                days=month_days,
                average_score=AggregationService.average_score(month_days),
            )
            for (year, month), month_days in groups.items()
        ]

    @staticmethod
    def group_by_year(days: Iterable[DayData]) -> List[YearData]:
        """Group chronological day data into calendar years"""
        groups: "OrderedDict[int, List[DayData]]" = OrderedDict()
        for day in sorted(days, key=lambda d: d.date):
            groups.setdefault(day.date.year, []).append(day)

        return [
            YearData(
                year=year,
                start_date=year_days[0].date,
                end_date=year_days[-1].date,
                days=year_days,
                average_score=AggregationService.average_score(year_days),
            )
            for year, year_days in groups.items()
        ]
