"""
Tests for AggregationService.

Tests cover:
1. Period averages and completion rate
2. Current and longest streaks
3. Two-period trend classification
4. Regression slopes
5. Month and year grouping
"""
import pytest
from datetime import date, timedelta

from lifegrid.schemas import DayData, TrendDirection
from lifegrid.services.aggregation_service import AggregationService

START = date(2025, 3, 1)


def days_from(scores, start=START):
    """Chronological DayData for a list of scores (None = no data)"""
    return [DayData(date=start + timedelta(days=i), score=s) for i, s in enumerate(scores)]


class TestAverages:
    """Tests for average_score, average_over_period and completion_rate"""

    def test_average_over_empty_period_is_zero(self):
        assert AggregationService.average_over_period([]) == 0.0

    def test_average_without_scores_is_zero(self):
        assert AggregationService.average_over_period(days_from([None, None])) == 0.0

    def test_average_ignores_missing_days(self):
        days = days_from([1.0, None, 0.5, None])
        assert AggregationService.average_over_period(days) == 0.75

    def test_average_score_is_none_without_data(self):
        assert AggregationService.average_score(days_from([None])) is None

    def test_zero_scores_count_toward_average(self):
        assert AggregationService.average_score(days_from([0.0, 1.0])) == 0.5

    def test_completion_rate(self):
        days = days_from([1, 1, 1, None, None, None, None])
        assert AggregationService.completion_rate(days) == pytest.approx(3 / 7)

    def test_completion_rate_empty_window(self):
        assert AggregationService.completion_rate([]) == 0.0


class TestStreaks:
    """Tests for current_streak and longest_streak"""

    def test_stops_at_first_low_day(self):
        """Scores today-first [0.5, 0.5, 0.2, 0.5] give a streak of 2"""
        assert AggregationService.current_streak([0.5, 0.5, 0.2, 0.5], 0.3) == 2

    def test_stops_at_missing_day(self):
        assert AggregationService.current_streak([0.9, None, 0.9]) == 1

    def test_threshold_is_exclusive(self):
        assert AggregationService.current_streak([0.3, 0.9]) == 0

    def test_no_data(self):
        assert AggregationService.current_streak([]) == 0

    def test_whole_history_qualifies(self):
        assert AggregationService.current_streak([0.4] * 5) == 5

    def test_longest_streak(self):
        days = days_from([0.5, 0.6, 0.7, 0.1, 0.8, 0.9, None, 0.5])
        assert AggregationService.longest_streak(days) == 3

    def test_longest_streak_needs_consecutive_dates(self):
        days = [
            DayData(date=START, score=0.9),
            DayData(date=START + timedelta(days=2), score=0.9),
        ]
        assert AggregationService.longest_streak(days) == 1


class TestTrend:
    """Tests for classify_trend and trend"""

    @pytest.mark.parametrize("first,second,expected", [
        (1.0, 1.04, TrendDirection.NEUTRAL),
        (1.0, 0.96, TrendDirection.NEUTRAL),
        (1.0, 1.06, TrendDirection.UP),
        (1.0, 0.94, TrendDirection.DOWN),
        (0.0, 0.0, TrendDirection.NEUTRAL),
        (0.0, 0.1, TrendDirection.UP),
    ])
    def test_hysteresis_band(self, first, second, expected):
        assert AggregationService.classify_trend(first, second) == expected

    def test_improving_second_half(self):
        days = days_from([0.5] * 7 + [0.8] * 7)
        assert AggregationService.trend(days, 7) == TrendDirection.UP

    def test_declining_second_half(self):
        days = days_from([0.8] * 7 + [0.5] * 7)
        assert AggregationService.trend(days, 7) == TrendDirection.DOWN

    def test_uses_only_last_two_periods(self):
        """Older days beyond 2 * period are ignored"""
        days = days_from([0.0] * 10 + [0.6] * 3 + [0.6] * 3)
        assert AggregationService.trend(days, 3) == TrendDirection.NEUTRAL

    def test_half_without_data_is_neutral(self):
        days = days_from([None] * 7 + [0.8] * 7)
        assert AggregationService.trend(days, 7) == TrendDirection.NEUTRAL

    def test_non_positive_period_is_neutral(self):
        assert AggregationService.trend(days_from([0.5, 0.9]), 0) == TrendDirection.NEUTRAL

    def test_description(self):
        assert TrendDirection.UP.description == "Improving"
        assert TrendDirection.NEUTRAL.description == "Stable"


class TestRegression:
    """Tests for linear_regression and trend_slopes"""

    def test_fits_exact_line(self):
        line = AggregationService.linear_regression([(0, 1), (1, 3), (2, 5)])

        assert line.slope == pytest.approx(2.0)
        assert line.intercept == pytest.approx(1.0)
        assert line.value_at(3) == pytest.approx(7.0)

    def test_single_point_has_no_line(self):
        assert AggregationService.linear_regression([(0, 1)]) is None

    def test_vertical_points_have_no_line(self):
        assert AggregationService.linear_regression([(2, 1), (2, 3)]) is None

    def test_regression_skips_missing_days(self):
        line = AggregationService.regression_for_days(days_from([0.1, None, 0.3]))
        assert line.slope == pytest.approx(0.1)

    def test_slopes_need_seven_scored_days(self):
        assert AggregationService.trend_slopes(days_from([0.5] * 6 + [None] * 5)) is None

    def test_slopes_of_steady_climb(self):
        days = days_from([0.05 * i for i in range(10)])

        slopes = AggregationService.trend_slopes(days)

        assert set(slopes) == {"last_4_days", "last_week", "overall"}
        for slope in slopes.values():
            assert slope == pytest.approx(0.05)

    @pytest.mark.parametrize("slope,description", [
        (0.05, "Strong positive trend"),
        (0.01, "Positive trend"),
        (0.0, "Stable"),
        (-0.01, "Negative trend"),
        (-0.05, "Strong negative trend"),
    ])
    def test_describe_slope(self, slope, description):
        assert AggregationService.describe_slope(slope) == description


class TestGrouping:
    """Tests for group_by_month and group_by_year"""

    def test_months_in_order(self):
        days = days_from([0.5, None, 1.0, 0.2], start=date(2025, 1, 30))

        months = AggregationService.group_by_month(days)

        assert [(m.year, m.month, m.title) for m in months] == [
            (2025, 1, "January"),
            (2025, 2, "February"),
        ]
        assert len(months[0].days) == 2
        assert months[0].average_score == 0.5
        assert months[1].average_score == pytest.approx(0.6)

    def test_years(self):
        days = days_from([0.4, 0.6, None], start=date(2024, 12, 31))

        years = AggregationService.group_by_year(days)

        assert [y.title for y in years] == ["2024", "2025"]
        assert years[0].start_date == years[0].end_date == date(2024, 12, 31)
        assert years[1].average_score == 0.6

    def test_empty(self):
        assert AggregationService.group_by_month([]) == []
        assert AggregationService.group_by_year([]) == []


class TestDayLabel:
    """Tests for DayData.label"""

    @pytest.mark.parametrize("score,label", [
        (None, "No Data"),
        (0.95, "Excellent"),
        (0.75, "Great"),
        (0.6, "Good"),
        (0.45, "Fair"),
        (0.2, "Poor"),
        (0.1, "Very Poor"),
        (0.0, "Very Poor"),
    ])
    def test_label(self, score, label):
        assert DayData(date=START, score=score).label == label
