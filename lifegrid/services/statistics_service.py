"""
Progress statistics service.
Sprint and life progress snapshots, goal performance and sprint progress metrics.
Snapshots are recomputed from the current date on every call.
"""
from datetime import date
from typing import Iterable, List, Optional

from lifegrid.schemas import (
    Effort, Sprint, SprintStatistics, LifeStatistics, GoalPerformance, SprintProgress
)
from lifegrid.services.date_service import DateService
from lifegrid.services.scoring_service import ScoringService


def _shift_years(value: date, years: int) -> date:
    """Same month/day `years` later (Feb 29 falls back to Feb 28)"""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


class StatisticsService:
    """Service for progress statistics"""

    @staticmethod
    def sprint_progress_fraction(sprint: Sprint, current_date: Optional[date] = None) -> float:
        """
        Fraction of the sprint's span already elapsed.

        0.0 before the sprint starts, 1.0 after it ends, otherwise
        elapsed days / total days (a one-day sprint in progress is 0.0).
        """
        today = DateService.to_day(current_date or DateService.today())
        start = DateService.to_day(sprint.start_date)
        end = DateService.to_day(sprint.end_date)

        if today < start:
            return 0.0
        if today > end:
            return 1.0

        total_days = DateService.days_between(start, end)
        elapsed_days = DateService.days_between(start, today)
        return min(elapsed_days / total_days, 1.0) if total_days > 0 else 0.0

    @staticmethod
    def sprint_statistics(sprint: Sprint, current_date: Optional[date] = None) -> SprintStatistics:
        """
        Calculate detailed sprint statistics.

        Args:
            sprint: Sprint to describe
            current_date: Reference day (defaults to today)

        Returns:
            SprintStatistics snapshot
        """
        today = DateService.to_day(current_date or DateService.today())
        start = DateService.to_day(sprint.start_date)
        end = DateService.to_day(sprint.end_date)

        total_days = max(0, DateService.days_between(start, end))
        elapsed_days = min(max(0, DateService.days_between(start, today)), total_days)
        remaining_days = max(0, total_days - elapsed_days)
        percent_completed = elapsed_days / total_days if total_days > 0 else 0.0

        return SprintStatistics(
            days_passed=elapsed_days,
            days_remaining=remaining_days,
            total_days=total_days,
            weeks_passed=elapsed_days // 7,
            weeks_remaining=remaining_days // 7,
            percent_completed=percent_completed,
            start_date=start,
            end_date=end,
        )

    @staticmethod
    def longest_sprint(sprints: Iterable[Sprint]) -> Optional[Sprint]:
        """Sprint with the longest span (first one wins on ties)"""
        sprints = list(sprints)
        if not sprints:
            return None
        return max(sprints, key=lambda s: DateService.days_between(s.start_date, s.end_date))

    @staticmethod
    def longest_sprint_statistics(
        sprints: Iterable[Sprint],
        current_date: Optional[date] = None
    ) -> Optional[SprintStatistics]:
        sprint = StatisticsService.longest_sprint(sprints)
        if sprint is None:
            return None
        return StatisticsService.sprint_statistics(sprint, current_date)

    @staticmethod
    def life_progress(current_age: int, target_age: int) -> float:
        if target_age <= 0:
            return 0.0
        return min(current_age / target_age, 1.0)

    @staticmethod
    def life_statistics(
        current_age: int,
        target_age: int,
        current_date: Optional[date] = None
    ) -> LifeStatistics:
        """
        Calculate life statistics from ages.

        The birth date is approximated as today's month and day, current_age
        years ago; the projected end date is target_age years after it.
        """
        today = DateService.to_day(current_date or DateService.today())
        birth_date = _shift_years(today, -current_age)
        end_date = _shift_years(birth_date, target_age)

        total_days = DateService.days_between(birth_date, end_date)
        days_lived = DateService.days_between(birth_date, today)
        days_remaining = max(0, total_days - days_lived)
        percent_completed = days_lived / total_days if total_days > 0 else 0.0

        return LifeStatistics(
            years_lived=current_age,
            years_remaining=max(0, target_age - current_age),
            days_lived=days_lived,
            days_remaining=days_remaining,
            weeks_lived=days_lived // 7,
            weeks_remaining=days_remaining // 7,
            percent_completed=percent_completed,
            birth_date=birth_date,
            projected_end_date=end_date,
        )

    @staticmethod
    def _days_elapsed(sprint: Sprint, today: date) -> int:
        """Days of the sprint up to today (or its end), at least 1"""
        end = min(today, DateService.to_day(sprint.end_date))
        return max(1, DateService.day_count(sprint.start_date, end))

    @staticmethod
    def goal_performance(
        sprint: Sprint,
        efforts: Iterable[Effort],
        current_date: Optional[date] = None
    ) -> List[GoalPerformance]:
        """
        Logged hours against accumulated targets for each goal of a sprint.

        The target for a goal is its daily target times the days elapsed in
        the sprint. Performance is not capped so over-delivery stays visible.
        """
        today = DateService.to_day(current_date or DateService.today())
        days_elapsed = StatisticsService._days_elapsed(sprint, today)
        logged = ScoringService.hours_by_goal(sprint, efforts)

        result = []
        for goal in sprint.goals:
            target_hours = goal.target_hours * days_elapsed
            logged_hours = logged.get(goal.id, 0.0)
            result.append(GoalPerformance(
                goal_id=goal.id,
                title=goal.title,
                target_hours=target_hours,
                logged_hours=logged_hours,
                performance=logged_hours / target_hours if target_hours > 0 else 0.0,
            ))
        return result

    @staticmethod
    def weighted_goal_completion(
        sprint: Sprint,
        efforts: Iterable[Effort],
        current_date: Optional[date] = None
    ) -> float:
        """Weight-averaged goal completion (each goal capped at 100%)"""
        total_weight = sum(goal.weight for goal in sprint.goals)
        if total_weight <= 0:
            return 0.0

        weights = {goal.id: goal.weight for goal in sprint.goals}
        weighted = 0.0
        for performance in StatisticsService.goal_performance(sprint, efforts, current_date):
            weighted += min(performance.performance, 1.0) * weights[performance.goal_id]
        return weighted / total_weight

    @staticmethod
    def sprint_progress(
        sprint: Sprint,
        efforts: List[Effort],
        current_date: Optional[date] = None
    ) -> SprintProgress:
        """
        Progress metrics for a sprint: days done, average day score so far,
        and weighted goal completion.
        """
        today = DateService.to_day(current_date or DateService.today())
        total_days = DateService.day_count(sprint.start_date, sprint.end_date)
        end = min(today, DateService.to_day(sprint.end_date))
        days_completed = DateService.day_count(sprint.start_date, end)

        scores = ScoringService.daily_scores(sprint, efforts)[:days_completed]
        clamped = [ScoringService.clamp_score(score) for score in scores]
        average_score = sum(clamped) / len(clamped) if clamped else 0.0

        return SprintProgress(
            days_completed=days_completed,
            total_days=total_days,
            average_score=average_score,
            completion_rate=StatisticsService.weighted_goal_completion(sprint, efforts, today),
        )
