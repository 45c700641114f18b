"""
Sprint store - coordination layer.
Owns the sprint and effort collections, answers date/sprint-scoped queries
and writes the affected collection back to persistence after every mutation.
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Set, Tuple
from uuid import UUID

from lifegrid.constants import (
    STREAK_THRESHOLD, DEFAULT_STATS_PERIOD_DAYS, DEFAULT_TREND_PERIOD_DAYS
)
from lifegrid.repositories.sprint_repository import SprintRepository
from lifegrid.schemas import (
    Sprint, Goal, Effort, DayData, MonthData, YearData, PeriodStats,
    SprintProgress, GoalPerformance, TrendDirection
)
from lifegrid.services.aggregation_service import AggregationService
from lifegrid.services.date_service import DateService, DateLike
from lifegrid.services.scoring_service import ScoringService
from lifegrid.services.statistics_service import StatisticsService

logger = logging.getLogger("lifegrid.store")


class SprintStore:
    """In-memory owner of sprints and efforts, backed by a repository"""

    def __init__(self, repository: SprintRepository):
        self.repository = repository
        self.sprints: List[Sprint] = repository.load_sprints()
        self.efforts: List[Effort] = repository.load_efforts()
        logger.debug(f"Loaded {len(self.sprints)} sprints, {len(self.efforts)} efforts")

    # === Persistence ===

    def save_sprints(self) -> None:
        self.repository.save_sprints(self.sprints)

    def save_efforts(self) -> None:
        self.repository.save_efforts(self.efforts)

    # === Sprint mutations ===

    def add_sprint(self, sprint: Sprint) -> Sprint:
        self.sprints.append(sprint)
        self.save_sprints()
        return sprint

    def update_sprint(self, updated: Sprint) -> Optional[Sprint]:
        """
        Replace a sprint by id.

        Efforts logged against goals the edit removed are deleted with them.

        Returns:
            The stored sprint, or None if no sprint has that id
        """
        index = self._sprint_index(updated.id)
        if index is None:
            return None

        removed_goal_ids = self.sprints[index].goal_ids() - updated.goal_ids()
        self.sprints[index] = updated
        self.save_sprints()

        if removed_goal_ids:
            removed = self._remove_efforts_for_goals(removed_goal_ids)
            logger.info(f"Sprint {updated.id}: removed {removed} efforts of deleted goals")
            self.save_efforts()

        return updated

    def delete_sprint(self, sprint_id: UUID) -> bool:
        """Delete a sprint together with the efforts logged against its goals"""
        index = self._sprint_index(sprint_id)
        if index is None:
            return False

        sprint = self.sprints.pop(index)
        self._remove_efforts_for_goals(sprint.goal_ids())

        self.save_sprints()
        self.save_efforts()
        return True

    # === Effort mutations ===

    def add_effort(self, effort: Effort) -> Optional[Effort]:
        """
        Add an effort.

        An effort whose goal no sprint owns is rejected (logged, None returned).
        """
        if self.get_goal_by_id(effort.goal_id) is None:
            logger.warning(f"Rejected effort {effort.id}: unknown goal {effort.goal_id}")
            return None

        self.efforts.append(effort)
        self.save_efforts()
        return effort

    def update_effort(self, updated: Effort) -> Optional[Effort]:
        index = self._effort_index(updated.id)
        if index is None:
            return None
        if self.get_goal_by_id(updated.goal_id) is None:
            logger.warning(f"Rejected update of effort {updated.id}: unknown goal {updated.goal_id}")
            return None

        self.efforts[index] = updated
        self.save_efforts()
        return updated

    def delete_effort(self, effort_id: UUID) -> bool:
        index = self._effort_index(effort_id)
        if index is None:
            return False

        del self.efforts[index]
        self.save_efforts()
        return True

    def delete_efforts_for_goal(self, goal_id: UUID) -> int:
        removed = self._remove_efforts_for_goals({goal_id})
        self.save_efforts()
        return removed

    def _remove_efforts_for_goals(self, goal_ids: Set[UUID]) -> int:
        before = len(self.efforts)
        self.efforts = [effort for effort in self.efforts if effort.goal_id not in goal_ids]
        return before - len(self.efforts)

    def _sprint_index(self, sprint_id: UUID) -> Optional[int]:
        return next((i for i, s in enumerate(self.sprints) if s.id == sprint_id), None)

    def _effort_index(self, effort_id: UUID) -> Optional[int]:
        return next((i for i, e in enumerate(self.efforts) if e.id == effort_id), None)

    # === Queries ===

    def get_sprint(self, sprint_id: UUID) -> Optional[Sprint]:
        index = self._sprint_index(sprint_id)
        return self.sprints[index] if index is not None else None

    def get_effort(self, effort_id: UUID) -> Optional[Effort]:
        index = self._effort_index(effort_id)
        return self.efforts[index] if index is not None else None

    def get_goal_by_id(self, goal_id: UUID) -> Optional[Goal]:
        for sprint in self.sprints:
            goal = sprint.find_goal(goal_id)
            if goal is not None:
                return goal
        return None

    def get_sprint_for_goal(self, goal_id: UUID) -> Optional[Sprint]:
        return next((s for s in self.sprints if goal_id in s.goal_ids()), None)

    def efforts_for_sprint(self, sprint: Sprint) -> List[Effort]:
        goal_ids = sprint.goal_ids()
        return [effort for effort in self.efforts if effort.goal_id in goal_ids]

    def efforts_for_date(self, day: DateLike) -> List[Effort]:
        target = DateService.to_day(day)
        return [effort for effort in self.efforts if DateService.to_day(effort.date) == target]

    def sprint_for_date(self, day: DateLike) -> Optional[Sprint]:
        """First sprint (in collection order) whose span contains the day"""
        return next(
            (s for s in self.sprints if DateService.contains(s.start_date, s.end_date, day)),
            None
        )

    def sprints_for_date_range(self, start: DateLike, end: DateLike) -> List[Sprint]:
        """Sprints overlapping start..end"""
        range_start = DateService.to_day(start)
        range_end = DateService.to_day(end)
        return [
            s for s in self.sprints
            if DateService.to_day(s.start_date) <= range_end
            and DateService.to_day(s.end_date) >= range_start
        ]

    def is_date_in_any_sprint(self, day: DateLike) -> bool:
        return self.sprint_for_date(day) is not None

    def has_effort_for_day(self, day: DateLike) -> bool:
        return bool(self.efforts_for_date(day))

    def total_hours_for_day(self, day: DateLike) -> float:
        return sum(effort.hours for effort in self.efforts_for_date(day))

    def active_sprints(self, today: Optional[date] = None) -> List[Sprint]:
        """Sprints running today, most recently started first"""
        today = today or DateService.today()
        active = [s for s in self.sprints if DateService.contains(s.start_date, s.end_date, today)]
        return sorted(active, key=lambda s: DateService.to_day(s.start_date), reverse=True)

    def active_sprint_count(self, today: Optional[date] = None) -> int:
        return len(self.active_sprints(today))

    # === Day data ===

    def generate_day_data_for_range(self, start: DateLike, end: DateLike) -> List[DayData]:
        """
        Build one DayData per day from start to end inclusive.

        Each day is scored by the first sprint that contains it. The score
        is absent when no sprint contains the day or nothing was logged for
        that sprint on the day.
        """
        scored: Dict[UUID, Tuple[List[float], Set[int]]] = {}
        result = []

        for day in DateService.date_range(start, end):
            sprint = self.sprint_for_date(day)
            if sprint is None:
                result.append(DayData(date=day, score=None))
                continue

            if sprint.id not in scored:
                efforts = self.efforts_for_sprint(sprint)
                scored[sprint.id] = (
                    ScoringService.daily_scores(sprint, efforts),
                    ScoringService.logged_day_indexes(sprint, efforts),
                )
            scores, logged_days = scored[sprint.id]

            day_index = DateService.days_between(sprint.start_date, day)
            result.append(DayData(
                date=day,
                score=ScoringService.day_score_at(scores, logged_days, day_index)
            ))

        return result

    def _earliest_sprint_day(self) -> Optional[date]:
        if not self.sprints:
            return None
        return min(DateService.to_day(s.start_date) for s in self.sprints)

    # === Aggregates ===

    def current_streak(
        self,
        today: Optional[date] = None,
        threshold: float = STREAK_THRESHOLD
    ) -> int:
        """Consecutive qualifying days walking backward from today"""
        today = today or DateService.today()
        earliest = self._earliest_sprint_day()
        if earliest is None:
            return 0

        days = self.generate_day_data_for_range(earliest, today)
        return AggregationService.current_streak(
            (day.score for day in reversed(days)), threshold
        )

    def stats_for_period(
        self,
        days: int = DEFAULT_STATS_PERIOD_DAYS,
        today: Optional[date] = None
    ) -> PeriodStats:
        """Average score, completion rate and current streak over the last `days` days"""
        today = today or DateService.today()
        day_data = self.generate_day_data_for_range(DateService.add_days(today, -days), today)

        return PeriodStats(
            average_score=AggregationService.average_over_period(day_data),
            completion_rate=AggregationService.completion_rate(day_data),
            streak=self.current_streak(today),
        )

    def score_trend(
        self,
        period_days: int = DEFAULT_TREND_PERIOD_DAYS,
        today: Optional[date] = None
    ) -> TrendDirection:
        """Average score of the last period against the period before it"""
        if period_days <= 0:
            return TrendDirection.NEUTRAL
        today = today or DateService.today()
        start = DateService.add_days(today, -(2 * period_days - 1))
        return AggregationService.trend(self.generate_day_data_for_range(start, today), period_days)

    def hours_for_range(self, start: DateLike, end: DateLike) -> float:
        range_start = DateService.to_day(start)
        range_end = DateService.to_day(end)
        return sum(
            effort.hours for effort in self.efforts
            if range_start <= DateService.to_day(effort.date) <= range_end
        )

    def average_hours_for_period(
        self,
        days: int = DEFAULT_STATS_PERIOD_DAYS,
        today: Optional[date] = None
    ) -> float:
        """Logged hours per day over the last `days` days"""
        if days <= 0:
            return 0.0
        today = today or DateService.today()
        return self.hours_for_range(DateService.add_days(today, -days), today) / days

    def hours_trend(
        self,
        period_days: int = DEFAULT_TREND_PERIOD_DAYS,
        today: Optional[date] = None
    ) -> TrendDirection:
        """Total hours of the last period against the period before it"""
        if period_days <= 0:
            return TrendDirection.NEUTRAL
        today = today or DateService.today()
        recent_start = DateService.add_days(today, -(period_days - 1))
        older_start = DateService.add_days(recent_start, -period_days)
        older_end = DateService.add_days(recent_start, -1)

        older_hours = self.hours_for_range(older_start, older_end)
        recent_hours = self.hours_for_range(recent_start, today)
        return AggregationService.classify_trend(older_hours, recent_hours)

    def trend_slopes(
        self,
        days: int = DEFAULT_STATS_PERIOD_DAYS,
        today: Optional[date] = None
    ) -> Optional[Dict[str, float]]:
        today = today or DateService.today()
        day_data = self.generate_day_data_for_range(DateService.add_days(today, -days), today)
        return AggregationService.trend_slopes(day_data)

    def sprint_scores(self, sprint: Sprint) -> List[DayData]:
        """Clamped day data across a sprint's own span"""
        efforts = self.efforts_for_sprint(sprint)
        scores = ScoringService.daily_scores(sprint, efforts)
        logged_days = ScoringService.logged_day_indexes(sprint, efforts)
        return [
            DayData(date=day, score=ScoringService.day_score_at(scores, logged_days, index))
            for index, day in enumerate(DateService.date_range(sprint.start_date, sprint.end_date))
        ]

    def sprint_progress(self, sprint: Sprint, today: Optional[date] = None) -> SprintProgress:
        return StatisticsService.sprint_progress(sprint, self.efforts_for_sprint(sprint), today)

    def goal_performance(self, sprint: Sprint, today: Optional[date] = None) -> List[GoalPerformance]:
        return StatisticsService.goal_performance(sprint, self.efforts_for_sprint(sprint), today)

    # === Timeline ===

    def sprint_timeline(self) -> List[YearData]:
        """One YearData per calendar year touched by any sprint"""
        if not self.sprints:
            return []

        first_year = min(DateService.to_day(s.start_date).year for s in self.sprints)
        last_year = max(DateService.to_day(s.end_date).year for s in self.sprints)
        if last_year < first_year:
            return []

        days = self.generate_day_data_for_range(date(first_year, 1, 1), date(last_year, 12, 31))
        return AggregationService.group_by_year(days)

    def months_for_year(self, year: int) -> List[MonthData]:
        days = self.generate_day_data_for_range(date(year, 1, 1), date(year, 12, 31))
        return AggregationService.group_by_month(days)
