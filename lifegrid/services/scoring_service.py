"""
Sprint scoring service.
Turns a sprint and its logged efforts into one score per day of the sprint.

Scoring policy:
    progress(goal, day) = min(sum of the goal's hours that day / target_hours, 1.0)
    raw_score(day)      = sum over goals of progress(goal, day) * goal.weight

A goal therefore never contributes more than its weight to a day, however
many efforts are logged against it. Raw scores are not clamped; every
consumer reads day scores through ``clamp_score`` (via ``day_score_at``),
which bounds them to [0, 1] when goal weights add up to more than 1.0.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import UUID

from lifegrid.constants import MAX_DAY_SCORE, MIN_DAY_SCORE
from lifegrid.schemas import Effort, Sprint
from lifegrid.services.date_service import DateService


class ScoringService:
    """Single source of truth for day scores"""

    @staticmethod
    def goal_progress(hours: float, target_hours: float) -> float:
        """
        Fraction of a goal's daily target reached, capped at 1.0.

        A goal with no positive target yields no progress.
        """
        if target_hours <= 0:
            return 0.0
        return min(hours / target_hours, 1.0)

    @staticmethod
    def clamp_score(score: float) -> float:
        return max(MIN_DAY_SCORE, min(MAX_DAY_SCORE, score))

    @staticmethod
    def _hours_by_day_and_goal(
        sprint: Sprint,
        efforts: Iterable[Effort]
    ) -> "OrderedDict[Tuple[int, UUID], float]":
        """
        Sum effort hours per (day index, goal id) for efforts that belong to
        the sprint. Efforts outside the sprint span or pointing at a goal
        the sprint does not own are skipped.
        """
        days_count = DateService.day_count(sprint.start_date, sprint.end_date)
        goal_ids = sprint.goal_ids()
        totals: "OrderedDict[Tuple[int, UUID], float]" = OrderedDict()

        for effort in efforts:
            day_index = DateService.days_between(sprint.start_date, effort.date)
            if day_index < 0 or day_index >= days_count:
                continue
            if effort.goal_id not in goal_ids:
                continue
            key = (day_index, effort.goal_id)
            totals[key] = totals.get(key, 0.0) + effort.hours

        return totals

    @staticmethod
    def daily_scores(sprint: Sprint, efforts: Iterable[Effort]) -> List[float]:
        """
        Calculate raw daily scores for a sprint.

        Args:
            sprint: Sprint whose goals define targets and weights
            efforts: Efforts to score (efforts of other sprints are ignored)

        Returns:
            One score per day of the sprint, index 0 = start day.
            Empty if the sprint ends before it starts.
        """
        days_count = DateService.day_count(sprint.start_date, sprint.end_date)
        scores = [0.0] * days_count
        goals = {goal.id: goal for goal in sprint.goals}

        totals = ScoringService._hours_by_day_and_goal(sprint, efforts)
        for (day_index, goal_id), hours in totals.items():
            goal = goals[goal_id]
            progress = ScoringService.goal_progress(hours, goal.target_hours)
            scores[day_index] += progress * goal.weight

        return scores

    @staticmethod
    def logged_day_indexes(sprint: Sprint, efforts: Iterable[Effort]) -> Set[int]:
        """Day indexes of the sprint that have at least one effort logged"""
        return {
            day_index
            for day_index, _ in ScoringService._hours_by_day_and_goal(sprint, efforts)
        }

    @staticmethod
    def day_score_at(
        scores: List[float],
        logged_days: Set[int],
        day_index: int
    ) -> Optional[float]:
        """
        Clamped score for one day, or None when nothing was logged that day.

        Zero and "no data" are different states: a day with efforts that
        earned nothing scores 0.0, a day without any effort has no score.
        """
        if day_index < 0 or day_index >= len(scores):
            return None
        if day_index not in logged_days:
            return None
        return ScoringService.clamp_score(scores[day_index])

    @staticmethod
    def hours_by_goal(sprint: Sprint, efforts: Iterable[Effort]) -> Dict[UUID, float]:
        """Total logged hours per goal of the sprint within its span"""
        result = {goal.id: 0.0 for goal in sprint.goals}
        for (_, goal_id), hours in ScoringService._hours_by_day_and_goal(sprint, efforts).items():
            result[goal_id] += hours
        return result
