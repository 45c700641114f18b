"""
Builders for sprint and effort test data.
"""
from datetime import date, datetime, time, timedelta

from lifegrid.schemas import Sprint, Goal, Effort


def at(day: date, hour: int = 0, minute: int = 0) -> datetime:
    """Naive local datetime on the given day"""
    return datetime.combine(day, time(hour, minute))


def make_sprint(start: date, days: int, goals=None, name: str = "Sprint") -> Sprint:
    """Sprint covering `days` calendar days starting at `start`"""
    return Sprint(
        name=name,
        start_date=at(start),
        end_date=at(start + timedelta(days=days - 1), 23, 59),
        goals=goals if goals is not None else [Goal(title="Focus", target_hours=1, weight=1)],
    )


def make_effort(goal: Goal, day: date, hours: float, hour: int = 12) -> Effort:
    return Effort(goal_id=goal.id, date=at(day, hour), hours=hours)
