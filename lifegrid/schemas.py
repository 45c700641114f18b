from pydantic import BaseModel, Field, computed_field
from datetime import datetime, date
from enum import Enum
from typing import Optional, List, Set
from uuid import UUID, uuid4

from lifegrid.constants import (
    MAX_GOAL_WEIGHT_TOTAL, SCORE_LABELS, SCORE_LABEL_LOWEST, SCORE_LABEL_NO_DATA,
    TREND_UP, TREND_DOWN, TREND_NEUTRAL,
    DEFAULT_USER_NAME, DEFAULT_CURRENT_AGE, DEFAULT_TARGET_AGE,
    DEFAULT_YEARS_TO_VIEW, DEFAULT_GRID_VIEW
)


def format_medium_date(value: date) -> str:
    """Format a date like 'Mar 1, 2025'"""
    return f"{value:%b} {value.day}, {value.year}"


def format_percent(fraction: float) -> str:
    return f"{fraction * 100:.1f}%"


# === Domain records (persisted as JSON blobs) ===

class Goal(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str = Field(..., min_length=1, max_length=200)
    target_hours: float = Field(..., ge=0)  # Daily target
    weight: float = Field(..., ge=0, le=1)  # Fraction of the day's achievable score


class Sprint(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=200)
    start_date: datetime
    end_date: datetime  # Inclusive
    goals: List[Goal] = Field(default_factory=list)

    @property
    def total_weight(self) -> float:
        return sum(goal.weight for goal in self.goals)

    @property
    def weights_exceed_limit(self) -> bool:
        """True when goal weights add up to more than a full day"""
        return self.total_weight > MAX_GOAL_WEIGHT_TOTAL + 1e-9

    def goal_ids(self) -> Set[UUID]:
        return {goal.id for goal in self.goals}

    def find_goal(self, goal_id: UUID) -> Optional[Goal]:
        return next((goal for goal in self.goals if goal.id == goal_id), None)


class Effort(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    goal_id: UUID  # Weak reference, resolved through the store
    date: datetime
    hours: float = Field(..., ge=0)


# === Derived records ===

class TrendDirection(str, Enum):
    UP = TREND_UP
    DOWN = TREND_DOWN
    NEUTRAL = TREND_NEUTRAL

    @property
    def description(self) -> str:
        return {
            TREND_UP: "Improving",
            TREND_DOWN: "Declining",
            TREND_NEUTRAL: "Stable",
        }[self.value]


class DayData(BaseModel):
    date: date
    score: Optional[float] = None  # None when nothing applies to the day

    @computed_field
    @property
    def label(self) -> str:
        if self.score is None:
            return SCORE_LABEL_NO_DATA
        percentage = int(self.score * 100)
        for lower_bound, label in SCORE_LABELS:
            if percentage >= lower_bound:
                return label
        return SCORE_LABEL_LOWEST


class MonthData(BaseModel):
    year: int
    month: int
    title: str
    days: List[DayData]
    average_score: Optional[float] = None


class YearData(BaseModel):
    year: int
    start_date: date
    end_date: date
    days: List[DayData]
    average_score: Optional[float] = None

    @computed_field
    @property
    def title(self) -> str:
        return str(self.year)


class TrendLine(BaseModel):
    slope: float
    intercept: float

    def value_at(self, x: float) -> float:
        return self.intercept + self.slope * x


class PeriodStats(BaseModel):
    average_score: float = 0.0
    completion_rate: float = 0.0
    streak: int = 0


class GoalPerformance(BaseModel):
    goal_id: UUID
    title: str
    target_hours: float
    logged_hours: float
    performance: float


class SprintProgress(BaseModel):
    days_completed: int
    total_days: int
    average_score: float
    completion_rate: float


class SprintStatistics(BaseModel):
    days_passed: int
    days_remaining: int
    total_days: int
    weeks_passed: int
    weeks_remaining: int
    percent_completed: float
    start_date: date
    end_date: date

    @computed_field
    @property
    def formatted_percent_completed(self) -> str:
        return format_percent(self.percent_completed)

    @computed_field
    @property
    def formatted_start_date(self) -> str:
        return format_medium_date(self.start_date)

    @computed_field
    @property
    def formatted_end_date(self) -> str:
        return format_medium_date(self.end_date)


class LifeStatistics(BaseModel):
    years_lived: int
    years_remaining: int
    days_lived: int
    days_remaining: int
    weeks_lived: int
    weeks_remaining: int
    percent_completed: float
    birth_date: date
    projected_end_date: date

    @computed_field
    @property
    def formatted_percent_completed(self) -> str:
        return format_percent(self.percent_completed)

    @computed_field
    @property
    def formatted_birth_date(self) -> str:
        return format_medium_date(self.birth_date)

    @computed_field
    @property
    def formatted_end_date(self) -> str:
        return format_medium_date(self.projected_end_date)


# === API schemas ===

class SprintCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    start_date: datetime
    end_date: datetime
    goals: List[Goal] = Field(default_factory=list)


class SprintUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    goals: Optional[List[Goal]] = None


class SprintResponse(Sprint):
    """Sprint plus the weight-sum warning shown by clients"""

    @computed_field
    @property
    def goal_weight_total(self) -> float:
        return round(self.total_weight, 6)

    @computed_field
    @property
    def goal_weight_warning(self) -> bool:
        return self.weights_exceed_limit


class EffortCreate(BaseModel):
    goal_id: UUID
    date: datetime
    hours: float = Field(..., ge=0)


class EffortUpdate(BaseModel):
    goal_id: Optional[UUID] = None
    date: Optional[datetime] = None
    hours: Optional[float] = Field(None, ge=0)


class StatsResponse(PeriodStats):
    days: int
    score_trend: TrendDirection = TrendDirection.NEUTRAL
    hours_trend: TrendDirection = TrendDirection.NEUTRAL
    average_hours: float = 0.0


class TrendSlope(BaseModel):
    slope: float
    description: str


class TrendSlopesResponse(BaseModel):
    last_4_days: Optional[TrendSlope] = None
    last_week: Optional[TrendSlope] = None
    overall: Optional[TrendSlope] = None


# Settings schemas
class SettingsBase(BaseModel):
    user_name: str = Field(default=DEFAULT_USER_NAME, max_length=200)
    user_email: str = Field(default="", max_length=320)
    is_logged_in: bool = False
    current_age: int = Field(default=DEFAULT_CURRENT_AGE, ge=0, le=150)
    target_age: int = Field(default=DEFAULT_TARGET_AGE, ge=1, le=150)
    years_to_view: int = Field(default=DEFAULT_YEARS_TO_VIEW, ge=1, le=100)
    default_grid_view: str = Field(default=DEFAULT_GRID_VIEW)


class SettingsUpdate(BaseModel):
    user_name: Optional[str] = Field(None, max_length=200)
    user_email: Optional[str] = Field(None, max_length=320)
    is_logged_in: Optional[bool] = None
    current_age: Optional[int] = Field(None, ge=0, le=150)
    target_age: Optional[int] = Field(None, ge=1, le=150)
    years_to_view: Optional[int] = Field(None, ge=1, le=100)
    default_grid_view: Optional[str] = None


class SettingsResponse(SettingsBase):
    id: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
