"""
Request-level operations.
Turn API payloads into store mutations and raise domain exceptions where the
store answers None/False.
"""
from typing import List, Optional
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from lifegrid.exceptions import (
    SprintNotFoundException, EffortNotFoundException,
    GoalNotFoundException, ValidationException
)
from lifegrid.models import UserSettings
from lifegrid.repositories.settings_repository import SettingsRepository
from lifegrid.repositories.sprint_repository import KeyValueSprintRepository
from lifegrid.schemas import (
    Sprint, SprintCreate, SprintUpdate, Effort, EffortCreate, EffortUpdate,
    SettingsUpdate, LifeStatistics
)
from lifegrid.services.date_service import DateService
from lifegrid.services.sprint_store import SprintStore
from lifegrid.services.statistics_service import StatisticsService


def get_store(db: Session) -> SprintStore:
    return SprintStore(KeyValueSprintRepository(db))


def _validate_span(sprint: Sprint) -> None:
    if DateService.days_between(sprint.start_date, sprint.end_date) < 0:
        raise ValidationException("end_date", "must not be before start_date")


# === Sprints ===

def get_sprint(store: SprintStore, sprint_id: UUID) -> Sprint:
    sprint = store.get_sprint(sprint_id)
    if sprint is None:
        raise SprintNotFoundException(sprint_id)
    return sprint


def create_sprint(store: SprintStore, sprint_data: SprintCreate) -> Sprint:
    sprint = Sprint(**sprint_data.model_dump())
    _validate_span(sprint)
    return store.add_sprint(sprint)


def update_sprint(store: SprintStore, sprint_id: UUID, sprint_update: SprintUpdate) -> Sprint:
    """Apply a partial update to a stored sprint"""
    existing = get_sprint(store, sprint_id)

    data = existing.model_dump()
    data.update(sprint_update.model_dump(exclude_unset=True, exclude_none=True))
    updated = Sprint.model_validate(data)
    _validate_span(updated)

    return store.update_sprint(updated)


def delete_sprint(store: SprintStore, sprint_id: UUID) -> None:
    if not store.delete_sprint(sprint_id):
        raise SprintNotFoundException(sprint_id)


# === Efforts ===

def get_efforts(store: SprintStore, on: Optional[date] = None) -> List[Effort]:
    if on is not None:
        return store.efforts_for_date(on)
    return sorted(store.efforts, key=lambda e: DateService.to_day(e.date))


def create_effort(store: SprintStore, effort_data: EffortCreate) -> Effort:
    effort = store.add_effort(Effort(**effort_data.model_dump()))
    if effort is None:
        raise GoalNotFoundException(effort_data.goal_id)
    return effort


def update_effort(store: SprintStore, effort_id: UUID, effort_update: EffortUpdate) -> Effort:
    existing = store.get_effort(effort_id)
    if existing is None:
        raise EffortNotFoundException(effort_id)

    data = existing.model_dump()
    data.update(effort_update.model_dump(exclude_unset=True, exclude_none=True))
    updated = store.update_effort(Effort.model_validate(data))
    if updated is None:
        raise GoalNotFoundException(data["goal_id"])
    return updated


def delete_effort(store: SprintStore, effort_id: UUID) -> None:
    if not store.delete_effort(effort_id):
        raise EffortNotFoundException(effort_id)


# === Settings ===

def get_settings(db: Session) -> UserSettings:
    return SettingsRepository.get_or_create(db)


def update_settings(db: Session, settings_update: SettingsUpdate) -> UserSettings:
    return SettingsRepository.apply_update(db, settings_update.model_dump(exclude_unset=True))


def get_life_statistics(db: Session, today: Optional[date] = None) -> LifeStatistics:
    current_age, target_age = SettingsRepository.life_span(db)
    return StatisticsService.life_statistics(current_age, target_age, today)
