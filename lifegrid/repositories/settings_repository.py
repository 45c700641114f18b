"""
User settings persistence.
A single `user_settings` row holds the profile and life-grid preferences;
it is created with defaults the first time it is read.
"""
import logging
from typing import Any, Dict, Tuple

from sqlalchemy.orm import Session

from lifegrid.constants import GRID_VIEW_SPRINT, GRID_VIEW_LIFETIME
from lifegrid.exceptions import ValidationException
from lifegrid.models import UserSettings

logger = logging.getLogger("lifegrid.settings")

GRID_VIEWS = (GRID_VIEW_SPRINT, GRID_VIEW_LIFETIME)


class SettingsRepository:
    """Single-row store for UserSettings"""

    @staticmethod
    def get_or_create(db: Session) -> UserSettings:
        settings = db.query(UserSettings).first()
        if settings is None:
            settings = UserSettings()
            db.add(settings)
            db.commit()
            db.refresh(settings)
            logger.info("Created default user settings")
        return settings

    @staticmethod
    def apply_update(db: Session, changes: Dict[str, Any]) -> UserSettings:
        """
        Apply a partial settings update.

        Keys mapped to None are left untouched. The grid view must be one of
        the known views; age limits are checked by the request schema.

        Args:
            db: Database session
            changes: Field name -> new value

        Returns:
            Updated settings row

        Raises:
            ValidationException: Unknown default_grid_view
        """
        changes = {key: value for key, value in changes.items() if value is not None}

        grid_view = changes.get("default_grid_view")
        if grid_view is not None and grid_view not in GRID_VIEWS:
            raise ValidationException("default_grid_view", f"unknown view '{grid_view}'")

        settings = SettingsRepository.get_or_create(db)
        for key, value in changes.items():
            setattr(settings, key, value)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def life_span(db: Session) -> Tuple[int, int]:
        """(current_age, target_age) for the life statistics"""
        settings = SettingsRepository.get_or_create(db)
        return settings.current_age, settings.target_age
