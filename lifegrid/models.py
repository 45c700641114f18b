from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from datetime import datetime

from lifegrid.database import Base
from lifegrid.constants import (
    DEFAULT_USER_NAME, DEFAULT_CURRENT_AGE, DEFAULT_TARGET_AGE,
    DEFAULT_YEARS_TO_VIEW, DEFAULT_GRID_VIEW
)


class KeyValueEntry(Base):
    """Opaque key-value blob storage (sprints and efforts are JSON arrays)"""
    __tablename__ = "key_value_store"

    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)

    # Account
    user_name = Column(String, default=DEFAULT_USER_NAME)
    user_email = Column(String, default="")
    is_logged_in = Column(Boolean, default=False)

    # Life grid
    current_age = Column(Integer, default=DEFAULT_CURRENT_AGE)
    target_age = Column(Integer, default=DEFAULT_TARGET_AGE)
    years_to_view = Column(Integer, default=DEFAULT_YEARS_TO_VIEW)
    default_grid_view = Column(String, default=DEFAULT_GRID_VIEW)  # sprint or lifetime

    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
