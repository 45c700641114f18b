"""
Shared fixtures for LifeGrid tests.
"""
import os
import tempfile

# Must be set before lifegrid modules read their configuration
os.environ.setdefault("LIFEGRID_DB_URL", "sqlite://")
os.environ.setdefault("LIFEGRID_API_KEY", "test-api-key")
os.environ.setdefault("LIFEGRID_LOG_DIR", os.path.join(tempfile.gettempdir(), "lifegrid-tests"))

import pytest
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lifegrid.database import Base
from lifegrid import models  # noqa: F401
from lifegrid.repositories.sprint_repository import InMemorySprintRepository
from lifegrid.services.sprint_store import SprintStore
from lifegrid.tests.factories import make_sprint, make_effort


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def today():
    return date(2025, 3, 7)


@pytest.fixture
def repository():
    return InMemorySprintRepository()


@pytest.fixture
def store(repository):
    return SprintStore(repository)


@pytest.fixture
def week_sprint(today):
    """Seven-day sprint ending today with a single full-weight goal"""
    return make_sprint(today - timedelta(days=6), 7, name="Week")


@pytest.fixture
def scenario_store(store, week_sprint):
    """Week sprint with 1 hour logged on its first three days"""
    store.add_sprint(week_sprint)
    goal = week_sprint.goals[0]
    start = week_sprint.start_date.date()
    for offset in range(3):
        store.add_effort(make_effort(goal, start + timedelta(days=offset), 1))
    return store
