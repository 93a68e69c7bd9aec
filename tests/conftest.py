"""Pytest fixtures for lifeplan tests."""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest

from lifeplan.db.connection import DatabaseConnection
from lifeplan.db.queries import UserQueries
from lifeplan.tracking.models import Profile


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)


@pytest.fixture
def male_profile() -> Profile:
    """30y male, 180cm/80kg, moderate activity, muscle gain."""
    return Profile(
        user_id=1,
        sex="male",
        age=30,
        height_cm=180,
        weight_kg=80,
        activity_level="moderate",
        goal_type="muscle_gain",
    )


@pytest.fixture
def female_profile() -> Profile:
    """28y female tracking her cycle, fat loss goal."""
    return Profile(
        user_id=2,
        sex="female",
        age=28,
        height_cm=165,
        weight_kg=62,
        activity_level="light",
        goal_type="fat_loss",
        tracks_cycle=True,
        last_period_date=date(2024, 3, 1),
        cycle_length=28,
    )


@pytest.fixture
def db_with_user(temp_db, male_profile):
    """Temporary database holding the male profile; yields (db, user_id)."""
    with temp_db.get_connection() as conn:
        user_id = UserQueries.create_user(conn, male_profile)
    return temp_db, user_id
