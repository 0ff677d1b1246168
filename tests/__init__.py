#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests (unit + DB if available)
    python -m pytest tests/ -v

    # Run only tests that need no PostgreSQL
    python -m pytest tests/ -v -m "not db"

    # Run only PostgreSQL tests
    python -m pytest tests/ -v -m "db"

Database Setup:
    Unit tests run against in-memory SQLite (see conftest.py). Tests marked
    `db` need PostgreSQL for real row locks; they use TEST_DATABASE_URL when
    set, otherwise they try to start a container with testcontainers, and
    skip when neither is available.
"""

import os
from datetime import datetime, timezone
from typing import Optional

from core.allocation.models import PositionSnapshot, RecruiterSnapshot

TEST_DB_URL = os.environ.get("TEST_DATABASE_URL")

# Check if we should force skip DB tests
SKIP_DB_TESTS = os.environ.get("SKIP_DB_TESTS", "false").lower() == "true"

# Fixed reference time for deterministic priority / timestamps
FIXED_NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def is_database_available(url: Optional[str] = TEST_DB_URL) -> bool:
    """
    Check if the PostgreSQL test database is accessible.
    """
    if SKIP_DB_TESTS or not url:
        return False

    try:
        from sqlalchemy import create_engine, text

        engine = create_engine(url)
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        engine.dispose()
        return True
    except Exception:
        return False


def make_recruiter(**overrides) -> RecruiterSnapshot:
    """Recruiter snapshot with sensible defaults for pure-function tests."""
    values = dict(
        id="r-1",
        name="Ana Torres",
        primary_zone="Trujillo",
        secondary_zones=(),
        capability_level=3,
        capacity=13,
        current_load=0,
    )
    values.update(overrides)
    return RecruiterSnapshot(**values)


def make_position(**overrides) -> PositionSnapshot:
    """Position snapshot with sensible defaults for pure-function tests."""
    values = dict(
        id="p-1",
        title="Asistente de Planta",
        zone="Trujillo",
        priority="P2",
        required_level=3,
        status="open",
        opened_at=FIXED_NOW,
        sla_deadline=None,
        recruiter_id=None,
    )
    values.update(overrides)
    return PositionSnapshot(**values)


def seed_recruiter(repo, **overrides):
    """Insert a recruiter through the repository (caller commits)."""
    values = dict(
        name="Ana Torres",
        primary_zone="Trujillo",
        secondary_zones=[],
        capability_level=3,
        capacity=13,
        current_load=0,
    )
    values.update(overrides)
    return repo.recruiters.create_recruiter(**values)


def seed_position(repo, **overrides):
    """Insert a position through the repository (caller commits)."""
    values = dict(
        title="Asistente de Planta",
        zone="Trujillo",
        level="asistente",
        priority="P2",
        status="open",
        opened_at=FIXED_NOW,
    )
    values.update(overrides)
    return repo.positions.create_position(**values)
