"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import os
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from database.database import make_session_factory
from database.models import Base


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring PostgreSQL (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def sqlite_engine():
    """
    In-memory SQLite engine shared by every session of one test.

    StaticPool keeps a single connection so all sessions see the same
    database; foreign keys are switched on to match PostgreSQL.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return make_session_factory(sqlite_engine)


@pytest.fixture(scope="session")
def postgres_url():
    """
    Session-scoped PostgreSQL URL for tests that need real row locks.

    Uses TEST_DATABASE_URL when set; otherwise starts a throwaway container
    with testcontainers. Skips when neither works.
    """
    from tests import is_database_available, SKIP_DB_TESTS

    if SKIP_DB_TESTS:
        pytest.skip("SKIP_DB_TESTS is set")

    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        if is_database_available(external_url):
            yield external_url
            return
        pytest.skip("External database not available")

    try:
        from testcontainers.postgres import PostgresContainer
        postgres = PostgresContainer(
            image="postgres:16-alpine",
            username="testuser",
            password="testpass",
            dbname="staffalloc_test",
        )
        postgres.start()
    except Exception as e:
        pytest.skip(f"Could not start test database container: {e}")

    try:
        yield postgres.get_connection_url()
    finally:
        postgres.stop()


@pytest.fixture
def pg_session_factory(postgres_url):
    """Fresh schema per test on PostgreSQL."""
    engine = create_engine(postgres_url, pool_size=10, max_overflow=10)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield make_session_factory(engine)
    Base.metadata.drop_all(engine)
    engine.dispose()
