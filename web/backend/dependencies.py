#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.

Every dependency here can be replaced through `app.dependency_overrides`,
which is how the tests point the API at an in-memory database.
"""

from typing import Generator, Optional

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.allocation.service import AssignmentOrchestrator
from core.config_loader import AllocationConfig
from database.database import make_session_factory
from .config import get_config


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self):
        config = get_config()
        engine_kwargs = {"pool_pre_ping": True}  # Verify connections before using
        if not config.database.url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=config.database.pool_size,
                max_overflow=config.database.max_overflow,
            )
        self.engine = create_engine(config.database.url, **engine_kwargs)
        self.SessionLocal = make_session_factory(self.engine)


# Created on first request, so importing the app never opens a connection
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


def get_session_factory() -> sessionmaker:
    """Session factory for components that manage their own transactions."""
    return get_db_manager().SessionLocal


def get_db(session_factory: sessionmaker = Depends(get_session_factory)) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Usage:
        @app.get("/endpoint")
        def my_endpoint(db: Session = Depends(get_db)):
            ...

    Yields:
        Session: Database session that will be automatically closed.
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_allocation_config() -> AllocationConfig:
    return get_config().allocation


def get_orchestrator(
    session_factory: sessionmaker = Depends(get_session_factory),
    config: AllocationConfig = Depends(get_allocation_config),
) -> AssignmentOrchestrator:
    return AssignmentOrchestrator(session_factory, config)
