import contextlib
import logging
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from database.database import get_session_factory
from database.repository import AllocationRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def allocation_uow(session_factory: Optional[Callable[[], Session]] = None) -> Iterator[AllocationRepository]:
    """Per-unit-of-work transaction scope.

    Yields an AllocationRepository bound to a fresh Session. Commits on
    success, rolls back on exception, always closes.

    Usage:
        with allocation_uow(factory) as repo:
            recruiters = repo.recruiters.get_active()
            # perform operations...
        # commit happens automatically on successful exit
    """
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        repo = AllocationRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
