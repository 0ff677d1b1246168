from typing import Any, List

from sqlalchemy.orm import Session


class BaseRepository:
    """Repositories share the caller's Session; the unit of work owns commit/rollback."""

    def __init__(self, db: Session):
        self.db = db

    def _all(self, stmt) -> List[Any]:
        return list(self.db.execute(stmt).scalars().all())

    def _rowcount(self, stmt) -> int:
        return self.db.execute(stmt).rowcount
