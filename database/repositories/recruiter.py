import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select, update, case

from database.models import Recruiter
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RecruiterRepository(BaseRepository):
    def get_active(self) -> List[Recruiter]:
        stmt = select(Recruiter).where(
            Recruiter.is_active.is_(True),
            Recruiter.deleted_at.is_(None)
        ).order_by(Recruiter.id)
        return self._all(stmt)

    def get_loads(self, recruiter_ids: Sequence[Any]) -> Dict[Any, int]:
        # Column select, so cached ORM instances never mask the stored counter
        if not recruiter_ids:
            return {}
        stmt = select(Recruiter.id, Recruiter.current_load).where(Recruiter.id.in_(list(recruiter_ids)))
        return {row.id: row.current_load for row in self.db.execute(stmt)}

    def create_recruiter(
        self,
        name: str,
        primary_zone: Optional[str] = None,
        secondary_zones: Optional[List[str]] = None,
        capability_level: int = 1,
        capacity: Optional[int] = None,
        current_load: int = 0,
        is_active: bool = True,
        email: Optional[str] = None,
    ) -> Recruiter:
        recruiter = Recruiter(
            name=name,
            email=email,
            primary_zone=primary_zone,
            secondary_zones=list(secondary_zones or []),
            capability_level=capability_level,
            current_load=current_load,
            is_active=is_active,
        )
        if capacity is not None:
            recruiter.capacity = capacity
        self.db.add(recruiter)
        self.db.flush()
        return recruiter

    def lock_for_update(self, recruiter_ids: Sequence[Any]) -> List[Any]:
        """
        Lock the given recruiter rows for the rest of the transaction.

        Rows are locked in ascending id order so concurrent batches touching
        overlapping recruiters cannot deadlock each other.
        """
        stmt = (
            select(Recruiter.id)
            .where(Recruiter.id.in_(list(recruiter_ids)))
            .order_by(Recruiter.id)
            .with_for_update()
        )
        return self._all(stmt)

    def try_increment_load(self, recruiter_id: Any, amount: int) -> bool:
        """
        Apply `amount` only if it keeps the recruiter within capacity.

        Single guarded UPDATE: either the whole amount is applied or nothing is.
        """
        stmt = (
            update(Recruiter)
            .where(
                Recruiter.id == recruiter_id,
                Recruiter.current_load + amount <= Recruiter.capacity,
                Recruiter.is_active.is_(True),
                Recruiter.deleted_at.is_(None),
            )
            .values(current_load=Recruiter.current_load + amount)
            .execution_options(synchronize_session=False)
        )
        return self._rowcount(stmt) == 1

    def decrement_load(self, recruiter_id: Any, amount: int) -> int:
        """Release `amount` units, clamped at zero. Returns the new load (0 if unknown)."""
        stmt = (
            update(Recruiter)
            .where(Recruiter.id == recruiter_id)
            .values(current_load=case(
                (Recruiter.current_load - amount < 0, 0),
                else_=Recruiter.current_load - amount,
            ))
            .execution_options(synchronize_session=False)
        )
        self.db.execute(stmt)
        return self.get_loads([recruiter_id]).get(recruiter_id, 0)
