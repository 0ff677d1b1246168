import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence

from sqlalchemy import select, update

from core.allocation.constants import CLOSED_POSITION_STATUSES
from database.models import Position, Recruiter
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

REASSIGNABLE_STATUSES = ('open', 'assigned', 'in_progress')


class PositionRepository(BaseRepository):
    def get_by_id(self, position_id: Any) -> Optional[Position]:
        stmt = select(Position).where(
            Position.id == position_id,
            Position.deleted_at.is_(None)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_ids(self, position_ids: Sequence[Any]) -> List[Position]:
        if not position_ids:
            return []
        stmt = select(Position).where(
            Position.id.in_(list(position_ids)),
            Position.deleted_at.is_(None)
        ).order_by(Position.id)
        return self._all(stmt)

    def get_unassigned(self) -> List[Position]:
        """Open positions with no recruiter."""
        stmt = select(Position).where(
            Position.status == 'open',
            Position.recruiter_id.is_(None),
            Position.deleted_at.is_(None)
        ).order_by(Position.opened_at, Position.id)
        return self._all(stmt)

    def get_reassignment_candidates(self) -> List[Position]:
        """Positions held by an active recruiter that are still in play."""
        stmt = (
            select(Position)
            .join(Recruiter, Position.recruiter_id == Recruiter.id)
            .where(
                Position.status.in_(REASSIGNABLE_STATUSES),
                Position.deleted_at.is_(None),
                Recruiter.is_active.is_(True),
                Recruiter.deleted_at.is_(None),
            )
            .order_by(Position.opened_at, Position.id)
        )
        return self._all(stmt)

    def create_position(
        self,
        title: str,
        zone: Optional[str] = None,
        level: str = 'operario',
        priority: str = 'P2',
        headcount: int = 1,
        status: str = 'open',
        opened_at: Optional[datetime] = None,
        sla_deadline: Optional[datetime] = None,
        recruiter_id: Any = None,
        external_id: Optional[str] = None,
    ) -> Position:
        position = Position(
            title=title,
            zone=zone,
            level=level,
            priority=priority,
            headcount=headcount,
            status=status,
            sla_deadline=sla_deadline,
            recruiter_id=recruiter_id,
            external_id=external_id,
        )
        if opened_at is not None:
            position.opened_at = opened_at
        self.db.add(position)
        self.db.flush()
        return position

    def mark_assigned(self, position_id: Any, recruiter_id: Any, assigned_at: datetime) -> bool:
        """Move a position to in_progress under its new recruiter. Closed positions are left alone."""
        stmt = (
            update(Position)
            .where(
                Position.id == position_id,
                Position.status.not_in(list(CLOSED_POSITION_STATUSES)),
            )
            .values(status='in_progress', recruiter_id=recruiter_id, assigned_at=assigned_at)
            .execution_options(synchronize_session=False)
        )
        return self._rowcount(stmt) == 1
