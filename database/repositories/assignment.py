import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from core.allocation.constants import ACTIVE_ASSIGNMENT_STATUSES
from database.models import Assignment, Position, Recruiter
from database.models.assignment import ACTIVE_ASSIGNMENT_INDEX
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def is_duplicate_active_assignment(error: Exception) -> bool:
    """True when the one-active-assignment-per-position index rejected a write."""
    if not isinstance(error, IntegrityError):
        return False
    detail = str(error.orig)
    # PostgreSQL names the index, SQLite names the indexed column
    return ACTIVE_ASSIGNMENT_INDEX in detail or "assignments.position_id" in detail


class AssignmentRepository(BaseRepository):
    def create_assignment(
        self,
        position_id: Any,
        recruiter_id: Any,
        score: float,
        score_breakdown: Dict[str, float],
        explanation: str,
        assigned_at: datetime,
        batch_id: Optional[str] = None,
        assignment_type: str = 'auto',
        reassigned_from: Any = None,
    ) -> Assignment:
        assignment = Assignment(
            position_id=position_id,
            recruiter_id=recruiter_id,
            batch_id=batch_id,
            score=score,
            score_breakdown=dict(score_breakdown),
            explanation=explanation,
            assignment_type=assignment_type,
            status='assigned',
            current_stage='assigned',
            reassigned_from=reassigned_from,
            assigned_at=assigned_at,
            stage_entered_at=assigned_at,
        )
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def get_active_for_position(self, position_id: Any) -> List[Assignment]:
        stmt = select(Assignment).where(
            Assignment.position_id == position_id,
            Assignment.status.in_(list(ACTIVE_ASSIGNMENT_STATUSES))
        )
        return self._all(stmt)

    def supersede_active(self, position_id: Any, at: datetime) -> List[Assignment]:
        """Mark the position's active assignments as reassigned; returns the superseded rows."""
        previous = self.get_active_for_position(position_id)
        for assignment in previous:
            assignment.status = 'reassigned'
            assignment.reassigned_at = at
        if previous:
            # Flush before the new insert so the active-per-position index never sees two rows
            self.db.flush()
            logger.info(f"Superseded {len(previous)} active assignment(s) for position {position_id}")
        return previous

    def list_assignments(
        self,
        position_id: Any = None,
        recruiter_id: Any = None,
        status: Optional[str] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> Tuple[List[Any], int]:
        """
        Page through assignments, newest first, with recruiter/position display fields.

        Returns:
            (rows, total) where each row has .Assignment, .recruiter_name,
            .position_title and .position_zone.
        """
        filters = []
        if position_id is not None:
            filters.append(Assignment.position_id == position_id)
        if recruiter_id is not None:
            filters.append(Assignment.recruiter_id == recruiter_id)
        if status:
            filters.append(Assignment.status == status)

        total = self.db.execute(
            select(func.count(Assignment.id)).where(*filters)
        ).scalar_one()

        stmt = (
            select(
                Assignment,
                Recruiter.name.label('recruiter_name'),
                Position.title.label('position_title'),
                Position.zone.label('position_zone'),
            )
            .join(Recruiter, Assignment.recruiter_id == Recruiter.id)
            .join(Position, Assignment.position_id == Position.id)
            .where(*filters)
            .order_by(Assignment.assigned_at.desc(), Assignment.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        return list(self.db.execute(stmt).all()), total
