#!/usr/bin/env python3
"""
Assignment service - listing assignments and shaping batch results for the API.
"""

import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from core.allocation.models import AssignmentBatchResult, CreatedAssignment
from database.repositories import AssignmentRepository
from ..models.responses import (
    AssignmentData,
    AssignmentListItem,
    AssignmentStatsModel,
    AssignResponse,
)
from ..utils import safe_float, safe_str, safe_datetime_iso

logger = logging.getLogger(__name__)


class AssignmentService:
    """Read-side service for assignments."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AssignmentRepository(db)

    def list_assignments(
        self,
        position_id: Any = None,
        recruiter_id: Any = None,
        status: Optional[str] = None,
        page: int = 1,
        per_page: int = 50
    ) -> Tuple[List[AssignmentListItem], int]:
        """
        Get one page of assignments, newest first.

        Args:
            position_id: Only assignments of this position.
            recruiter_id: Only assignments of this recruiter.
            status: Only assignments in this status.
            page: 1-based page number.
            per_page: Page size.

        Returns:
            (items, total matching rows)
        """
        rows, total = self.repo.list_assignments(
            position_id=position_id,
            recruiter_id=recruiter_id,
            status=status,
            page=page,
            per_page=per_page
        )
        return [self._to_list_item(row) for row in rows], total

    def _to_list_item(self, row) -> AssignmentListItem:
        assignment = row.Assignment
        return AssignmentListItem(
            id=str(assignment.id),
            position_id=str(assignment.position_id),
            recruiter_id=str(assignment.recruiter_id),
            recruiter_name=safe_str(row.recruiter_name),
            position_title=safe_str(row.position_title),
            position_zone=row.position_zone,
            score=safe_float(assignment.score),
            explanation=assignment.explanation,
            assignment_type=assignment.assignment_type,
            status=assignment.status,
            current_stage=assignment.current_stage,
            assigned_at=safe_datetime_iso(assignment.assigned_at)
        )


def _to_assignment_data(created: CreatedAssignment) -> AssignmentData:
    return AssignmentData(
        id=str(created.id),
        position_id=str(created.position_id),
        recruiter_id=str(created.recruiter_id),
        recruiter_name=created.recruiter_name,
        score=created.score,
        score_breakdown=created.score_breakdown,
        explanation=created.explanation,
        assignment_type=created.assignment_type,
        status=created.status,
        assigned_at=safe_datetime_iso(created.assigned_at)
    )


def build_assign_response(result: AssignmentBatchResult) -> AssignResponse:
    """Convert an orchestrator result into the POST /api/assignments body."""
    return AssignResponse(
        success=True,
        batch_id=result.batch_id,
        data=[_to_assignment_data(a) for a in result.assignments],
        stats=AssignmentStatsModel(**result.stats.to_dict()),
        message=result.message,
        warning=result.warning
    )
