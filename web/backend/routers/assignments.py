#!/usr/bin/env python3
"""
Assignment endpoints - run assignment batches and list assignments.
"""

import uuid
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, HTTPException
from sqlalchemy.orm import Session

from core.allocation.constants import ASSIGNMENT_STATUSES
from core.allocation.service import AssignmentOrchestrator
from ..dependencies import get_db, get_orchestrator
from ..rate_limit import limiter, assignment_rate_limit
from ..services.assignment_service import AssignmentService, build_assign_response
from ..models.requests import AssignRequest
from ..models.responses import AssignResponse, AssignmentListResponse, PaginationMeta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.post("", response_model=AssignResponse, status_code=201, response_model_exclude_none=True)
@limiter.limit(assignment_rate_limit)
def create_assignments(
    request: Request,
    body: AssignRequest,
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator)
):
    """
    Assign one position (`position_id`) or a batch (`position_ids`).

    Each position goes to its best-scoring recruiter; capacity is reserved
    once for the whole batch. Positions whose recruiter ran out of capacity
    are reported in `stats.total_failed` and in `warning`.
    """
    result = orchestrator.assign(body.target_ids(), force=body.force, single=body.is_single)
    return build_assign_response(result)


@router.get("", response_model=AssignmentListResponse)
def list_assignments(
    position_id: Optional[uuid.UUID] = Query(default=None, description="Filter by position"),
    recruiter_id: Optional[uuid.UUID] = Query(default=None, description="Filter by recruiter"),
    status: Optional[str] = Query(default=None, description="Filter by assignment status"),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    per_page: int = Query(default=50, ge=1, le=200, description="Page size (1-200)"),
    db: Session = Depends(get_db)
):
    """
    Get a paginated list of assignments, newest first.

    Includes recruiter name and position title/zone for display.
    """
    if status is not None and status not in ASSIGNMENT_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status: {status}. Must be one of: {', '.join(ASSIGNMENT_STATUSES)}"
        )

    service = AssignmentService(db)
    items, total = service.list_assignments(
        position_id=position_id,
        recruiter_id=recruiter_id,
        status=status,
        page=page,
        per_page=per_page
    )

    return AssignmentListResponse(
        success=True,
        data=items,
        meta=PaginationMeta(total=total, page=page, per_page=per_page)
    )
