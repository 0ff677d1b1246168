#!/usr/bin/env python3
"""
Position suggestion endpoints - read-only top-3 recruiter suggestions.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.config_loader import AllocationConfig
from ..dependencies import get_db, get_allocation_config
from ..services.suggestion_service import SuggestionService
from ..models.responses import SuggestionsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/positions", tags=["positions"])


@router.get("/unassigned", response_model=SuggestionsResponse)
def get_unassigned_positions(
    interleave: bool = Query(default=False, description="Interleave queues 2:1:1 (critical:technical:general)"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Maximum positions to return"),
    db: Session = Depends(get_db),
    config: AllocationConfig = Depends(get_allocation_config)
):
    """
    Open positions without a recruiter, most urgent first, each with the
    top recruiter suggestions. Nothing is reserved or persisted.
    """
    service = SuggestionService(db, config)
    return service.get_unassigned(interleave=interleave, limit=limit)


@router.get("/reassignment-candidates", response_model=SuggestionsResponse)
def get_reassignment_candidates(
    interleave: bool = Query(default=False, description="Interleave queues 2:1:1 (critical:technical:general)"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Maximum positions to return"),
    db: Session = Depends(get_db),
    config: AllocationConfig = Depends(get_allocation_config)
):
    """
    Positions currently held by a recruiter, with alternative recruiters
    (the current holder is excluded from the suggestions).
    """
    service = SuggestionService(db, config)
    return service.get_reassignment_candidates(interleave=interleave, limit=limit)
