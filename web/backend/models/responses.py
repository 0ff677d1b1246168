#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict


class AssignmentData(BaseModel):
    """An assignment created by a batch."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "position_id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "recruiter_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "recruiter_name": "Ana Torres",
                "score": 0.94,
                "score_breakdown": {"zone": 1.0, "capability": 1.0, "headroom": 0.85},
                "explanation": "zone match, low current load",
                "assignment_type": "auto",
                "status": "assigned",
                "assigned_at": "2026-02-01T12:00:00+00:00"
            }
        }
    )

    id: str
    position_id: str
    recruiter_id: str
    recruiter_name: str
    score: float = Field(ge=0, le=1)
    score_breakdown: Dict[str, float]
    explanation: str
    assignment_type: str
    status: str
    assigned_at: str


class AssignmentStatsModel(BaseModel):
    total_assigned: int
    total_failed: int
    average_score: float
    by_priority: Dict[str, int]


class AssignResponse(BaseModel):
    """Result of POST /api/assignments (full or partial success)."""
    success: bool
    batch_id: str
    data: List[AssignmentData]
    stats: AssignmentStatsModel
    message: str
    warning: Optional[str] = None


class AssignmentListItem(BaseModel):
    """An assignment with recruiter / position display fields."""
    id: str
    position_id: str
    recruiter_id: str
    recruiter_name: str
    position_title: str
    position_zone: Optional[str]
    score: float
    explanation: Optional[str]
    assignment_type: str
    status: str
    current_stage: str
    assigned_at: Optional[str]


class PaginationMeta(BaseModel):
    total: int
    page: int
    per_page: int


class AssignmentListResponse(BaseModel):
    success: bool
    data: List[AssignmentListItem]
    meta: PaginationMeta


class RecruiterSuggestion(BaseModel):
    """A ranked recruiter for a position; score is a 0-100 percentage."""
    id: str
    name: str
    score: int = Field(ge=0, le=100)
    current_load: int
    capacity: int
    explanation: str


class PositionSuggestions(BaseModel):
    """A position with its priority and top recruiter suggestions."""
    position_id: str
    title: str
    zone: Optional[str]
    level: str
    priority: str
    status: str
    current_recruiter_id: Optional[str] = None
    priority_score: float
    queue: str
    days_open: int
    suggestions: List[RecruiterSuggestion]


class SuggestionsResponse(BaseModel):
    success: bool
    count: int
    data: List[PositionSuggestions]
    queue_stats: Dict[str, int]
