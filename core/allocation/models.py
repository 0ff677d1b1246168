#!/usr/bin/env python3
"""
Allocation Models - snapshots read from the datastore and the records the
engine returns.

Snapshots are frozen so the pure scoring functions can never mutate shared
state; `current_load` lives in the datastore and only the capacity
coordinator changes it.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from core.allocation.constants import DEFAULT_RECRUITER_CAPACITY, level_for_name


class BatchState(str, enum.Enum):
    """States of one assignment batch."""
    RECEIVED = "Received"
    POSITIONS_RESOLVED = "PositionsResolved"
    RECOMMENDATIONS_COMPUTED = "RecommendationsComputed"
    CAPACITY_RESERVED = "CapacityReserved"
    PERSISTED = "Persisted"
    STATUS_UPDATED = "StatusUpdated"
    COMPLETED = "Completed"
    REJECTED = "Rejected"
    PARTIAL_FAILURE = "PartialFailure"


@dataclass(frozen=True)
class RecruiterSnapshot:
    id: Any
    name: str
    primary_zone: Optional[str]
    secondary_zones: Tuple[str, ...] = ()
    capability_level: int = 1
    capacity: int = DEFAULT_RECRUITER_CAPACITY
    current_load: int = 0
    is_active: bool = True
    is_deleted: bool = False

    @classmethod
    def from_row(cls, row) -> "RecruiterSnapshot":
        return cls(
            id=row.id,
            name=row.name,
            primary_zone=row.primary_zone,
            secondary_zones=tuple(row.secondary_zones or ()),
            capability_level=int(row.capability_level or 1),
            capacity=int(row.capacity),
            current_load=int(row.current_load or 0),
            is_active=bool(row.is_active),
            is_deleted=row.deleted_at is not None,
        )


@dataclass(frozen=True)
class PositionSnapshot:
    id: Any
    title: str
    zone: Optional[str]
    priority: str = "P2"
    required_level: int = 1
    status: str = "open"
    headcount: int = 1
    opened_at: Optional[datetime] = None
    sla_deadline: Optional[datetime] = None
    recruiter_id: Any = None

    @property
    def has_recruiter(self) -> bool:
        return self.recruiter_id is not None

    @classmethod
    def from_row(cls, row) -> "PositionSnapshot":
        return cls(
            id=row.id,
            title=row.title,
            zone=row.zone,
            priority=row.priority or "P2",
            required_level=level_for_name(row.level),
            status=row.status,
            headcount=int(row.headcount or 1),
            opened_at=row.opened_at,
            sla_deadline=row.sla_deadline,
            recruiter_id=row.recruiter_id,
        )


@dataclass(frozen=True)
class PriorityResult:
    score: float
    queue: str
    breakdown: Dict[str, float] = field(default_factory=dict)
    explanation: str = ""


@dataclass(frozen=True)
class FitResult:
    """Fit Scorer output for one (position, recruiter) pair."""
    recruiter: RecruiterSnapshot
    score: float
    breakdown: Dict[str, float] = field(default_factory=dict)
    explanation: str = ""

    @property
    def score_percent(self) -> int:
        return int(round(self.score * 100))


@dataclass(frozen=True)
class ReservationResult:
    recruiter_id: Any
    success: bool
    new_load: int


@dataclass
class Proposal:
    """A proposed (position -> winning recruiter) pairing inside one batch."""
    position: PositionSnapshot
    fit: FitResult
    priority: PriorityResult


@dataclass
class CreatedAssignment:
    id: Any
    position_id: Any
    recruiter_id: Any
    recruiter_name: str
    score: float
    score_breakdown: Dict[str, float]
    explanation: str
    assignment_type: str
    status: str
    assigned_at: datetime


@dataclass
class AssignmentStats:
    total_assigned: int = 0
    total_failed: int = 0
    average_score: float = 0.0
    by_priority: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_assigned': self.total_assigned,
            'total_failed': self.total_failed,
            'average_score': self.average_score,
            'by_priority': dict(self.by_priority),
        }


@dataclass
class AssignmentBatchResult:
    """Summary returned to the caller after a batch finished (fully or partially)."""
    batch_id: str
    state: BatchState
    assignments: List[CreatedAssignment] = field(default_factory=list)
    stats: AssignmentStats = field(default_factory=AssignmentStats)
    message: str = ""
    warning: Optional[str] = None
    failed_position_ids: List[Any] = field(default_factory=list)
    failed_recruiter_ids: List[Any] = field(default_factory=list)
