#!/usr/bin/env python3
"""
Allocation Module - capacity-constrained matching of positions to recruiters.

Public API (pure, no datastore access):
- classify_priority, score_fit, rank_recruiters
- Snapshot and result dataclasses

The datastore-bound parts are imported from their modules directly
(core.allocation.capacity, core.allocation.service) so that the persistence
layer can depend on the constants here without an import cycle.

Modules:

- constants.py: Zones, level map, status sets, capacity defaults
- models.py: Snapshots and result records (dataclasses)
- errors.py: AllocationError taxonomy with HTTP status codes
- messages.py: Localized message catalog (es / en)
- priority.py: Priority Classifier (urgency score + reporting queue)
- fit_score.py: Fit Scorer (zone, capability, headroom)
- ranking.py: Recommendation Ranker (top-K with deterministic tie-break)
- capacity.py: CapacityCoordinator (atomic reservation / release of recruiter load)
- service.py: AssignmentOrchestrator (batch assignment state machine)
"""

from core.allocation.models import (
    AssignmentBatchResult,
    BatchState,
    FitResult,
    PositionSnapshot,
    PriorityResult,
    RecruiterSnapshot,
    ReservationResult,
)
from core.allocation.priority import classify_priority
from core.allocation.fit_score import score_fit
from core.allocation.ranking import rank_recruiters

__all__ = [
    'AssignmentBatchResult',
    'BatchState',
    'FitResult',
    'PositionSnapshot',
    'PriorityResult',
    'RecruiterSnapshot',
    'ReservationResult',
    'classify_priority',
    'rank_recruiters',
    'score_fit',
]
