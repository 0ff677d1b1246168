#!/usr/bin/env python3
"""
Suggestion service - read-only top-K recruiter suggestions per position.

Never reserves capacity or writes anything; it runs the same ranker the
orchestrator uses, over the current loads.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from core.allocation.models import PositionSnapshot, PriorityResult, RecruiterSnapshot
from core.allocation.priority import interleave_by_queue, prioritize_positions, queue_stats
from core.allocation.ranking import rank_recruiters
from core.config_loader import AllocationConfig
from database.repositories import PositionRepository, RecruiterRepository
from ..models.responses import PositionSuggestions, RecruiterSuggestion, SuggestionsResponse
from ..utils import days_between

logger = logging.getLogger(__name__)


class SuggestionService:
    """Builds prioritized suggestion lists for operator views."""

    def __init__(
        self,
        db: Session,
        config: Optional[AllocationConfig] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.db = db
        self.config = config or AllocationConfig()
        self.clock = clock
        self.positions = PositionRepository(db)
        self.recruiters = RecruiterRepository(db)

    def get_unassigned(self, interleave: bool = False, limit: Optional[int] = None) -> SuggestionsResponse:
        """Open positions without a recruiter, with top-K suggestions each."""
        rows = self.positions.get_unassigned()
        return self._build(rows, exclude_current=False, interleave=interleave, limit=limit)

    def get_reassignment_candidates(self, interleave: bool = False, limit: Optional[int] = None) -> SuggestionsResponse:
        """Positions held by a recruiter, with alternatives that exclude the current holder."""
        rows = self.positions.get_reassignment_candidates()
        return self._build(rows, exclude_current=True, interleave=interleave, limit=limit)

    def get_queue(self, interleave: bool = False) -> List[Tuple[PositionSnapshot, PriorityResult]]:
        """Prioritized open positions without suggestions (CLI / reporting)."""
        positions = [PositionSnapshot.from_row(r) for r in self.positions.get_unassigned()]
        ordered = prioritize_positions(positions, self.clock(), self.config.priority, self.config.locale)
        return interleave_by_queue(ordered) if interleave else ordered

    def _active_recruiters(self) -> List[RecruiterSnapshot]:
        return [
            RecruiterSnapshot.from_row(r)
            for r in self.recruiters.get_active()
        ]

    def _build(self, rows, exclude_current: bool, interleave: bool, limit: Optional[int]) -> SuggestionsResponse:
        now = self.clock()
        recruiters = self._active_recruiters()
        level_names = {row.id: row.level for row in rows}

        positions = [PositionSnapshot.from_row(r) for r in rows]
        ordered = prioritize_positions(positions, now, self.config.priority, self.config.locale)
        if interleave:
            ordered = interleave_by_queue(ordered)
        stats = queue_stats(priority for _, priority in ordered)
        if limit is not None:
            ordered = ordered[:limit]

        data = []
        for position, priority in ordered:
            exclude = [position.recruiter_id] if exclude_current and position.recruiter_id is not None else []
            ranked = rank_recruiters(
                position,
                recruiters,
                k=self.config.suggestions_top_k,
                config=self.config.fit,
                locale=self.config.locale,
                exclude_ids=exclude
            )
            data.append(PositionSuggestions(
                position_id=str(position.id),
                title=position.title,
                zone=position.zone,
                level=level_names.get(position.id) or "",
                priority=position.priority,
                status=position.status,
                current_recruiter_id=str(position.recruiter_id) if position.recruiter_id is not None else None,
                priority_score=priority.score,
                queue=priority.queue,
                days_open=days_between(position.opened_at, now),
                suggestions=[
                    RecruiterSuggestion(
                        id=str(fit.recruiter.id),
                        name=fit.recruiter.name,
                        score=fit.score_percent,
                        current_load=fit.recruiter.current_load,
                        capacity=fit.recruiter.capacity,
                        explanation=fit.explanation
                    )
                    for fit in ranked
                ]
            ))

        logger.debug(f"Built suggestions for {len(data)} position(s)")
        return SuggestionsResponse(success=True, count=len(data), data=data, queue_stats=stats)
