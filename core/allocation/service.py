#!/usr/bin/env python3
"""
Assignment Orchestrator.

Runs one assignment batch through

    Received -> PositionsResolved -> RecommendationsComputed -> CapacityReserved
             -> Persisted -> StatusUpdated -> Completed

ending in Rejected (raised as NotFoundError / ConflictError) or
PartialFailure (returned, with a warning) when some positions were dropped.

Recommendations count earlier wins in the same batch against each
recruiter, so a recruiter filled by the batch is passed over for later
positions. Capacity is reserved once per batch, by the coordinator, which
only rejects increments when loads moved concurrently. Any failure
after that point and before the assignments are committed releases the
batch's reservations before the error propagates.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from core.allocation.capacity import CapacityCoordinator
from core.allocation.constants import CLOSED_POSITION_STATUSES
from core.allocation.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from core.allocation.messages import get_message
from core.allocation.models import (
    AssignmentBatchResult,
    BatchState,
    CreatedAssignment,
    PositionSnapshot,
    Proposal,
    RecruiterSnapshot,
)
from core.allocation.priority import prioritize_positions
from core.allocation.ranking import assignment_stats, rank_recruiters, validate_weights
from core.config_loader import AllocationConfig
from database.repositories.assignment import is_duplicate_active_assignment
from database.uow import allocation_uow

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentOrchestrator:
    """Batch assignment of positions to recruiters under hard capacity limits."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        config: Optional[AllocationConfig] = None,
        coordinator: Optional[CapacityCoordinator] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.session_factory = session_factory
        self.config = config or AllocationConfig()
        validate_weights(self.config.fit)
        self.coordinator = coordinator or CapacityCoordinator(
            session_factory, retry_attempts=self.config.reservation_retry_attempts
        )
        self.clock = clock

    @property
    def locale(self) -> str:
        return self.config.locale

    def _msg(self, key: str, **kwargs) -> str:
        return get_message(key, self.locale, **kwargs)

    def _transition(self, batch_id: str, state: BatchState) -> BatchState:
        logger.debug(f"Batch {batch_id}: -> {state.value}")
        return state

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    def assign(
        self,
        position_ids: Sequence[Any],
        force: bool = False,
        single: Optional[bool] = None,
    ) -> AssignmentBatchResult:
        """
        Assign each requested position to its best recruiter.

        Args:
            position_ids: Positions to assign (at least one).
            force: Also (re)assign positions that are not `open`.
            single: Treat the request as a single-position request, which
                rejects instead of skipping a non-open position. Defaults to
                len(position_ids) == 1.

        Returns:
            AssignmentBatchResult in state Completed or PartialFailure.

        Raises:
            ValidationError: empty request.
            NotFoundError: position missing / no eligible positions.
            ConflictError: no active recruiters, already assigned, no capacity.
            PersistenceError: write failure after reservation (capacity released).
        """
        position_ids = list(dict.fromkeys(position_ids))
        if not position_ids:
            raise ValidationError("At least one position id is required")
        if single is None:
            single = len(position_ids) == 1

        batch_id = uuid.uuid4().hex
        now = self.clock()
        self._transition(batch_id, BatchState.RECEIVED)

        recruiters, positions = self._resolve(position_ids, force, single)
        self._transition(batch_id, BatchState.POSITIONS_RESOLVED)

        proposals, unmatched = self._recommend(positions, recruiters, now)
        if not proposals:
            logger.info(f"Batch {batch_id}: no eligible recruiter for {len(positions)} position(s)")
            raise ConflictError(
                self._msg("no_eligible_recruiters"),
                details={"failed_position_ids": [str(p.id) for p in unmatched]},
            )
        self._transition(batch_id, BatchState.RECOMMENDATIONS_COMPUTED)

        winners, dropped, failed_recruiter_ids = self._reserve(batch_id, proposals)
        self._transition(batch_id, BatchState.CAPACITY_RESERVED)

        created, superseded = self._persist(batch_id, winners, now, force)
        self._transition(batch_id, BatchState.PERSISTED)

        warnings = self._update_statuses(batch_id, winners, superseded, now)
        self._transition(batch_id, BatchState.STATUS_UPDATED)

        failed_positions = [p.position for p in dropped] + unmatched
        stats = assignment_stats(
            [(p.fit.score, p.position.priority) for p in winners],
            total_failed=len(failed_positions),
        )

        self._audit(batch_id, created, failed_positions, failed_recruiter_ids, stats.to_dict())

        if failed_positions:
            message = self._msg("assigned_partial", assigned=len(created), failed=len(failed_positions))
            warnings.insert(0, self._msg("shortfall_warning", failed=len(failed_positions)))
            state = self._transition(batch_id, BatchState.PARTIAL_FAILURE)
            logger.warning(
                f"Batch {batch_id}: {len(created)} assigned, {len(failed_positions)} not assigned "
                f"(recruiters without capacity: {failed_recruiter_ids})"
            )
        else:
            if single and len(created) == 1:
                message = self._msg("assigned_single", name=created[0].recruiter_name)
            else:
                message = self._msg("assigned_multiple", count=len(created))
            state = self._transition(batch_id, BatchState.COMPLETED)
            logger.info(f"Batch {batch_id}: {len(created)} position(s) assigned")

        return AssignmentBatchResult(
            batch_id=batch_id,
            state=state,
            assignments=created,
            stats=stats,
            message=message,
            warning=" ".join(warnings) if warnings else None,
            failed_position_ids=[p.id for p in failed_positions],
            failed_recruiter_ids=failed_recruiter_ids,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _resolve(
        self, position_ids: List[Any], force: bool, single: bool
    ) -> Tuple[List[RecruiterSnapshot], List[PositionSnapshot]]:
        with allocation_uow(self.session_factory) as repo:
            recruiters = [
                RecruiterSnapshot.from_row(r)
                for r in repo.recruiters.get_active()
            ]
            if not recruiters:
                raise ConflictError(self._msg("no_active_recruiters"))

            rows = repo.positions.get_by_ids(position_ids)
            positions = [PositionSnapshot.from_row(r) for r in rows]

        if single:
            if not positions:
                raise NotFoundError(self._msg("position_not_found"), details={"position_id": str(position_ids[0])})
            position = positions[0]
            if position.status in CLOSED_POSITION_STATUSES:
                raise ConflictError(self._msg("position_closed", status=position.status))
            if position.status != "open" and not force:
                raise ConflictError(
                    self._msg("position_already_assigned", status=position.status),
                    details={"position_id": str(position.id), "status": position.status},
                )
            return recruiters, [position]

        eligible = [
            p for p in positions
            if p.status not in CLOSED_POSITION_STATUSES and (force or p.status == "open")
        ]
        if not eligible:
            raise NotFoundError(self._msg("no_open_positions"))
        skipped = len(position_ids) - len(eligible)
        if skipped:
            logger.info(f"Skipped {skipped} requested position(s) that are missing or not open")
        return recruiters, eligible

    def _recommend(
        self, positions: List[PositionSnapshot], recruiters: List[RecruiterSnapshot], now: datetime
    ) -> Tuple[List[Proposal], List[PositionSnapshot]]:
        # Each win counts against the recruiter for the rest of the batch, so the
        # reservation only has to catch loads that changed concurrently
        projected = {str(r.id): r for r in recruiters}
        proposals = []
        unmatched = []
        for position, priority in prioritize_positions(positions, now, self.config.priority, self.locale):
            ranked = rank_recruiters(position, list(projected.values()), k=1, config=self.config.fit, locale=self.locale)
            if not ranked:
                unmatched.append(position)
                continue
            winner = ranked[0].recruiter
            projected[str(winner.id)] = replace(winner, current_load=winner.current_load + 1)
            proposals.append(Proposal(position=position, fit=ranked[0], priority=priority))
        return proposals, unmatched

    def _reserve(
        self, batch_id: str, proposals: List[Proposal]
    ) -> Tuple[List[Proposal], List[Proposal], List[Any]]:
        increments: Dict[Any, int] = {}
        for proposal in proposals:
            rid = proposal.fit.recruiter.id
            increments[rid] = increments.get(rid, 0) + 1

        try:
            results = self.coordinator.reserve_batch_capacity(batch_id, increments)
        except ValidationError:
            raise
        except Exception as e:
            # The reservation transaction rolled back, so nothing needs releasing
            logger.error(f"Batch {batch_id}: capacity reservation failed: {e}", exc_info=True)
            raise PersistenceError(self._msg("persistence_failed"), state=BatchState.RECOMMENDATIONS_COMPUTED) from e

        accepted = {str(r.recruiter_id) for r in results if r.success}
        failed_recruiter_ids = [r.recruiter_id for r in results if not r.success]

        winners = [p for p in proposals if str(p.fit.recruiter.id) in accepted]
        dropped = [p for p in proposals if str(p.fit.recruiter.id) not in accepted]

        if not winners:
            logger.info(f"Batch {batch_id}: no recruiter had capacity for its proposals")
            raise ConflictError(
                self._msg("no_capacity"),
                details={"failed_recruiter_ids": [str(r) for r in failed_recruiter_ids]},
            )
        return winners, dropped, failed_recruiter_ids

    def _persist(
        self, batch_id: str, winners: List[Proposal], now: datetime, force: bool = False
    ) -> Tuple[List[CreatedAssignment], List[Tuple[Any, Any]]]:
        created = []
        superseded = []
        try:
            with allocation_uow(self.session_factory) as repo:
                for proposal in winners:
                    # Without force an existing active assignment is a conflict, left to the unique index
                    previous = repo.assignments.supersede_active(proposal.position.id, now) if force else []
                    superseded.extend((proposal.position.id, a.recruiter_id) for a in previous)

                    fit = proposal.fit
                    assignment = repo.assignments.create_assignment(
                        position_id=proposal.position.id,
                        recruiter_id=fit.recruiter.id,
                        score=fit.score,
                        score_breakdown=fit.breakdown,
                        explanation=fit.explanation,
                        assigned_at=now,
                        batch_id=batch_id,
                        reassigned_from=previous[0].id if previous else None,
                    )
                    created.append(CreatedAssignment(
                        id=assignment.id,
                        position_id=proposal.position.id,
                        recruiter_id=fit.recruiter.id,
                        recruiter_name=fit.recruiter.name,
                        score=fit.score,
                        score_breakdown=dict(fit.breakdown),
                        explanation=fit.explanation,
                        assignment_type=assignment.assignment_type,
                        status=assignment.status,
                        assigned_at=now,
                    ))
                # Committed with the inserts, so a late release cannot free this capacity
                repo.reservations.mark_committed(batch_id)
        except Exception as e:
            taken = is_duplicate_active_assignment(e)
            if taken:
                logger.warning(f"Batch {batch_id}: a position was assigned by a concurrent batch: {e}")
            else:
                logger.error(f"Batch {batch_id}: failed to persist assignments: {e}", exc_info=True)
            try:
                self.coordinator.release_batch(batch_id)
            except Exception as release_error:
                logger.error(
                    f"Batch {batch_id}: compensation failed, reserved capacity may be leaked: {release_error}",
                    exc_info=True,
                )
            if taken:
                raise ConflictError(
                    self._msg("position_taken_concurrently"),
                    details={"position_ids": [str(p.position.id) for p in winners]},
                ) from e
            raise PersistenceError(self._msg("persistence_failed"), state=BatchState.CAPACITY_RESERVED) from e
        return created, superseded

    def _update_statuses(
        self, batch_id: str, winners: List[Proposal], superseded: List[Tuple[Any, Any]], now: datetime
    ) -> List[str]:
        warnings = []

        status_failures = 0
        for proposal in winners:
            try:
                with allocation_uow(self.session_factory) as repo:
                    updated = repo.positions.mark_assigned(proposal.position.id, proposal.fit.recruiter.id, now)
                if not updated:
                    status_failures += 1
                    logger.warning(f"Batch {batch_id}: position {proposal.position.id} status not updated (closed or missing)")
            except Exception as e:
                status_failures += 1
                logger.warning(f"Batch {batch_id}: failed to update position {proposal.position.id}: {e}")
        if status_failures:
            warnings.append(self._msg("status_update_warning", count=status_failures))

        release_failures = 0
        for position_id, recruiter_id in superseded:
            try:
                self.coordinator.decrement_load(recruiter_id, 1)
            except Exception as e:
                release_failures += 1
                logger.warning(
                    f"Batch {batch_id}: failed to release recruiter {recruiter_id} for reassigned position {position_id}: {e}"
                )
        if release_failures:
            warnings.append(self._msg("release_warning", count=release_failures))

        return warnings

    def _audit(
        self,
        batch_id: str,
        created: List[CreatedAssignment],
        failed_positions: List[PositionSnapshot],
        failed_recruiter_ids: List[Any],
        stats: Dict[str, Any],
    ) -> None:
        details = {
            "batch_id": batch_id,
            "assignments_count": len(created),
            "failed_count": len(failed_positions),
            "position_ids": [str(a.position_id) for a in created],
            "failed_position_ids": [str(p.id) for p in failed_positions],
            "failed_recruiter_ids": [str(r) for r in failed_recruiter_ids],
            "stats": stats,
        }
        try:
            with allocation_uow(self.session_factory) as repo:
                repo.audit.log(action="assign", entity_type="assignment", entity_id=batch_id, details=details)
        except Exception as e:
            logger.warning(f"Batch {batch_id}: failed to write audit entry: {e}")
