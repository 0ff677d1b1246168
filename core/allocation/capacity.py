#!/usr/bin/env python3
"""
Capacity Reservation Coordinator.

The only code path that mutates `recruiters.current_load`. Each call runs in
its own transaction:

- reserve_batch_capacity: lock the affected recruiter rows (ascending id),
  apply each aggregated increment with a guarded UPDATE, record a ledger row
  per success. A recruiter is either fully incremented or untouched.
- release_batch: compensate a batch by decrementing only ledger rows still
  `reserved`, then marking them `released`. Safe to call more than once.
- decrement_load: raw clamped release, used for loads backing superseded
  assignments.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple, Union

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from core.allocation.errors import ValidationError
from core.allocation.models import ReservationResult
from database.uow import allocation_uow

logger = logging.getLogger(__name__)

Increments = Union[Mapping[Any, int], Iterable[Tuple[Any, int]]]


def _reservation_retry(attempts: int):
    """Retry decorator for deadlocks / serialization failures; a failed transaction applied nothing."""
    return retry(
        retry=retry_if_exception_type(OperationalError),
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def _normalize_increments(increments: Increments) -> List[Tuple[Any, int]]:
    pairs = list(increments.items()) if isinstance(increments, Mapping) else list(increments)

    seen = set()
    normalized = []
    for recruiter_id, amount in pairs:
        key = str(recruiter_id)
        if key in seen:
            raise ValidationError(f"Duplicate recruiter {recruiter_id} in one reservation; aggregate increments first")
        seen.add(key)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            raise ValidationError(f"Increment for recruiter {recruiter_id} must be an integer >= 1, got {amount!r}")
        normalized.append((recruiter_id, amount))
    # Lock order
    normalized.sort(key=lambda pair: str(pair[0]))
    return normalized


class CapacityCoordinator:
    """Atomic reservation and release of recruiter capacity."""

    def __init__(self, session_factory: Callable[[], Session], retry_attempts: int = 3):
        self.session_factory = session_factory
        self.retry_attempts = retry_attempts
        self._reserve = _reservation_retry(retry_attempts)(self._reserve_once)
        self._release = _reservation_retry(retry_attempts)(self._release_once)

    def reserve_batch_capacity(self, batch_id: str, increments: Increments) -> List[ReservationResult]:
        """
        Reserve capacity for a whole batch in one transaction.

        Args:
            batch_id: Identifier stored on the ledger rows, used for release.
            increments: recruiter_id -> amount (>= 1), one entry per recruiter.

        Returns:
            One ReservationResult per recruiter. Failed recruiters keep their
            load; unknown recruiters report new_load = -1.
        """
        pairs = _normalize_increments(increments)
        if not pairs:
            return []
        results = self._reserve(batch_id, pairs)

        accepted = sum(1 for r in results if r.success)
        logger.info(f"Batch {batch_id}: reserved capacity for {accepted}/{len(results)} recruiter(s)")
        return results

    def _reserve_once(self, batch_id: str, pairs: List[Tuple[Any, int]]) -> List[ReservationResult]:
        with allocation_uow(self.session_factory) as repo:
            ids = [recruiter_id for recruiter_id, _ in pairs]
            repo.recruiters.lock_for_update(ids)

            accepted = {}
            for recruiter_id, amount in pairs:
                if repo.recruiters.try_increment_load(recruiter_id, amount):
                    repo.reservations.record(batch_id, recruiter_id, amount)
                    accepted[str(recruiter_id)] = amount
                else:
                    logger.debug(f"Batch {batch_id}: recruiter {recruiter_id} rejected increment {amount}")

            loads = {str(k): v for k, v in repo.recruiters.get_loads(ids).items()}

        return [
            ReservationResult(
                recruiter_id=recruiter_id,
                success=str(recruiter_id) in accepted,
                new_load=loads.get(str(recruiter_id), -1),
            )
            for recruiter_id, _ in pairs
        ]

    def release_batch(self, batch_id: str) -> Dict[Any, int]:
        """
        Compensate every outstanding reservation of a batch.

        Returns:
            recruiter_id -> new load for the reservations released by this call
            (empty if the batch was already released or committed).
        """
        released = self._release(batch_id)
        if released:
            logger.info(f"Batch {batch_id}: released capacity for {len(released)} recruiter(s)")
        else:
            logger.debug(f"Batch {batch_id}: nothing left to release")
        return released

    def _release_once(self, batch_id: str) -> Dict[Any, int]:
        now = datetime.now(timezone.utc)
        released = {}
        with allocation_uow(self.session_factory) as repo:
            for reservation in repo.reservations.get_outstanding(batch_id):
                released[reservation.recruiter_id] = repo.recruiters.decrement_load(
                    reservation.recruiter_id, reservation.amount
                )
                repo.reservations.mark_released(reservation, now)
        return released

    def decrement_load(self, recruiter_id: Any, amount: int = 1) -> int:
        """Release `amount` units of a recruiter's load, never below zero."""
        if amount < 1:
            raise ValidationError(f"Decrement must be >= 1, got {amount!r}")
        with allocation_uow(self.session_factory) as repo:
            new_load = repo.recruiters.decrement_load(recruiter_id, amount)
        logger.debug(f"Recruiter {recruiter_id}: load decremented by {amount} to {new_load}")
        return new_load
