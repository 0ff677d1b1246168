#!/usr/bin/env python3
"""
Recommendation Ranker - top-K recruiters per position.

Side-effect free; used by the orchestrator to pick a winner (K=1) and by the
suggestion views to show the top 3 without reserving anything.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from core.allocation.errors import ValidationError
from core.allocation.fit_score import score_fit
from core.allocation.messages import DEFAULT_LOCALE
from core.allocation.models import AssignmentStats, FitResult, PositionSnapshot, RecruiterSnapshot
from core.config_loader import FitScorerConfig

logger = logging.getLogger(__name__)


def ranking_key(result: FitResult) -> Tuple[float, int, str]:
    """Score desc, then lower current load, then lower recruiter id."""
    return (-result.score, result.recruiter.current_load, str(result.recruiter.id))


def rank_recruiters(
    position: PositionSnapshot,
    recruiters: Iterable[RecruiterSnapshot],
    k: int = 3,
    config: Optional[FitScorerConfig] = None,
    locale: str = DEFAULT_LOCALE,
    exclude_ids: Sequence[Any] = (),
) -> List[FitResult]:
    """
    Rank recruiters for one position.

    Args:
        position: Position to staff.
        recruiters: Candidate recruiters; ineligible ones are dropped by the Fit Scorer gate.
        k: Maximum number of results.
        config: Fit Scorer configuration.
        locale: Language of explanations.
        exclude_ids: Recruiter ids to leave out (e.g. the current holder in reassignment views).

    Returns:
        Up to k FitResults, best first.
    """
    if k <= 0:
        return []
    excluded = {str(i) for i in exclude_ids}

    results = []
    for recruiter in recruiters:
        if str(recruiter.id) in excluded:
            continue
        result = score_fit(position, recruiter, config, locale)
        if result is not None:
            results.append(result)

    results.sort(key=ranking_key)
    return results[:k]


def validate_weights(config: FitScorerConfig) -> None:
    """Reject weight sets that cannot be normalized."""
    weights = [config.weight_zone, config.weight_capability, config.weight_headroom]
    if any(w < 0 for w in weights):
        raise ValidationError(f"Fit weights must be non-negative, got {weights}")
    if sum(weights) <= 0:
        raise ValidationError("Fit weights must have a positive sum")


def assignment_stats(scored: Iterable[Tuple[float, str]], total_failed: int = 0) -> AssignmentStats:
    """
    Aggregate (score, priority tier) pairs of created assignments.

    average_score is rounded to 2 decimals.
    """
    scores = []
    by_priority = {}
    for score, tier in scored:
        scores.append(score)
        by_priority[tier] = by_priority.get(tier, 0) + 1

    average = round(sum(scores) / len(scores), 2) if scores else 0.0
    return AssignmentStats(
        total_assigned=len(scores),
        total_failed=total_failed,
        average_score=average,
        by_priority=by_priority,
    )
