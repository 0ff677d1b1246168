#!/usr/bin/env python3
"""
Priority Classifier.

Maps a position's urgency attributes to a priority score (higher = more
urgent) and a reporting queue. Pure and deterministic: the reference time is
an explicit argument, never read from a clock inside the scoring path.

score = base[tier] + escalation[tier] * overdue_days - (assigned_discount if has recruiter)

Queues are for grouping operator views only; they never affect eligibility.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core.allocation.constants import QUEUES
from core.allocation.messages import DEFAULT_LOCALE, get_message
from core.allocation.models import PositionSnapshot, PriorityResult
from core.config_loader import PriorityConfig

logger = logging.getLogger(__name__)

FALLBACK_TIER = "P3"

# 2:1:1 critical:technical:general
INTERLEAVE_PATTERN: Tuple[str, ...] = ("critical", "critical", "technical", "general")


def _as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    # Naive datetimes are stored as UTC
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _tier_value(table: Dict[str, Any], tier: str) -> Any:
    if tier in table:
        return table[tier]
    return table.get(FALLBACK_TIER, 0)


def resolve_deadline(position: PositionSnapshot, config: Optional[PriorityConfig] = None) -> Optional[datetime]:
    """SLA deadline of a position: explicit deadline, else opened_at + tier SLA days."""
    config = config or PriorityConfig()
    if position.sla_deadline is not None:
        return _as_utc(position.sla_deadline)
    if position.opened_at is None:
        return None
    sla_days = int(_tier_value(config.sla_days, position.priority))
    return _as_utc(position.opened_at) + timedelta(days=sla_days)


def overdue_days(position: PositionSnapshot, as_of: datetime, config: Optional[PriorityConfig] = None) -> int:
    """Whole days past the SLA deadline (0 if not yet due or no deadline is known)."""
    deadline = resolve_deadline(position, config)
    if deadline is None:
        return 0
    delta = _as_utc(as_of) - deadline
    if delta <= timedelta(0):
        return 0
    return delta.days


def classify_queue(position: PositionSnapshot, config: Optional[PriorityConfig] = None) -> str:
    config = config or PriorityConfig()
    if position.priority == "P1":
        return "critical"
    if position.required_level <= config.technical_max_level:
        return "technical"
    return "general"


def classify_priority(
    position: PositionSnapshot,
    as_of: Optional[datetime] = None,
    config: Optional[PriorityConfig] = None,
    locale: str = DEFAULT_LOCALE,
) -> PriorityResult:
    """
    Compute priority score, queue and breakdown for one position.

    Args:
        position: Position snapshot.
        as_of: Reference time for SLA escalation (defaults to now, UTC).
        config: Per-tier tables; defaults are P1 1000/50, P2 500/20, P3 100/5.
        locale: Language of the explanation.

    Returns:
        PriorityResult with score, queue, breakdown and explanation.
    """
    config = config or PriorityConfig()
    if as_of is None:
        as_of = datetime.now(timezone.utc)

    tier = position.priority
    if tier not in config.base_scores:
        logger.warning("Unknown priority tier %r for position %s; treating as %s", tier, position.id, FALLBACK_TIER)
        tier = FALLBACK_TIER

    base = float(_tier_value(config.base_scores, tier))
    days = overdue_days(position, as_of, config)
    escalation = float(_tier_value(config.escalation_per_day, tier)) * days
    discount = float(config.assigned_discount) if position.has_recruiter else 0.0

    score = round(base + escalation - discount, 2)
    queue = classify_queue(position, config)

    if days > 0:
        parts = [get_message("priority_overdue", locale, tier=tier, days=days)]
    else:
        parts = [get_message("priority_on_time", locale, tier=tier)]
    if discount:
        parts.append(get_message("priority_has_recruiter", locale))

    return PriorityResult(
        score=score,
        queue=queue,
        breakdown={
            "base": base,
            "escalation": escalation,
            "assigned_discount": discount,
            "overdue_days": float(days),
        },
        explanation="; ".join(parts),
    )


def prioritize_positions(
    positions: Iterable[PositionSnapshot],
    as_of: Optional[datetime] = None,
    config: Optional[PriorityConfig] = None,
    locale: str = DEFAULT_LOCALE,
) -> List[Tuple[PositionSnapshot, PriorityResult]]:
    """
    Classify and sort positions by urgency.

    Order: priority score desc, SLA deadline asc (unknown deadlines last), id asc.
    """
    if as_of is None:
        as_of = datetime.now(timezone.utc)
    far_future = datetime.max.replace(tzinfo=timezone.utc)

    scored = [(p, classify_priority(p, as_of, config, locale)) for p in positions]
    scored.sort(
        key=lambda item: (
            -item[1].score,
            resolve_deadline(item[0], config) or far_future,
            str(item[0].id),
        )
    )
    return scored


def interleave_by_queue(items: List[Any], queue_of: Callable[[Any], str] = lambda item: item[1].queue) -> List[Any]:
    """
    Interleave an already-sorted list 2:1:1 across critical/technical/general.

    Empty queues are skipped, so the remaining queues absorb their turns.
    """
    buckets: Dict[str, deque] = {q: deque() for q in QUEUES}
    for item in items:
        buckets.setdefault(queue_of(item), deque()).append(item)

    pattern = INTERLEAVE_PATTERN + tuple(q for q in buckets if q not in INTERLEAVE_PATTERN)
    result = []
    while any(buckets.values()):
        for queue in pattern:
            if buckets[queue]:
                result.append(buckets[queue].popleft())
    return result


def queue_stats(results: Iterable[PriorityResult]) -> Dict[str, int]:
    stats = {q: 0 for q in QUEUES}
    total = 0
    for result in results:
        stats[result.queue] = stats.get(result.queue, 0) + 1
        total += 1
    stats["total"] = total
    return stats
