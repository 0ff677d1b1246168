#!/usr/bin/env python3
"""
Fit Score (position <-> recruiter compatibility)

Key behavior:
- Zone affinity: primary zone > secondary zone > small non-zero cross-zone floor.
- Capability fit: at or just above the required level scores 1.0; under-qualification
  is penalized harder per level than over-qualification.
- Load headroom: 1 - (load/capacity)^k, so nearly-full recruiters drop off fast.
- Hard exclusion: load >= capacity (or inactive / deleted) is never scored.
- Score is the normalized weighted sum, clamped to [0,1] and rounded to 4 decimals
  so that equal inputs always produce byte-equal output.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple
import logging

from core.allocation.messages import DEFAULT_LOCALE, get_message
from core.allocation.models import FitResult, PositionSnapshot, RecruiterSnapshot
from core.config_loader import FitScorerConfig

logger = logging.getLogger(__name__)

# ----------------------------
# Tunable defaults
# ----------------------------
# Weights (unitless, normalized at scoring time)
DEFAULT_WEIGHT_ZONE = 0.30
DEFAULT_WEIGHT_CAPABILITY = 0.30
DEFAULT_WEIGHT_HEADROOM = 0.40

# Zone affinity
DEFAULT_PRIMARY_ZONE_SCORE = 1.0
DEFAULT_SECONDARY_ZONE_SCORE = 0.5
DEFAULT_CROSS_ZONE_FLOOR = 0.1

# Capability fit
DEFAULT_OVERQUALIFIED_TOLERANCE = 1
DEFAULT_OVERQUALIFIED_PENALTY = 0.1
DEFAULT_UNDERQUALIFIED_PENALTY = 0.3

# Headroom curve
DEFAULT_HEADROOM_EXPONENT = 2.0

SCORE_PRECISION = 4

# Stable order used when contributions tie in the explanation
CRITERIA: Tuple[str, ...] = ("zone", "capability", "headroom")


# ----------------------------
# Helpers
# ----------------------------
def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))

def _clamp01(x: float) -> float:
    return _clamp(x, 0.0, 1.0)

def _cfg_float(config: FitScorerConfig, name: str, default: float) -> float:
    raw = getattr(config, name, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid config %s=%r; using default=%r", name, raw, default)
        return float(default)

def _nonneg(name: str, x: float) -> float:
    y = max(0.0, float(x))
    if y != x:
        logger.warning("Corrected %s from %r to %r", name, x, y)
    return y


def normalized_weights(config: Optional[FitScorerConfig] = None) -> Dict[str, float]:
    """Criterion weights scaled to sum to 1; falls back to defaults if all are zero."""
    config = config or FitScorerConfig()
    raw = {
        "zone": _nonneg("weight_zone", _cfg_float(config, "weight_zone", DEFAULT_WEIGHT_ZONE)),
        "capability": _nonneg("weight_capability", _cfg_float(config, "weight_capability", DEFAULT_WEIGHT_CAPABILITY)),
        "headroom": _nonneg("weight_headroom", _cfg_float(config, "weight_headroom", DEFAULT_WEIGHT_HEADROOM)),
    }
    total = sum(raw.values())
    if total <= 0:
        logger.warning("All fit weights are zero; using defaults")
        raw = {"zone": DEFAULT_WEIGHT_ZONE, "capability": DEFAULT_WEIGHT_CAPABILITY, "headroom": DEFAULT_WEIGHT_HEADROOM}
        total = sum(raw.values())
    return {name: value / total for name, value in raw.items()}


# ----------------------------
# Criteria
# ----------------------------
def is_eligible(recruiter: RecruiterSnapshot) -> bool:
    """Hard gate: active, not deleted, and strictly below capacity."""
    if not recruiter.is_active or recruiter.is_deleted:
        return False
    return recruiter.capacity > 0 and recruiter.current_load < recruiter.capacity


def zone_affinity(position_zone: Optional[str], recruiter: RecruiterSnapshot,
                  config: Optional[FitScorerConfig] = None) -> Tuple[float, str]:
    config = config or FitScorerConfig()
    if position_zone and recruiter.primary_zone == position_zone:
        return _clamp01(_cfg_float(config, "primary_zone_score", DEFAULT_PRIMARY_ZONE_SCORE)), "zone_primary"
    if position_zone and position_zone in recruiter.secondary_zones:
        return _clamp01(_cfg_float(config, "secondary_zone_score", DEFAULT_SECONDARY_ZONE_SCORE)), "zone_secondary"
    return _clamp01(_cfg_float(config, "cross_zone_floor", DEFAULT_CROSS_ZONE_FLOOR)), "zone_none"


def capability_fit(required_level: int, recruiter_level: int,
                   config: Optional[FitScorerConfig] = None) -> Tuple[float, str]:
    config = config or FitScorerConfig()
    tolerance = int(_nonneg("overqualified_tolerance",
                            _cfg_float(config, "overqualified_tolerance", DEFAULT_OVERQUALIFIED_TOLERANCE)))
    over_penalty = _nonneg("overqualified_penalty_per_level",
                           _cfg_float(config, "overqualified_penalty_per_level", DEFAULT_OVERQUALIFIED_PENALTY))
    under_penalty = _nonneg("underqualified_penalty_per_level",
                            _cfg_float(config, "underqualified_penalty_per_level", DEFAULT_UNDERQUALIFIED_PENALTY))

    gap = int(recruiter_level) - int(required_level)
    if 0 <= gap <= tolerance:
        return 1.0, "capability_fit"
    if gap > tolerance:
        return _clamp01(1.0 - over_penalty * (gap - tolerance)), "capability_over"
    return _clamp01(1.0 - under_penalty * (-gap)), "capability_under"


def load_headroom(current_load: int, capacity: int, config: Optional[FitScorerConfig] = None) -> float:
    config = config or FitScorerConfig()
    if capacity <= 0:
        return 0.0
    exponent = _cfg_float(config, "headroom_exponent", DEFAULT_HEADROOM_EXPONENT)
    if exponent <= 0:
        logger.warning("Invalid headroom_exponent=%r; using default=%r", exponent, DEFAULT_HEADROOM_EXPONENT)
        exponent = DEFAULT_HEADROOM_EXPONENT
    ratio = _clamp01(current_load / capacity)
    return _clamp01(1.0 - ratio ** exponent)


# ----------------------------
# Main scorer
# ----------------------------
def score_fit(
    position: PositionSnapshot,
    recruiter: RecruiterSnapshot,
    config: Optional[FitScorerConfig] = None,
    locale: str = DEFAULT_LOCALE,
) -> Optional[FitResult]:
    """
    Score one (position, recruiter) pair.

    Returns:
        FitResult with score in [0,1], per-criterion breakdown and explanation,
        or None when the recruiter fails the eligibility gate.
    """
    if not is_eligible(recruiter):
        return None

    config = config or FitScorerConfig()
    weights = normalized_weights(config)

    zone, zone_key = zone_affinity(position.zone, recruiter, config)
    capability, capability_key = capability_fit(position.required_level, recruiter.capability_level, config)
    headroom = load_headroom(recruiter.current_load, recruiter.capacity, config)
    headroom_key = "headroom_high" if headroom >= 0.5 else "headroom_low"

    breakdown = {
        "zone": round(zone, SCORE_PRECISION),
        "capability": round(capability, SCORE_PRECISION),
        "headroom": round(headroom, SCORE_PRECISION),
    }
    contributions = {name: weights[name] * breakdown[name] for name in CRITERIA}
    score = round(_clamp01(sum(contributions.values())), SCORE_PRECISION)

    labels = {"zone": zone_key, "capability": capability_key, "headroom": headroom_key}
    explanation = _explain(contributions, labels, locale)

    logger.debug(
        "Fit position=%s recruiter=%s score=%.4f zone=%.2f capability=%.2f headroom=%.2f",
        position.id, recruiter.id, score, zone, capability, headroom,
    )
    return FitResult(recruiter=recruiter, score=score, breakdown=breakdown, explanation=explanation)


def _explain(contributions: Dict[str, float], labels: Dict[str, str], locale: str) -> str:
    # Top one or two criteria by weighted contribution
    ranked: List[str] = sorted(CRITERIA, key=lambda name: (-contributions[name], CRITERIA.index(name)))
    top = [name for name in ranked[:2] if contributions[name] > 0] or ranked[:1]
    return ", ".join(get_message(labels[name], locale) for name in top)
