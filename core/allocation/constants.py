"""
Domain constants shared by the allocation engine, the persistence layer and the API.
"""

from typing import Dict, FrozenSet, Tuple

PRIORITY_TIERS: Tuple[str, ...] = ('P1', 'P2', 'P3')

# Operating regions
ZONES: Tuple[str, ...] = (
    'Trujillo',
    'Viru',
    'Chao',
    'Chicama',
    'Chiclayo',
    'Arequipa',
    'Ica',
    'Lima',
)

# Named position levels -> required capability (1-8)
POSITION_LEVEL_MAP: Dict[str, int] = {
    'operario': 1,
    'auxiliar': 2,
    'asistente': 3,
    'analista': 4,
    'coordinador': 5,
    'jefe': 6,
    'subgerente': 7,
    'gerente': 8,
    # legacy names
    'tecnico': 3,
    'supervisor': 5,
}

MIN_CAPABILITY_LEVEL = 1
MAX_CAPABILITY_LEVEL = 8

DEFAULT_RECRUITER_CAPACITY = 13

POSITION_STATUSES: Tuple[str, ...] = (
    'open',
    'assigned',
    'in_progress',
    'interviewing',
    'offer_sent',
    'filled',
    'cancelled',
    'on_hold',
)
CLOSED_POSITION_STATUSES: FrozenSet[str] = frozenset({'filled', 'cancelled'})

ASSIGNMENT_STATUSES: Tuple[str, ...] = (
    'assigned',
    'accepted',
    'in_progress',
    'completed',
    'reassigned',
    'cancelled',
)
ACTIVE_ASSIGNMENT_STATUSES: FrozenSet[str] = frozenset({'assigned', 'accepted', 'in_progress'})

ASSIGNMENT_TYPES: Tuple[str, ...] = ('auto', 'manual')

ASSIGNMENT_STAGES: Tuple[str, ...] = (
    'assigned',
    'first_contact',
    'first_interview_scheduled',
    'interview_completed',
    'decision_made',
    'offer_sent',
    'completed',
)

QUEUES: Tuple[str, ...] = ('critical', 'technical', 'general')


def level_for_name(level_name) -> int:
    """Map a named position level to its required capability; unknown names map to 1."""
    if not level_name:
        return MIN_CAPABILITY_LEVEL
    return POSITION_LEVEL_MAP.get(str(level_name).strip().lower(), MIN_CAPABILITY_LEVEL)
