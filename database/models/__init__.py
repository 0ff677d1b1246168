from .base import Base, JSONType
from .recruiter import Recruiter
from .position import Position
from .assignment import Assignment, CapacityReservation
from .audit import AuditLog

__all__ = [
    'Base',
    'JSONType',
    'Recruiter',
    'Position',
    'Assignment',
    'CapacityReservation',
    'AuditLog',
]
