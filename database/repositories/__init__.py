from database.repositories.base import BaseRepository
from database.repositories.recruiter import RecruiterRepository
from database.repositories.position import PositionRepository
from database.repositories.assignment import AssignmentRepository
from database.repositories.reservation import ReservationRepository
from database.repositories.audit import AuditRepository

__all__ = [
    'BaseRepository',
    'RecruiterRepository',
    'PositionRepository',
    'AssignmentRepository',
    'ReservationRepository',
    'AuditRepository',
]
