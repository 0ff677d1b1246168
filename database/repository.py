from sqlalchemy.orm import Session

from database.repositories import (
    AssignmentRepository,
    AuditRepository,
    PositionRepository,
    RecruiterRepository,
    ReservationRepository,
)


class AllocationRepository:
    """Groups the allocation repositories over one Session (one transaction)."""

    def __init__(self, db: Session):
        self.db = db
        self.recruiters = RecruiterRepository(db)
        self.positions = PositionRepository(db)
        self.assignments = AssignmentRepository(db)
        self.reservations = ReservationRepository(db)
        self.audit = AuditRepository(db)
