import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Integer, Numeric, Uuid, Index, UniqueConstraint, CheckConstraint, func
from sqlalchemy.sql import text as sql_text
from sqlalchemy.orm import relationship

from core.allocation.constants import (
    ACTIVE_ASSIGNMENT_STATUSES,
    ASSIGNMENT_STAGES,
    ASSIGNMENT_STATUSES,
    ASSIGNMENT_TYPES,
)
from .base import Base, JSONType, in_list

ACTIVE_ASSIGNMENT_INDEX = 'uq_assignments_active_position'
_ACTIVE_ASSIGNMENT = sql_text(f"status IN ({in_list(sorted(ACTIVE_ASSIGNMENT_STATUSES))})")


class Assignment(Base):
    """
    Links one position to one recruiter, with the fit score that justified it.

    At most one active assignment per position (partial unique index); a
    reassignment marks the previous row `reassigned` instead of duplicating it.
    """
    __tablename__ = 'assignments'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    position_id = Column(Uuid, ForeignKey('positions.id', ondelete='CASCADE'), nullable=False)
    recruiter_id = Column(Uuid, ForeignKey('recruiters.id'), nullable=False)
    batch_id = Column(Text, nullable=True)

    score = Column(Numeric(5, 4), nullable=False)
    score_breakdown = Column(JSONType, nullable=False, default=dict)
    explanation = Column(Text, nullable=True)

    assignment_type = Column(Text, nullable=False, default='auto')
    status = Column(Text, nullable=False, default='assigned')
    current_stage = Column(Text, nullable=False, default='assigned')

    reassigned_from = Column(Uuid, nullable=True)
    reassigned_at = Column(TIMESTAMP(timezone=True), nullable=True)

    assigned_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    stage_entered_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    position = relationship("Position", back_populates="assignments")
    recruiter = relationship("Recruiter", back_populates="assignments")

    __table_args__ = (
        Index(
            ACTIVE_ASSIGNMENT_INDEX, 'position_id',
            unique=True,
            postgresql_where=_ACTIVE_ASSIGNMENT,
            sqlite_where=_ACTIVE_ASSIGNMENT,
        ),
        CheckConstraint(f"status IN ({in_list(ASSIGNMENT_STATUSES)})", name='ck_assignments_status'),
        CheckConstraint(f"assignment_type IN ({in_list(ASSIGNMENT_TYPES)})", name='ck_assignments_type'),
        CheckConstraint(f"current_stage IN ({in_list(ASSIGNMENT_STAGES)})", name='ck_assignments_stage'),
        CheckConstraint('score >= 0 AND score <= 1', name='ck_assignments_score_range'),
        Index('idx_assignments_recruiter', 'recruiter_id'),
        Index('idx_assignments_status', 'status'),
        Index('idx_assignments_assigned_at', 'assigned_at'),
    )


class CapacityReservation(Base):
    """
    Ledger of load increments applied per batch.

    `reserved` -> `committed` when the batch's assignments are persisted, or
    `reserved` -> `released` when the batch is compensated. Only `reserved`
    rows can be released, which makes compensation idempotent.
    """
    __tablename__ = 'capacity_reservations'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    batch_id = Column(Text, nullable=False)
    recruiter_id = Column(Uuid, ForeignKey('recruiters.id', ondelete='CASCADE'), nullable=False)
    amount = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default='reserved')

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    released_at = Column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint('batch_id', 'recruiter_id', name='uq_capacity_reservations_batch_recruiter'),
        Index('idx_capacity_reservations_batch', 'batch_id'),
    )
