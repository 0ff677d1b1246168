import uuid

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Integer, Uuid, Index, CheckConstraint, func
from sqlalchemy.orm import relationship

from core.allocation.constants import POSITION_STATUSES, PRIORITY_TIERS, ZONES
from .base import Base, in_list


class Position(Base):
    """
    A staffing requisition.

    Populated by the ingestion pipeline; the allocation engine only moves
    `status`, `recruiter_id` and `assigned_at`.
    """
    __tablename__ = 'positions'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id = Column(Text, nullable=True)

    title = Column(Text, nullable=False)
    zone = Column(Text, nullable=True)
    level = Column(Text, nullable=False, default='operario')
    priority = Column(Text, nullable=False, default='P2')
    headcount = Column(Integer, nullable=False, default=1)

    status = Column(Text, nullable=False, default='open')
    recruiter_id = Column(Uuid, ForeignKey('recruiters.id', ondelete='SET NULL'), nullable=True)

    opened_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    sla_deadline = Column(TIMESTAMP(timezone=True), nullable=True)
    assigned_at = Column(TIMESTAMP(timezone=True), nullable=True)
    closed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)

    recruiter = relationship("Recruiter")
    assignments = relationship("Assignment", back_populates="position")

    __table_args__ = (
        CheckConstraint(f"status IN ({in_list(POSITION_STATUSES)})", name='ck_positions_status'),
        CheckConstraint(f"priority IN ({in_list(PRIORITY_TIERS)})", name='ck_positions_priority'),
        CheckConstraint('headcount >= 1', name='ck_positions_headcount'),
        CheckConstraint(f"zone IN ({in_list(ZONES)})", name='ck_positions_zone'),
        Index('idx_positions_status', 'status'),
        Index('idx_positions_zone', 'zone'),
        Index('idx_positions_recruiter', 'recruiter_id'),
        Index('idx_positions_priority', 'priority'),
    )
