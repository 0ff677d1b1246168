import uuid

from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Integer, Uuid, CheckConstraint, Index, func
from sqlalchemy.orm import relationship

from core.allocation.constants import DEFAULT_RECRUITER_CAPACITY, MAX_CAPABILITY_LEVEL, MIN_CAPABILITY_LEVEL, ZONES
from .base import Base, JSONType, in_list


class Recruiter(Base):
    """
    A staffing agent with a zone, capability level and load capacity.

    `current_load` is a cached counter owned by the capacity coordinator;
    no other code path writes it.
    """
    __tablename__ = 'recruiters'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)

    primary_zone = Column(Text, nullable=True)
    secondary_zones = Column(JSONType, nullable=False, default=list)

    capability_level = Column(Integer, nullable=False, default=1)
    capacity = Column(Integer, nullable=False, default=DEFAULT_RECRUITER_CAPACITY)  # hard cap per recruiter
    current_load = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)

    assignments = relationship("Assignment", back_populates="recruiter")

    __table_args__ = (
        CheckConstraint('current_load >= 0', name='ck_recruiters_load_nonneg'),
        CheckConstraint('current_load <= capacity', name='ck_recruiters_load_within_capacity'),
        CheckConstraint(
            f'capability_level BETWEEN {MIN_CAPABILITY_LEVEL} AND {MAX_CAPABILITY_LEVEL}',
            name='ck_recruiters_capability_range'
        ),
        CheckConstraint(f"primary_zone IN ({in_list(ZONES)})", name='ck_recruiters_zone'),
        Index('idx_recruiters_active', 'is_active'),
        Index('idx_recruiters_zone', 'primary_zone'),
    )
