import uuid

from sqlalchemy import Column, Text, TIMESTAMP, Uuid, Index, func

from .base import Base, JSONType


class AuditLog(Base):
    __tablename__ = 'audit_log'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    actor_type = Column(Text, nullable=False, default='system')
    actor_id = Column(Text, nullable=True)
    action = Column(Text, nullable=False)
    entity_type = Column(Text, nullable=False)
    entity_id = Column(Text, nullable=True)
    details = Column(JSONType, nullable=False, default=dict)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_audit_log_entity', 'entity_type', 'entity_id'),
        Index('idx_audit_log_created', 'created_at'),
    )
