"""
Audit log SQLAlchemy model.
"""

from sqlalchemy import JSON, Column, Index, String

from .base import BaseModel


class AuditLogModel(BaseModel):
    """Append-only audit trail entry."""

    __tablename__ = "audit_logs"

    action = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(255))
    details = Column(JSON)

    __table_args__ = (Index("ix_audit_logs_action_created_at", "action", "created_at"),)

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action={self.action})>"
