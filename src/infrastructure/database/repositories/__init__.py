"""
Database repositories package.
"""

from .audit_log_repository import AuditLogRepository
from .memory_audit_log_repository import InMemoryAuditLogRepository
from .resource_repository import ResourceRepository

__all__ = [
    "AuditLogRepository",
    "InMemoryAuditLogRepository",
    "ResourceRepository",
]
