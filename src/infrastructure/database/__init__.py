"""
Database package.
"""

from .models import AuditLogModel, Base
from .repositories import (
    AuditLogRepository,
    InMemoryAuditLogRepository,
    ResourceRepository,
)

__all__ = [
    "Base",
    "AuditLogModel",
    "AuditLogRepository",
    "InMemoryAuditLogRepository",
    "ResourceRepository",
]
