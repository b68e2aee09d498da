"""
Infrastructure package.
"""

from .database import *
from .external import *
from .monitoring import *

__all__ = [
    # Database
    "Base",
    "AuditLogModel",
    "AuditLogRepository",
    "InMemoryAuditLogRepository",
    "ResourceRepository",
    # External
    "HTTPClient",
    # Monitoring
    "HealthChecker",
    "HealthStatus",
    "get_metrics",
    "get_metrics_content_type",
]
