"""
Application interfaces package.
"""

from .repositories import AuditLogRepositoryInterface, ResourceRepositoryInterface
from .services import AlertNotifierInterface

__all__ = [
    "AuditLogRepositoryInterface",
    "ResourceRepositoryInterface",
    "AlertNotifierInterface",
]
