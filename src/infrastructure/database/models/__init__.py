"""
Database models package.
"""

from .audit_log import AuditLogModel
from .base import Base, BaseModel
from .course import CourseModel
from .course_progress import CourseProgressModel
from .enrollment import EnrollmentModel
from .user import ProfileModel, UserModel

__all__ = [
    "Base",
    "BaseModel",
    "UserModel",
    "ProfileModel",
    "CourseModel",
    "EnrollmentModel",
    "CourseProgressModel",
    "AuditLogModel",
]
