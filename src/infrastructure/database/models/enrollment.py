"""
Enrollment SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import BaseModel, utc_now


class EnrollmentModel(BaseModel):
    """Enrollment database model."""

    __tablename__ = "enrollments"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    enrolled_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    last_accessed_at = Column(DateTime(timezone=True))
    completion_percentage = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="ACTIVE", index=True)
    source = Column(String(50), nullable=False)
    purchase_id = Column(String(36))

    # Relationships
    user = relationship("UserModel", back_populates="enrollments")
    course = relationship("CourseModel")

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, status={self.status})>"
