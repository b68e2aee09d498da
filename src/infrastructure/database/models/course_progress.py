"""
Course progress SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel, utc_now


class CourseProgressModel(BaseModel):
    """Per-lesson progress of a user within a course."""

    __tablename__ = "course_progress"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    lesson_id = Column(String(36))
    completed = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=False, default=0)
    last_position = Column(Integer, nullable=False, default=0)
    timestamp = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    course = relationship("CourseModel")
