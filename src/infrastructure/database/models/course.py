"""
Course SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from .base import BaseModel, utc_now


class CourseModel(BaseModel):
    """Course database model."""

    __tablename__ = "courses"

    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    summary = Column(Text)
    price_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="INR")
    published = Column(Boolean, nullable=False, default=False)
    updated_at = Column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, slug={self.slug})>"
