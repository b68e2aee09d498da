"""
User and profile SQLAlchemy models.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel, utc_now


class UserModel(BaseModel):
    """User database model."""

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255))
    image = Column(Text)
    role = Column(String(20), nullable=False, default="STUDENT")
    updated_at = Column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )
    last_login_at = Column(DateTime(timezone=True))

    # Relationships
    profile = relationship(
        "ProfileModel", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    enrollments = relationship("EnrollmentModel", back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class ProfileModel(BaseModel):
    """Profile database model."""

    __tablename__ = "profiles"

    user_id = Column(
        String(36), ForeignKey("users.id"), nullable=False, unique=True, index=True
    )
    bio = Column(Text)
    location = Column(String(255))
    timezone = Column(String(64))
    phone = Column(String(32))

    user = relationship("UserModel", back_populates="profile")
