"""
Base model for SQLAlchemy models.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes. SQLite drops the offset on the way back."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_id() -> str:
    return str(uuid4())


class BaseModel(Base):
    """Base model with common fields."""

    __abstract__ = True

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', 'N/A')})>"
