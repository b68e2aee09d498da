"""Resource snapshot repository implementation."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.application.interfaces.repositories import ResourceRepositoryInterface
from src.config.logging import get_logger
from src.infrastructure.database.models.base import as_utc
from src.infrastructure.database.models.course import CourseModel
from src.infrastructure.database.models.course_progress import CourseProgressModel
from src.infrastructure.database.models.enrollment import EnrollmentModel
from src.infrastructure.database.models.user import ProfileModel, UserModel

logger = get_logger(__name__)


class ResourceRepository(ResourceRepositoryInterface):
    """
    Loads the resource snapshots carried in sync event payloads.

    Snapshots use the camelCase field names subscribers receive on the wire.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_enrollment_snapshot(
        self, enrollment_id: str
    ) -> Optional[Dict[str, Any]]:
        """Get enrollment with its user and course summary."""
        stmt = (
            select(EnrollmentModel)
            .options(
                selectinload(EnrollmentModel.user),
                selectinload(EnrollmentModel.course),
            )
            .where(EnrollmentModel.id == enrollment_id)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            enrollment = result.scalar_one_or_none()

        if not enrollment:
            logger.debug("Enrollment not found", enrollment_id=enrollment_id)
            return None

        return {
            "id": enrollment.id,
            "userId": enrollment.user_id,
            "courseId": enrollment.course_id,
            "enrolledAt": as_utc(enrollment.enrolled_at),
            "lastAccessedAt": as_utc(enrollment.last_accessed_at),
            "completionPercentage": enrollment.completion_percentage,
            "status": enrollment.status,
            "source": enrollment.source,
            "purchaseId": enrollment.purchase_id,
            "user": self._user_summary(enrollment.user),
            "course": self._course_summary(enrollment.course),
        }

    async def get_profile_snapshot(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get user identity fields with the attached profile."""
        stmt = (
            select(UserModel)
            .options(selectinload(UserModel.profile))
            .where(UserModel.id == user_id)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            user = result.scalar_one_or_none()

        if not user:
            logger.debug("User not found", user_id=user_id)
            return None

        return {
            **self._user_summary(user),
            "profile": self._profile(user.profile),
            "updatedAt": as_utc(user.updated_at),
        }

    async def get_user_snapshot(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get user identity fields."""
        stmt = select(UserModel).where(UserModel.id == user_id)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            user = result.scalar_one_or_none()

        if not user:
            logger.debug("User not found", user_id=user_id)
            return None

        return {
            **self._user_summary(user),
            "role": user.role,
            "createdAt": as_utc(user.created_at),
            "updatedAt": as_utc(user.updated_at),
        }

    async def get_progress_snapshot(
        self, user_id: str, course_id: str
    ) -> Dict[str, Any]:
        """Get all progress rows of a user within a course. Never missing."""
        stmt = (
            select(CourseProgressModel)
            .options(selectinload(CourseProgressModel.course))
            .where(
                CourseProgressModel.user_id == user_id,
                CourseProgressModel.course_id == course_id,
            )
            .order_by(CourseProgressModel.timestamp)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()

        return {
            "userId": user_id,
            "courseId": course_id,
            "progress": [
                {
                    "id": row.id,
                    "userId": row.user_id,
                    "courseId": row.course_id,
                    "lessonId": row.lesson_id,
                    "completed": row.completed,
                    "timeSpent": row.time_spent,
                    "lastPosition": row.last_position,
                    "timestamp": as_utc(row.timestamp),
                    "course": self._course_summary(row.course),
                }
                for row in rows
            ],
            "timestamp": datetime.now(timezone.utc),
        }

    @staticmethod
    def _user_summary(user: Optional[UserModel]) -> Optional[Dict[str, Any]]:
        if user is None:
            return None
        return {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "image": user.image,
        }

    @staticmethod
    def _course_summary(course: Optional[CourseModel]) -> Optional[Dict[str, Any]]:
        if course is None:
            return None
        return {"id": course.id, "title": course.title, "slug": course.slug}

    @staticmethod
    def _profile(profile: Optional[ProfileModel]) -> Optional[Dict[str, Any]]:
        if profile is None:
            return None
        return {
            "id": profile.id,
            "userId": profile.user_id,
            "bio": profile.bio,
            "location": profile.location,
            "timezone": profile.timezone,
            "phone": profile.phone,
        }
