"""
Fixtures for tests running against a real (SQLite) database.
"""

from datetime import datetime, timezone

import pytest_asyncio

from src.infrastructure.database.models import (
    CourseModel,
    CourseProgressModel,
    EnrollmentModel,
    ProfileModel,
    UserModel,
)
from src.infrastructure.database.repositories import (
    AuditLogRepository,
    ResourceRepository,
)


@pytest_asyncio.fixture
async def seeded_database(session_factory):
    """One student enrolled in one course with some lesson progress."""
    async with session_factory() as session:
        user = UserModel(
            id="user_1",
            email="ada@example.com",
            name="Ada Lovelace",
            role="STUDENT",
        )
        profile = ProfileModel(
            id="profile_1",
            user_id="user_1",
            bio="Analytical engines",
            location="London",
            timezone="Europe/London",
        )
        course = CourseModel(
            id="course_1", title="Cloud Basics", slug="cloud-basics", published=True
        )
        enrollment = EnrollmentModel(
            id="enr_1",
            user_id="user_1",
            course_id="course_1",
            enrolled_at=datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
            completion_percentage=25.0,
            status="ACTIVE",
            source="purchase",
        )
        progress = [
            CourseProgressModel(
                id=f"progress_{i}",
                user_id="user_1",
                course_id="course_1",
                lesson_id=f"lesson_{i}",
                completed=i == 1,
                time_spent=60 * i,
                timestamp=datetime(2026, 10, 2, 9, i, tzinfo=timezone.utc),
            )
            for i in (1, 2)
        ]
        session.add_all([user, profile, course, enrollment, *progress])
        await session.commit()

    return session_factory


@pytest_asyncio.fixture
async def sql_audit_repo(session_factory):
    return AuditLogRepository(session_factory)


@pytest_asyncio.fixture
async def sql_resource_repo(seeded_database):
    return ResourceRepository(seeded_database)
