"""
Integration tests for resource snapshot loading.
"""

from datetime import datetime, timezone

import pytest


class TestResourceRepository:
    """Test cases for ResourceRepository."""

    @pytest.mark.asyncio
    async def test_enrollment_snapshot(self, sql_resource_repo):
        snapshot = await sql_resource_repo.get_enrollment_snapshot("enr_1")

        assert snapshot["id"] == "enr_1"
        assert snapshot["userId"] == "user_1"
        assert snapshot["courseId"] == "course_1"
        assert snapshot["status"] == "ACTIVE"
        assert snapshot["completionPercentage"] == 25.0
        assert snapshot["user"] == {
            "id": "user_1",
            "email": "ada@example.com",
            "name": "Ada Lovelace",
            "image": None,
        }
        assert snapshot["course"] == {
            "id": "course_1",
            "title": "Cloud Basics",
            "slug": "cloud-basics",
        }

    @pytest.mark.asyncio
    async def test_missing_enrollment(self, sql_resource_repo):
        assert await sql_resource_repo.get_enrollment_snapshot("nope") is None

    @pytest.mark.asyncio
    async def test_profile_snapshot(self, sql_resource_repo):
        snapshot = await sql_resource_repo.get_profile_snapshot("user_1")

        assert snapshot["email"] == "ada@example.com"
        assert snapshot["profile"]["bio"] == "Analytical engines"
        assert snapshot["profile"]["timezone"] == "Europe/London"
        assert snapshot["updatedAt"] is not None

    @pytest.mark.asyncio
    async def test_user_snapshot(self, sql_resource_repo):
        snapshot = await sql_resource_repo.get_user_snapshot("user_1")

        assert snapshot["id"] == "user_1"
        assert snapshot["role"] == "STUDENT"
        assert "profile" not in snapshot

    @pytest.mark.asyncio
    async def test_missing_user(self, sql_resource_repo):
        assert await sql_resource_repo.get_profile_snapshot("ghost") is None
        assert await sql_resource_repo.get_user_snapshot("ghost") is None

    @pytest.mark.asyncio
    async def test_progress_snapshot(self, sql_resource_repo):
        snapshot = await sql_resource_repo.get_progress_snapshot("user_1", "course_1")

        assert snapshot["userId"] == "user_1"
        assert snapshot["courseId"] == "course_1"
        assert [row["lessonId"] for row in snapshot["progress"]] == [
            "lesson_1",
            "lesson_2",
        ]
        assert snapshot["progress"][0]["completed"] is True
        assert snapshot["progress"][1]["timeSpent"] == 120
        assert snapshot["progress"][0]["course"]["slug"] == "cloud-basics"

    @pytest.mark.asyncio
    async def test_progress_snapshot_is_never_missing(self, sql_resource_repo):
        snapshot = await sql_resource_repo.get_progress_snapshot("user_1", "course_9")

        assert snapshot["progress"] == []
        assert snapshot["timestamp"] is not None

    @pytest.mark.asyncio
    async def test_snapshot_datetimes_are_utc(self, sql_resource_repo):
        enrollment = await sql_resource_repo.get_enrollment_snapshot("enr_1")
        user = await sql_resource_repo.get_user_snapshot("user_1")
        progress = await sql_resource_repo.get_progress_snapshot("user_1", "course_1")

        assert enrollment["enrolledAt"] == datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        assert enrollment["lastAccessedAt"] is None
        assert user["createdAt"].tzinfo is not None
        assert user["updatedAt"].tzinfo is not None
        assert progress["progress"][0]["timestamp"] == datetime(
            2026, 10, 2, 9, 1, tzinfo=timezone.utc
        )
