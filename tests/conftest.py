"""
Pytest configuration and fixtures.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.application.interfaces.repositories import ResourceRepositoryInterface
from src.application.services.retry_handler import RetryHandler
from src.application.services.sync_monitor import SyncMonitor
from src.application.services.sync_queue import SyncQueue
from src.application.services.sync_service import SyncConfig, SyncService
from src.application.services.webhook_dispatcher import WebhookDispatcher
from src.config.settings import Settings
from src.domain.events.sync_event import SyncEvent, SyncEventType
from src.infrastructure.database.models import Base
from src.infrastructure.database.repositories.memory_audit_log_repository import (
    InMemoryAuditLogRepository,
)

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

WEBHOOK_A = "https://subscriber-a.example.com/hooks/sync"
WEBHOOK_B = "https://subscriber-b.example.com/hooks/sync"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingHandler:
    """httpx.MockTransport handler answering with scripted status codes per URL."""

    def __init__(self, status_codes: Optional[dict] = None, default_status: int = 200):
        self.status_codes = status_codes or {}
        self.default_status = default_status
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code = self.status_codes.get(str(request.url), self.default_status)
        return httpx.Response(status_code, json={"received": True})

    def urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]


class FlakyAuditLogRepository(InMemoryAuditLogRepository):
    """In-memory audit log whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    async def create(self, record):
        if self.fail_writes:
            raise ConnectionError("audit store unavailable")
        return await super().create(record)


@pytest.fixture
def test_settings():
    """Test settings configuration."""
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL=TEST_DATABASE_URL,
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        AUDIT_LOG_BACKEND="memory",
        SYNC_WEBHOOK_URLS=f"{WEBHOOK_A},{WEBHOOK_B}",
        SYNC_INITIAL_RETRY_DELAY_MS=0,
        SYNC_MAX_RETRY_DELAY_MS=0,
    )


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit_repo():
    """Audit log whose writes can be made to fail."""
    return FlakyAuditLogRepository()


@pytest.fixture
def fast_retry_handler():
    """Retry handler that never sleeps."""
    return RetryHandler(max_attempts=2, base_delay_ms=0, max_delay_ms=0)


@pytest.fixture
def sample_enrollment_snapshot():
    """Enrollment snapshot as loaded from persistence."""
    return {
        "id": "enr_1",
        "userId": "user_1",
        "courseId": "course_1",
        "enrolledAt": datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
        "completionPercentage": 0.0,
        "status": "ACTIVE",
        "source": "purchase",
        "user": {
            "id": "user_1",
            "email": "ada@example.com",
            "name": "Ada Lovelace",
            "image": None,
        },
        "course": {"id": "course_1", "title": "Cloud Basics", "slug": "cloud-basics"},
    }


@pytest.fixture
def mock_resource_repository(sample_enrollment_snapshot):
    """Mock resource repository."""
    mock_repo = AsyncMock(spec=ResourceRepositoryInterface)

    # Mock methods
    mock_repo.get_enrollment_snapshot = AsyncMock(
        return_value=sample_enrollment_snapshot
    )
    mock_repo.get_profile_snapshot = AsyncMock(
        return_value={"id": "user_1", "email": "ada@example.com", "profile": None}
    )
    mock_repo.get_user_snapshot = AsyncMock(
        return_value={"id": "user_1", "email": "ada@example.com", "role": "STUDENT"}
    )
    mock_repo.get_progress_snapshot = AsyncMock(
        return_value={"userId": "user_1", "courseId": "course_1", "progress": []}
    )

    return mock_repo


@pytest.fixture
def make_event() -> Callable[..., SyncEvent]:
    """Factory for sync events."""

    def _make_event(
        event_type: SyncEventType = SyncEventType.ENROLLMENT_CREATED,
        resource_id: str = "enr_1",
        data: Optional[dict] = None,
    ) -> SyncEvent:
        return SyncEvent.create(event_type, resource_id, data or {"id": resource_id})

    return _make_event


@pytest.fixture
def build_sync_service(clock, audit_repo, mock_resource_repository, fast_retry_handler):
    """Factory wiring a sync service around a mock webhook transport."""

    def _build(
        handler=None,
        webhook_urls=(WEBHOOK_A, WEBHOOK_B),
        max_attempts: int = 3,
        dispatch_on_emit: bool = True,
        resources=None,
        repo=None,
    ) -> SyncService:
        config = SyncConfig(
            max_retry_attempts=max_attempts,
            initial_retry_delay_ms=1000,
            max_retry_delay_ms=30000,
            webhook_timeout_ms=1000,
            batch_size=10,
            webhook_urls=list(webhook_urls),
            dispatch_on_emit=dispatch_on_emit,
        )
        queue = SyncQueue(
            max_attempts=max_attempts,
            base_delay_ms=config.initial_retry_delay_ms,
            max_delay_ms=config.max_retry_delay_ms,
            clock=clock,
        )
        dispatcher = WebhookDispatcher(
            config.webhook_urls,
            timeout_ms=config.webhook_timeout_ms,
            transport=httpx.MockTransport(handler or RecordingHandler()),
        )
        monitor = SyncMonitor(
            repo or audit_repo, retry_handler=fast_retry_handler, clock=clock
        )
        return SyncService(
            config=config,
            queue=queue,
            dispatcher=dispatcher,
            monitor=monitor,
            resources=resources or mock_resource_repository,
        )

    return _build


@pytest.fixture
def webhook_urls():
    return WEBHOOK_A, WEBHOOK_B


@pytest.fixture
def recording_handler():
    """Factory for scripted webhook handlers."""
    return RecordingHandler
