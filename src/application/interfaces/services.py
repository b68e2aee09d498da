"""
Service interfaces for dependency inversion.
"""

from abc import ABC, abstractmethod

from src.domain.events.sync_event import SyncEvent


class AlertNotifierInterface(ABC):
    """Interface for paging integrations (Sentry, PagerDuty, Slack...)."""

    @abstractmethod
    async def notify(self, event: SyncEvent, error: str) -> None:
        """Send a critical sync failure to the on-call channel."""
        pass
