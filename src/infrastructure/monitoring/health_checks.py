"""
Health check implementations for the application.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from src.config.logging import get_logger

logger = get_logger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class HealthStatus:
    """Outcome of a set of component checks."""

    is_healthy: bool
    status: str
    checks: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "services": self.checks,
        }


class HealthChecker:
    """
    Health checker for application components.

    ``database`` is critical: when it is unhealthy the service is not ready.
    ``sync`` and ``queue`` report delivery health; an unhealthy sync verdict
    degrades the overall status but does not take the service out of rotation.
    """

    def __init__(
        self,
        sync_service,
        database_check: Optional[Callable[[], Awaitable[Dict[str, Any]]]] = None,
    ):
        self.sync_service = sync_service
        self.database_check = database_check
        self.checks: Dict[str, Callable[[], Awaitable[Dict[str, Any]]]] = {}
        if database_check is not None:
            self.checks["database"] = self._check_database
        self.checks["sync"] = self._check_sync
        self.checks["queue"] = self._check_queue
        self.critical_services = ["database"] if database_check is not None else []

    async def run_health_checks(self) -> Dict[str, Dict[str, Any]]:
        """Run all health checks."""
        results = {}

        for check_name, check_func in self.checks.items():
            try:
                results[check_name] = await check_func()
            except Exception as e:
                logger.error("Health check failed", check_name=check_name, error=str(e))
                results[check_name] = {"status": "error", "error": str(e)}

        return results

    async def check_service(self, service_name: str) -> Optional[Dict[str, Any]]:
        """Get health status for a specific service."""
        check_func = self.checks.get(service_name)
        if check_func is None:
            return None

        try:
            return await check_func()
        except Exception as e:
            logger.error("Service health check failed", service=service_name, error=str(e))
            return {"status": "error", "error": str(e)}

    async def get_overall_health(self) -> HealthStatus:
        """Get overall application health status."""
        results = await self.run_health_checks()

        critical_healthy = self._all_healthy(results, self.critical_services)
        all_healthy = self._all_healthy(results, results.keys())

        if not critical_healthy:
            status = "unhealthy"
        elif not all_healthy:
            status = "degraded"
        else:
            status = "healthy"

        return HealthStatus(is_healthy=critical_healthy, status=status, checks=results)

    async def check_readiness(self) -> HealthStatus:
        """Check if the service is ready to receive traffic."""
        results = {}
        for service in self.critical_services:
            results[service] = await self.check_service(service)

        ready = self._all_healthy(results, self.critical_services)
        return HealthStatus(
            is_healthy=ready, status="ready" if ready else "not_ready", checks=results
        )

    async def _check_database(self) -> Dict[str, Any]:
        """Check database health."""
        health_info = await self.database_check()

        if health_info["status"] == "healthy":
            return {
                "status": "healthy",
                "response_time_ms": health_info.get("response_time_ms", 0),
            }

        return {
            "status": "unhealthy",
            "error": health_info.get("error", "Unknown database error"),
        }

    async def _check_sync(self) -> Dict[str, Any]:
        """Check webhook delivery health from the audit trail."""
        health = await self.sync_service.check_sync_health()
        return {"status": "healthy" if health.healthy else "unhealthy", **health.to_dict()}

    async def _check_queue(self) -> Dict[str, Any]:
        """Report queue counters. Exhausted items awaiting audit are unhealthy."""
        stats = self.sync_service.get_queue_stats()
        return {
            "status": "healthy" if stats.failed == 0 else "unhealthy",
            **stats.to_dict(),
        }

    @staticmethod
    def _all_healthy(results: Dict[str, Dict[str, Any]], services) -> bool:
        return all(
            (results.get(service) or {}).get("status") == "healthy"
            for service in services
        )
