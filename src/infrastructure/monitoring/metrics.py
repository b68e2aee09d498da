"""
Prometheus metrics for sync delivery monitoring.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

registry = CollectorRegistry()


def get_registry() -> CollectorRegistry:
    """Get the registry all sync metrics are registered on."""
    return registry


SYNC_EVENTS_EMITTED = Counter(
    "sync_events_emitted_total",
    "Total number of sync events emitted",
    ["event_type", "mode"],
    registry=registry,
)

SYNC_EVENTS_COMPLETED = Counter(
    "sync_events_completed_total",
    "Total number of sync events delivered to every endpoint",
    ["event_type"],
    registry=registry,
)

SYNC_EVENTS_FAILED = Counter(
    "sync_events_failed_total",
    "Total number of failed sync event dispatches",
    ["event_type", "terminal"],
    registry=registry,
)

WEBHOOK_DELIVERIES = Counter(
    "webhook_deliveries_total",
    "Total number of webhook calls by outcome",
    ["outcome"],
    registry=registry,
)

WEBHOOK_DELIVERY_DURATION = Histogram(
    "webhook_delivery_duration_seconds",
    "Time spent on a single webhook call",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=registry,
)

SYNC_QUEUE_ITEMS = Gauge(
    "sync_queue_items",
    "Number of items in the sync queue by state",
    ["state"],
    registry=registry,
)


def record_event_emitted(event_type: str, mode: str) -> None:
    """Record an emitted event; mode is ``async`` or ``sync``."""
    SYNC_EVENTS_EMITTED.labels(event_type=event_type, mode=mode).inc()


def record_event_completed(event_type: str) -> None:
    SYNC_EVENTS_COMPLETED.labels(event_type=event_type).inc()


def record_event_failed(event_type: str, terminal: bool) -> None:
    SYNC_EVENTS_FAILED.labels(
        event_type=event_type, terminal="true" if terminal else "false"
    ).inc()


def record_webhook_delivery(outcome: str, duration_seconds: float) -> None:
    """Record one webhook call; outcome is success, status, timeout or network."""
    WEBHOOK_DELIVERIES.labels(outcome=outcome).inc()
    WEBHOOK_DELIVERY_DURATION.observe(duration_seconds)


def record_queue_stats(stats: dict) -> None:
    """Publish a queue stats snapshot to the gauges."""
    for state in ("total", "processing", "pending", "failed"):
        SYNC_QUEUE_ITEMS.labels(state=state).set(stats.get(state, 0))


def get_metrics() -> bytes:
    """Render all metrics in Prometheus exposition format."""
    return generate_latest(get_registry())


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
