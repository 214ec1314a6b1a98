"""
Prometheus metrics for store calls, uploads, cache and live join-tab views.
Exposed at /metrics.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

store_operations = Counter(
    'store_operations_total',
    'Data access operations by outcome',
    ['operation', 'outcome']  # ok, surfaced, silenced
)

store_latency = Histogram(
    'store_operation_latency_seconds',
    'Data access operation latency',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

image_uploads = Counter(
    'event_image_uploads_total',
    'Event image uploads to the storage function',
    ['result']  # success, error
)

cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

join_tab_watchers = Gauge(
    'join_tab_live_watchers',
    'Open live join-tab views'
)

join_tab_rechecks = Counter(
    'join_tab_rechecks_total',
    'Scheduled join-tab visibility rechecks',
    ['changed']  # yes, no
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_store_operation(operation: str, outcome: str, seconds: float):
    """Outcome: ok, surfaced, silenced"""
    store_operations.labels(operation=operation, outcome=outcome).inc()
    store_latency.labels(operation=operation).observe(seconds)


def record_image_upload(success: bool):
    image_uploads.labels(result="success" if success else "error").inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()


def record_recheck(changed: bool):
    join_tab_rechecks.labels(changed="yes" if changed else "no").inc()
