"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'eventy_booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, conflict, not_found, error
)

booking_latency = Histogram(
    'eventy_booking_latency_seconds',
    'Booking request latency',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

booking_cancellations = Counter(
    'eventy_booking_cancellations_total',
    'Bookings cancelled by their owners'
)

# Catalog metrics
event_operations = Counter(
    'eventy_event_operations_total',
    'Event catalog writes',
    ['operation']  # create, update, delete
)

# Cache metrics
cache_operations = Counter(
    'eventy_cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get, hit/miss
)

# Upload metrics
uploads = Counter(
    'eventy_image_uploads_total',
    'Event image uploads',
    ['result']  # stored, rejected
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, conflict, not_found, error"""
    booking_attempts.labels(status=status).inc()


def record_booking_cancellation():
    booking_cancellations.inc()


def record_event_operation(operation: str):
    event_operations.labels(operation=operation).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()


def record_upload(stored: bool):
    uploads.labels(result="stored" if stored else "rejected").inc()
