"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total batch booking attempts',
    ['status']  # success, conflict, race_conflict, seat_missing
)

bookings_created = Counter(
    'bookings_created_total',
    'Booking rows created',
    ['slot']
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Batch booking latency',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

batch_size = Histogram(
    'booking_batch_dates',
    'Number of dates per booking request',
    buckets=[1, 2, 4, 8, 13, 26, 52]
)

# Availability metrics
availability_checks = Counter(
    'availability_checks_total',
    'Availability predicate evaluations',
    ['result']  # available, booked, blocked, missing_seat
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, conflict, race_conflict, seat_missing"""
    booking_attempts.labels(status=status).inc()


def record_availability(result: str):
    availability_checks.labels(result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
