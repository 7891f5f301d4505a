"""
Metrics instrumentation for booking operations.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking operations by outcome',
    ['operation', 'outcome']  # query/create/update, ok/not_found/forbidden
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking operation latency',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_claim_retries = Counter(
    'booking_claim_retries_total',
    'Room claims retried after a concurrent version bump'
)


def metrics_endpoint() -> Response:
    """Render the default registry in Prometheus text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(operation: str, outcome: str):
    """Record a booking operation. Outcome: ok, not_found, forbidden"""
    booking_attempts.labels(operation=operation, outcome=outcome).inc()


def record_claim_retry():
    booking_claim_retries.inc()
