"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Purchase metrics
purchase_attempts = Counter(
    'ticket_purchase_attempts_total',
    'Total ticket purchase attempts',
    ['status']  # success, capacity_exceeded, replayed, conflict, not_found, error
)

purchase_latency = Histogram(
    'ticket_purchase_latency_seconds',
    'Ticket purchase latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

tickets_sold = Counter(
    'tickets_sold_total',
    'Tickets issued by successful purchases'
)

# Check-in metrics
verifications = Counter(
    'ticket_verifications_total',
    'Ticket check-in attempts',
    ['result']  # verified, invalid_code, already_used, invalid_state, not_found
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_purchase_attempt(status: str):
    """Record purchase attempt. Status: success, capacity_exceeded, replayed, conflict, not_found"""
    purchase_attempts.labels(status=status).inc()


def record_verification(result: str):
    verifications.labels(result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
