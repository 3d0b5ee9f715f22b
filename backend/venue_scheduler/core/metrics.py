"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Engine metrics
engine_operations = Counter(
    'scheduling_operations_total',
    'Total scheduling engine operations',
    ['operation', 'outcome']  # outcome: success, not_found, conflict, internal
)

engine_latency = Histogram(
    'scheduling_operation_latency_seconds',
    'Scheduling engine operation latency (including lock wait)',
    ['operation'],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
)

# Store metrics
store_operations = Counter(
    'record_store_operations_total',
    'Record store operations',
    ['table', 'operation']  # insert, get, remove, values
)

# Consistency metrics
invariant_violations = Gauge(
    'scheduling_invariant_violations',
    'Invariant violations found by the last consistency audit'
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_engine_operation(operation: str, outcome: str):
    """Record an engine operation. Outcome: success, not_found, conflict, internal"""
    engine_operations.labels(operation=operation, outcome=outcome).inc()


def record_store_operation(table: str, operation: str):
    store_operations.labels(table=table, operation=operation).inc()
