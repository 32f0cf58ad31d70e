"""Prometheus metrics for drawing store operations."""

from prometheus_client import Counter, Histogram

drawing_operation_latency_ms = Histogram(
    "drawing_operation_latency_ms",
    "Drawing operation latency in milliseconds",
    ["operation", "outcome"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000],
)

drawing_operation_errors_total = Counter(
    "drawing_operation_errors_total",
    "Total drawing operation errors",
    ["operation", "reason"],
)

reconciliation_changes_total = Counter(
    "reconciliation_changes_total",
    "Total changes applied by metadata reconciliation",
    ["kind"],
)


class PrometheusDrawingMetrics:
    """Prometheus-based drawing metrics implementation."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record drawing operation latency."""
        drawing_operation_latency_ms.labels(operation=operation, outcome=outcome).observe(
            latency_ms
        )

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment error counter."""
        drawing_operation_errors_total.labels(operation=operation, reason=reason).inc()

    def inc_reconciliation(self, kind: str, amount: int = 1) -> None:
        """Count applied reconciliation changes (renamed, added, removed)."""
        if amount > 0:
            reconciliation_changes_total.labels(kind=kind).inc(amount)
