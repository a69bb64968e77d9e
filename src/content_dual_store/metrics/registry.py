"""
Dual-store write metrics, registered in the Prometheus global REGISTRY.
Simply import this module at app startup.
"""

from prometheus_client import Counter, Histogram


# --- Coordinator Metrics ---

DUAL_WRITES_TOTAL = Counter(
    "dual_writes_total",
    "Total number of dual-store writes by terminal state",
    ["content_type", "state"],
)

DUAL_WRITE_LATENCY_MS = Histogram(
    "dual_write_latency_ms",
    "Dual-store write latency in milliseconds",
    ["content_type"],
    buckets=[1, 2.5, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000],
)

DUAL_WRITE_ROLLBACKS_TOTAL = Counter(
    "dual_write_rollbacks_total",
    "Primary rollbacks after a secondary failure under the REQUIRED policy",
    ["content_type", "status"],
)

# --- Store Metrics ---

STORE_WRITES_TOTAL = Counter(
    "store_writes_total",
    "Store-level writes performed by the coordinator",
    ["store", "status"],
)


class MetricsRegistry:
    """Centralized metrics registry for coordinator components."""

    dual_writes_total = DUAL_WRITES_TOTAL
    dual_write_latency_ms = DUAL_WRITE_LATENCY_MS
    dual_write_rollbacks_total = DUAL_WRITE_ROLLBACKS_TOTAL
    store_writes_total = STORE_WRITES_TOTAL


metrics_registry = MetricsRegistry()
