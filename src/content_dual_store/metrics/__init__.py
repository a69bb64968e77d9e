from .registry import (
    DUAL_WRITES_TOTAL,
    DUAL_WRITE_LATENCY_MS,
    DUAL_WRITE_ROLLBACKS_TOTAL,
    STORE_WRITES_TOTAL,
    MetricsRegistry,
    metrics_registry,
)

__all__ = [
    "DUAL_WRITES_TOTAL",
    "DUAL_WRITE_LATENCY_MS",
    "DUAL_WRITE_ROLLBACKS_TOTAL",
    "STORE_WRITES_TOTAL",
    "MetricsRegistry",
    "metrics_registry",
]
