"""
Utility functions for the content store client.

Includes time helpers and row coercion shared by both adapters.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return utc_now().isoformat()


def elapsed_ms(started: float) -> float:
    """Milliseconds elapsed since a ``time.perf_counter()`` reading."""
    return round((time.perf_counter() - started) * 1000.0, 3)


def coerce_row(row: object) -> Dict[str, Any]:
    """Dict view of a pydantic model, mapping, or plain object."""
    if hasattr(row, "model_dump"):
        return row.model_dump(mode="python")
    if isinstance(row, dict):
        return dict(row)
    return dict(vars(row))
