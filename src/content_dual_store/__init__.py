"""Dual-store content persistence: coordinator and metrics."""

from .coordinator import (
    ConsistencyPolicy,
    DualStorageResult,
    DualWriteCoordinator,
    OutcomeBus,
    PolicyResolver,
    RollbackFailureError,
    ValidationError,
    WriteState,
)

__all__ = [
    "ConsistencyPolicy",
    "DualStorageResult",
    "DualWriteCoordinator",
    "OutcomeBus",
    "PolicyResolver",
    "RollbackFailureError",
    "ValidationError",
    "WriteState",
]
