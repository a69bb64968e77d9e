"""Dual-store write coordinator

Single-item write path across the primary store (system of record) and the
secondary store's per-type tables:
- ContentTypeRouter (destinations, required fields, row transforms)
- PolicyResolver (REQUIRED vs BEST_EFFORT from deployment config)
- DualWriteCoordinator (validate -> primary -> secondary -> rollback/degrade)
- ResultAggregator / DualStorageResult (caller-facing verdict)
- OutcomeBus (in-process reporting of non-successful writes)
"""

from .types import (
    PrimaryAdapter,
    SecondaryAdapter,
    UserRef,
    user_id_of,
    ValidationError,
    RollbackFailureError,
    UnsupportedTypeError,
)
from .policy import ConsistencyPolicy, PolicyResolver, STRICT_ENVIRONMENTS
from .router import (
    ContentTypeRouter,
    Route,
    DESTINATIONS,
    REQUIRED_FIELDS,
    content_type_of,
)
from .result import (
    WriteState,
    SecondaryOutcome,
    DualStorageResult,
    ResultAggregator,
)
from .feedback import OutcomeBus, OutcomeEvent, OutcomeSubscriber
from .write_coordinator import DualWriteCoordinator, CoordinatorHealth

__all__ = [
    # types
    "PrimaryAdapter",
    "SecondaryAdapter",
    "UserRef",
    "user_id_of",
    "ValidationError",
    "RollbackFailureError",
    "UnsupportedTypeError",
    # policy
    "ConsistencyPolicy",
    "PolicyResolver",
    "STRICT_ENVIRONMENTS",
    # routing
    "ContentTypeRouter",
    "Route",
    "DESTINATIONS",
    "REQUIRED_FIELDS",
    "content_type_of",
    # results
    "WriteState",
    "SecondaryOutcome",
    "DualStorageResult",
    "ResultAggregator",
    # runtime
    "DualWriteCoordinator",
    "CoordinatorHealth",
    "OutcomeBus",
    "OutcomeEvent",
    "OutcomeSubscriber",
]
