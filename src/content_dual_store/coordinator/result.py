"""Caller-facing result of a dual-store write and the aggregator that builds it."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from cds_client.models import ContentType
from cds_client.outcome import WriteOutcome
from cds_client.utils import elapsed_ms, utc_timestamp

from .policy import ConsistencyPolicy


class WriteState(str, Enum):
    """States of one save_dual_storage call."""

    INIT = "init"
    VALIDATING = "validating"
    PRIMARY_WRITE = "primary_write"
    SECONDARY_WRITE = "secondary_write"
    # terminal
    SUCCESS = "success"
    DEGRADED_PARTIAL = "degraded_partial"
    ROLLED_BACK = "rolled_back"
    INVALID = "invalid"
    PRIMARY_FAILED = "primary_failed"
    ROLLBACK_FAILED = "rollback_failed"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset(
    {
        WriteState.SUCCESS,
        WriteState.DEGRADED_PARTIAL,
        WriteState.ROLLED_BACK,
        WriteState.INVALID,
        WriteState.PRIMARY_FAILED,
        WriteState.ROLLBACK_FAILED,
    }
)


def tables_for(content_type: Optional[ContentType], saved: bool) -> Mapping[ContentType, bool]:
    """One entry per content type; only ``content_type`` may be True."""
    return MappingProxyType({t: saved and t is content_type for t in ContentType})


@dataclass(frozen=True)
class SecondaryOutcome(WriteOutcome):
    tables: Mapping[ContentType, bool] = field(default_factory=lambda: tables_for(None, False))

    @classmethod
    def of(cls, outcome: WriteOutcome, content_type: Optional[ContentType]) -> "SecondaryOutcome":
        return cls(
            saved=outcome.saved,
            id=outcome.id,
            error=outcome.error,
            error_code=outcome.error_code,
            tables=tables_for(content_type, outcome.saved),
        )

    def as_dict(self) -> dict:
        out = super().as_dict()
        out["tables"] = {t.value: v for t, v in self.tables.items()}
        return out


NOT_ATTEMPTED = WriteOutcome(saved=False)


@dataclass(frozen=True)
class DualStorageResult:
    """Outcome of one dual-store write.

    ``success`` is true only when both stores saved the item.
    """

    success: bool
    primary_result: WriteOutcome
    secondary_result: SecondaryOutcome
    rollback_executed: bool
    latency_ms: float
    state: WriteState
    policy: Optional[ConsistencyPolicy] = None
    error: Optional[str] = None
    validation_errors: tuple[str, ...] = ()
    timestamp: str = field(default_factory=utc_timestamp)

    def as_dict(self) -> dict:
        out = {
            "success": self.success,
            "primaryResult": self.primary_result.as_dict(),
            "secondaryResult": self.secondary_result.as_dict(),
            "rollbackExecuted": self.rollback_executed,
            "latencyMs": self.latency_ms,
            "state": self.state.value,
            "policy": self.policy.value if self.policy else None,
            "timestamp": self.timestamp,
        }
        if self.error is not None:
            out["error"] = self.error
        if self.validation_errors:
            out["validationErrors"] = list(self.validation_errors)
        return out


class ResultAggregator:
    """Builds DualStorageResult values, stamping latency from its own creation."""

    def __init__(self, content_type: Optional[ContentType] = None):
        self._started = time.perf_counter()
        self.content_type = content_type

    def _build(self, **kw) -> DualStorageResult:
        return DualStorageResult(latency_ms=elapsed_ms(self._started), **kw)

    def _secondary(self, outcome: WriteOutcome) -> SecondaryOutcome:
        return SecondaryOutcome.of(outcome, self.content_type)

    def ok(self, primary: WriteOutcome, secondary: WriteOutcome) -> DualStorageResult:
        return self._build(
            success=True,
            primary_result=primary,
            secondary_result=self._secondary(secondary),
            rollback_executed=False,
            state=WriteState.SUCCESS,
        )

    def invalid(
        self, error: str, missing_fields: tuple[str, ...] = (), error_code: str = "validation"
    ) -> DualStorageResult:
        return self._build(
            success=False,
            primary_result=NOT_ATTEMPTED,
            secondary_result=self._secondary(NOT_ATTEMPTED),
            rollback_executed=False,
            state=WriteState.INVALID,
            error=f"{error_code}: {error}",
            validation_errors=tuple(missing_fields),
        )

    def primary_failed(self, primary: WriteOutcome) -> DualStorageResult:
        return self._build(
            success=False,
            primary_result=primary,
            secondary_result=self._secondary(NOT_ATTEMPTED),
            rollback_executed=False,
            state=WriteState.PRIMARY_FAILED,
            error=primary.error,
        )

    def degraded(self, primary: WriteOutcome, secondary: WriteOutcome) -> DualStorageResult:
        return self._build(
            success=False,
            primary_result=primary,
            secondary_result=self._secondary(secondary),
            rollback_executed=False,
            state=WriteState.DEGRADED_PARTIAL,
            policy=ConsistencyPolicy.BEST_EFFORT,
            error=secondary.error,
        )

    def rolled_back(self, undo: WriteOutcome, secondary: WriteOutcome) -> DualStorageResult:
        return self._build(
            success=False,
            primary_result=undo,
            secondary_result=self._secondary(secondary),
            rollback_executed=True,
            state=WriteState.ROLLED_BACK,
            policy=ConsistencyPolicy.REQUIRED,
            error=secondary.error,
        )
