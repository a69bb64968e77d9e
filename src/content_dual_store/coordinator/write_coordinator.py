"""Dual-store write coordinator.

Persists one content item into the primary store (system of record) and then
into the secondary store's per-type destination, applying the configured
consistency policy when the secondary write fails:

    INIT -> VALIDATING -> PRIMARY_WRITE -> SECONDARY_WRITE
         -> SUCCESS | DEGRADED_PARTIAL | ROLLED_BACK

Validation and primary failures end early (INVALID, PRIMARY_FAILED). Store
failures are data in the returned DualStorageResult; only a failed rollback
raises (RollbackFailureError).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional

import pydantic
from loguru import logger

from cds_client.errors import map_db_error
from cds_client.models import (
    ContentEnvelope,
    ContentType,
    StorageHealth,
    UnsupportedTypeError,
    parse_content_item,
)
from cds_client.outcome import WriteOutcome
from cds_client.utils import coerce_row

from ..metrics.registry import (
    DUAL_WRITES_TOTAL,
    DUAL_WRITE_LATENCY_MS,
    DUAL_WRITE_ROLLBACKS_TOTAL,
    STORE_WRITES_TOTAL,
)
from .feedback import OutcomeBus, OutcomeEvent
from .policy import ConsistencyPolicy, PolicyResolver
from .result import DualStorageResult, ResultAggregator, WriteState
from .router import ContentTypeRouter, content_type_of
from .types import (
    PrimaryAdapter,
    RollbackFailureError,
    SecondaryAdapter,
    UserRef,
    ValidationError,
    user_id_of,
)


_KNOWN_TYPES = frozenset(t.value for t in ContentType)


@dataclass(frozen=True)
class CoordinatorHealth:
    coordinator_id: str
    state: str  # "healthy" | "degraded" | "unhealthy"
    primary: StorageHealth
    secondary: StorageHealth
    policy: ConsistencyPolicy


class DualWriteCoordinator:
    """Coordinates one logical write across the primary and secondary stores.

    Store adapters are injected and owned by the caller; the coordinator keeps
    no state between calls, so concurrent calls for different items are
    independent. The policy is resolved again on every secondary failure.

    Example:
        coordinator = DualWriteCoordinator(
            primary=PrimaryStore(...),
            secondary=SecondaryStore(...),
            policy_resolver=PolicyResolver(strict=True),
        )
        result = await coordinator.save_dual_storage(item, user)
    """

    def __init__(
        self,
        primary: PrimaryAdapter,
        secondary: SecondaryAdapter,
        *,
        policy_resolver: Optional[PolicyResolver] = None,
        router: Optional[ContentTypeRouter] = None,
        outcome_bus: Optional[OutcomeBus] = None,
        coord_id: str = "dual-store",
    ):
        self._primary = primary
        self._secondary = secondary
        self._policy = policy_resolver or PolicyResolver()
        self._router = router or ContentTypeRouter()
        self._bus = outcome_bus
        self._coord_id = coord_id

    # ---------- entry point ----------

    async def save_dual_storage(self, item: Any, user: UserRef = None) -> DualStorageResult:
        """Persist ``item`` into both stores and report a single verdict.

        Args:
            item: A ContentItem model, or a mapping parsed into one
            user: Owning user (object with ``id``, mapping with "id", or id string)

        Returns:
            DualStorageResult describing both halves of the write

        Raises:
            RollbackFailureError: undo of the primary write failed under REQUIRED
        """
        agg = ResultAggregator()
        state = WriteState.VALIDATING
        logger.debug(f"[{self._coord_id}] {state.value}")

        try:
            item = self._coerce(item, user)
            ctype = content_type_of(item)
        except UnsupportedTypeError as e:
            logger.warning(f"[{self._coord_id}] Rejected item: {e}")
            return await self._finish(agg.invalid(str(e), error_code="unsupported_type"), item)
        except ValidationError as e:
            logger.warning(f"[{self._coord_id}] Rejected item: {e}")
            return await self._finish(agg.invalid(str(e), e.missing_fields), item)

        agg.content_type = ctype
        missing = self._router.validate(item)
        if missing:
            err = ValidationError(ctype.value, missing)
            logger.warning(f"[{self._coord_id}] Rejected item id={item.id}: {err}")
            return await self._finish(agg.invalid(str(err), err.missing_fields), item)

        route = self._router.route(item)
        row = self._router.transform(item)

        state = WriteState.PRIMARY_WRITE
        logger.debug(f"[{self._coord_id}] {state.value} id={item.id} type={ctype.value}")
        primary = await self._call_store("primary", item.id, self._primary.upsert, item)
        if primary.failed or not primary.saved:
            logger.error(
                f"[{self._coord_id}] Primary write failed id={item.id}: {primary.error}; "
                "secondary write skipped"
            )
            return await self._finish(agg.primary_failed(primary), item)

        state = WriteState.SECONDARY_WRITE
        logger.debug(f"[{self._coord_id}] {state.value} id={item.id} table={route.destination}")
        secondary = await self._call_store(
            "secondary", item.id, self._secondary.insert, route.destination, row
        )
        if not secondary.failed and secondary.saved:
            return await self._finish(agg.ok(primary, secondary), item)

        policy = self._policy.resolve(item)
        if policy is ConsistencyPolicy.REQUIRED:
            undo = await self._rollback(item, secondary)
            logger.warning(
                f"[{self._coord_id}] Rolled back id={item.id} after secondary failure "
                f"on {route.destination}: {secondary.error}"
            )
            return await self._finish(agg.rolled_back(undo, secondary), item)

        logger.warning(
            f"[{self._coord_id}] Degraded write id={item.id}: primary kept, "
            f"{route.destination} failed: {secondary.error}"
        )
        return await self._finish(agg.degraded(primary, secondary), item)

    async def save_many(
        self, items: Iterable[Any], user: UserRef = None
    ) -> list[DualStorageResult]:
        """Save independent items concurrently; results keep input order."""
        return list(await asyncio.gather(*(self.save_dual_storage(i, user) for i in items)))

    # ---------- health ----------

    async def health(self) -> CoordinatorHealth:
        """Out-of-band health of both stores; never called during a write."""
        primary, secondary = await asyncio.gather(
            self._primary.health(), self._secondary.get_storage_health()
        )
        if primary.status == "healthy" and secondary.status == "healthy":
            state = "healthy"
        elif primary.status == "healthy":
            state = "degraded"
        else:
            state = "unhealthy"
        return CoordinatorHealth(
            coordinator_id=self._coord_id,
            state=state,
            primary=primary,
            secondary=secondary,
            policy=self._policy.resolve(),
        )

    # ---------- internals ----------

    def _coerce(self, item: Any, user: UserRef) -> ContentEnvelope:
        owner = user_id_of(user)
        if not isinstance(item, ContentEnvelope):
            data = coerce_row(item)
            if owner:
                data["user_id"] = owner
            try:
                item = parse_content_item(data)
            except pydantic.ValidationError as e:
                raise self._parse_failure(data, e) from e
        if owner and owner != item.user_id:
            if item.user_id:
                logger.debug(f"Owner of id={item.id} set to caller {owner} (was {item.user_id})")
            item = item.model_copy(update={"user_id": owner})
        return item

    def _parse_failure(self, data: dict, exc: pydantic.ValidationError) -> ValidationError:
        """Required-field gaps of ``data`` first, then whatever else pydantic rejected."""
        # parse_content_item already vetted the type tag
        ctype = ContentType(data["type"])
        errors = self._router.validate_mapping(ctype, data)
        for err in exc.errors():
            field = ".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0])
            if field in errors:
                continue
            entry = field if err["type"] == "missing" else f"{field}: {err['msg']}"
            if entry not in errors:
                errors.append(entry)
        return ValidationError(ctype.value, errors)

    async def _call_store(
        self,
        store: str,
        item_id: str,
        fn: Callable[..., Awaitable[WriteOutcome]],
        *args: Any,
        saved_on_error: bool = False,
    ) -> WriteOutcome:
        """Run one adapter call, turning anything it raises into a failed outcome."""
        try:
            outcome = await fn(*args)
        except Exception as e:
            err = map_db_error(e)
            logger.error(f"[{self._coord_id}] {store} raised {type(e).__name__}: {e}")
            outcome = WriteOutcome.from_error(err, id=item_id, saved=saved_on_error)
        status = "failure" if outcome.failed else "success"
        STORE_WRITES_TOTAL.labels(store=store, status=status).inc()
        return outcome

    async def _rollback(self, item: ContentEnvelope, secondary: WriteOutcome) -> WriteOutcome:
        # A started undo runs to completion even if the caller is cancelled.
        undo = await asyncio.shield(
            self._call_store(
                "primary_undo", item.id, self._primary.undo, item.id, saved_on_error=True
            )
        )
        ctype = item.content_type.value
        if undo.failed or undo.saved:
            DUAL_WRITE_ROLLBACKS_TOTAL.labels(content_type=ctype, status="failure").inc()
            DUAL_WRITES_TOTAL.labels(content_type=ctype, state="rollback_failed").inc()
            err = RollbackFailureError(item.id, secondary.error, undo.error)
            logger.critical(f"[{self._coord_id}] {err}")
            await self._publish(
                OutcomeEvent(
                    item_id=item.id,
                    content_type=ctype,
                    state=WriteState.ROLLBACK_FAILED,
                    primary_saved=True,
                    secondary_saved=False,
                    reason=undo.error,
                )
            )
            raise err
        DUAL_WRITE_ROLLBACKS_TOTAL.labels(content_type=ctype, status="success").inc()
        return undo

    async def _finish(self, result: DualStorageResult, item: Any) -> DualStorageResult:
        tag = getattr(item, "type", None) if not isinstance(item, Mapping) else item.get("type")
        ctype = tag if tag in _KNOWN_TYPES else "unknown"
        DUAL_WRITES_TOTAL.labels(content_type=ctype, state=result.state.value).inc()
        DUAL_WRITE_LATENCY_MS.labels(content_type=ctype).observe(result.latency_ms)

        item_id = getattr(item, "id", None) if not isinstance(item, Mapping) else item.get("id")
        if result.success:
            logger.info(
                f"[{self._coord_id}] Dual write ok id={item_id} type={ctype} "
                f"latency={result.latency_ms}ms"
            )
        else:
            await self._publish(
                OutcomeEvent(
                    item_id=item_id,
                    content_type=ctype,
                    state=result.state,
                    primary_saved=result.primary_result.saved,
                    secondary_saved=result.secondary_result.saved,
                    reason=result.error,
                )
            )
        return result

    async def _publish(self, event: OutcomeEvent) -> None:
        if self._bus is not None:
            await self._bus.publish(event)
