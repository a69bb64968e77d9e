"""
Outcome feedback for the dual-store write coordinator.

Provides in-process pub/sub for non-successful write outcomes. Subscribers
(alerting, audit logs, dashboards) see every degraded, rolled-back, or failed
write as it happens. The bus only reports; it never repairs anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from loguru import logger

from .result import WriteState


@dataclass(frozen=True)
class OutcomeEvent:
    """Immutable outcome event.

    Emitted by DualWriteCoordinator for every terminal state other than SUCCESS.

    Attributes:
        item_id: Content item id
        content_type: Content type tag (e.g. "scenario")
        state: Terminal write state
        primary_saved: Whether the system of record holds the item afterwards
        secondary_saved: Whether the routed destination holds the item afterwards
        reason: Store-reported error, if any
    """

    item_id: Optional[str]
    content_type: Optional[str]
    state: WriteState
    primary_saved: bool
    secondary_saved: bool
    reason: str | None = None

    @property
    def diverged(self) -> bool:
        """True when exactly one store holds the item."""
        return self.primary_saved != self.secondary_saved


class OutcomeSubscriber(Protocol):
    """Protocol for outcome event subscribers.

    Subscribers must be async callables accepting OutcomeEvent.
    Exceptions are caught and logged to prevent cascade failures.
    """

    async def __call__(self, event: OutcomeEvent) -> None:
        """Handle outcome event."""
        ...


class OutcomeBus:
    """In-process pub/sub bus for write outcomes.

    Supports multiple subscribers with error isolation. One subscriber's
    failure does not affect others. Best-effort delivery.

    Example:
        bus = OutcomeBus()

        async def on_outcome(event: OutcomeEvent):
            if event.diverged:
                await page_on_call(event)

        bus.subscribe(on_outcome)
        coordinator = DualWriteCoordinator(primary, secondary, outcome_bus=bus)
    """

    def __init__(self) -> None:
        self._subs: list[OutcomeSubscriber] = []

    def subscribe(self, callback: OutcomeSubscriber) -> None:
        if callback not in self._subs:
            self._subs.append(callback)
            logger.debug(f"Outcome subscriber added (total: {len(self._subs)})")

    def unsubscribe(self, callback: OutcomeSubscriber) -> None:
        """Remove a subscriber. No-op if it was never subscribed."""
        try:
            self._subs.remove(callback)
            logger.debug(f"Outcome subscriber removed (total: {len(self._subs)})")
        except ValueError:
            pass

    async def publish(self, event: OutcomeEvent) -> None:
        """Publish to all subscribers in registration order."""
        if not self._subs:
            return

        logger.debug(
            f"Publishing outcome: id={event.item_id} type={event.content_type} "
            f"state={event.state.value} diverged={event.diverged}"
        )

        # Iterate over copy to allow unsubscribe during iteration
        for callback in list(self._subs):
            try:
                await callback(event)
            except Exception as exc:
                logger.warning(f"Outcome subscriber error (ignored): {type(exc).__name__}: {exc}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subs)
