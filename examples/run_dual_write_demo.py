"""
Dual-store write demo: the three policy scenarios, in process.

A. both stores accept the item      -> SUCCESS
B. secondary fails, policy REQUIRED -> ROLLED_BACK (primary undone)
C. secondary fails, BEST_EFFORT     -> DEGRADED_PARTIAL (primary kept)

In-memory stores stand in for PostgreSQL; no database needed.
"""

import asyncio

from loguru import logger

from cds_client import RetryableError, ScenarioItem, StorageHealth, WriteOutcome
from content_dual_store.coordinator import (
    ConsistencyPolicy,
    DualWriteCoordinator,
    OutcomeBus,
    OutcomeEvent,
    PolicyResolver,
)


class MemoryPrimary:
    def __init__(self):
        self.rows = {}

    async def upsert(self, item):
        self.rows[item.id] = item
        return WriteOutcome.ok(item.id)

    async def undo(self, id):
        self.rows.pop(id, None)
        return WriteOutcome.removed(id)

    async def health(self):
        return StorageHealth(status="healthy", response_time_ms=0.1, is_connected=True)


class FlakySecondary:
    """Secondary store that can be switched into a failing mode."""

    def __init__(self):
        self.tables = {}
        self.down = False

    async def insert(self, destination, row):
        if self.down:
            return WriteOutcome.from_error(RetryableError("index unavailable"), id=row["id"])
        self.tables.setdefault(destination, {})[row["id"]] = row
        return WriteOutcome.ok(row["id"])

    async def get_storage_health(self):
        return StorageHealth(
            status="unhealthy" if self.down else "healthy",
            response_time_ms=0.1,
            is_connected=not self.down,
        )


async def main():
    bus = OutcomeBus()

    async def on_outcome(event: OutcomeEvent):
        logger.warning(
            f"outcome id={event.item_id} state={event.state.value} diverged={event.diverged}"
        )

    bus.subscribe(on_outcome)

    item = ScenarioItem(
        id="scn-demo",
        user_id="user-1",
        title="Night Market",
        story="A vendor finds a map folded into a lantern.",
    )

    for label, policy, down in (
        ("A", ConsistencyPolicy.REQUIRED, False),
        ("B", ConsistencyPolicy.REQUIRED, True),
        ("C", ConsistencyPolicy.BEST_EFFORT, True),
    ):
        primary, secondary = MemoryPrimary(), FlakySecondary()
        secondary.down = down
        coord = DualWriteCoordinator(
            primary,
            secondary,
            policy_resolver=PolicyResolver.fixed(policy),
            outcome_bus=bus,
        )
        result = await coord.save_dual_storage(item)
        logger.info(
            f"[{label}] policy={policy.value} state={result.state.value} "
            f"success={result.success} rollback={result.rollback_executed} "
            f"primary_rows={len(primary.rows)}"
        )
        health = await coord.health()
        logger.info(f"[{label}] health={health.state}")


if __name__ == "__main__":
    asyncio.run(main())
