"""
Secondary store adapter: per-content-type destination tables.

Implements the repository shape (save, find_by_id, find_by_user_id, update,
delete, get_storage_health) against the secondary database. ``insert`` is the
write used by the coordinator; it never raises for store-level failures and
reports them in the returned WriteOutcome instead.
"""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from . import sql as q
from .aclient import AsyncStore
from .errors import MissingFieldError, StoreError
from .models import StorageHealth
from .outcome import WriteOutcome
from .utils import coerce_row


class SecondaryStore(AsyncStore):
    """Repository over the routed destination tables."""

    store_name = "secondary"

    @staticmethod
    def _check_destination(destination: str) -> None:
        if destination not in q.TABLE_PRESETS or destination == q.PRIMARY_TABLE:
            raise ValueError(f"Unknown destination: {destination}")

    # ---------- repository ----------

    async def save(self, destination: str, row: Any) -> str:
        self._check_destination(destination)
        data = coerce_row(row)
        if not data.get("id"):
            raise MissingFieldError(f"{destination}.id is required")
        await self._run(self._upsert_row, destination, data)
        return data["id"]

    async def find_by_id(self, destination: str, id: str) -> Optional[dict]:
        self._check_destination(destination)
        rows = await self._run(self._select, destination, "id", id)
        return rows[0] if rows else None

    async def find_by_user_id(self, destination: str, user_id: str) -> list[dict]:
        self._check_destination(destination)
        return await self._run(
            self._select, destination, "user_id", user_id, order_by="created_at"
        )

    async def update(self, destination: str, id: str, fields: dict) -> bool:
        self._check_destination(destination)
        allowed = q.TABLE_PRESETS[destination]["update"]
        unknown = set(fields) - set(allowed)
        if unknown:
            raise ValueError(f"Cannot update {sorted(unknown)} on {destination}")
        if not fields:
            return False
        params = self._prepare(destination, {**fields, "id": id})
        params = {c: params[c] for c in fields} | {"id": id}
        stmt = q.update_by_id(destination, list(fields))

        async def _exec() -> int:
            async with self._conn() as conn, conn.cursor() as cur:
                await cur.execute(stmt, params)
                return cur.rowcount

        return bool(await self._run(_exec))

    async def delete(self, destination: str, id: str) -> bool:
        self._check_destination(destination)
        return bool(await self._run(self._delete_row, destination, id))

    async def get_storage_health(self) -> StorageHealth:
        return await self.health()

    # ---------- coordinator write ----------

    async def insert(self, destination: str, row: dict) -> WriteOutcome:
        """Write a transformed row to ``destination``, reporting failures as data."""
        row_id = row.get("id")
        try:
            saved_id = await self.save(destination, row)
        except StoreError as err:
            logger.warning(
                f"Secondary insert failed: table={destination} id={row_id} "
                f"code={err.code} error={err}"
            )
            return WriteOutcome.from_error(err, id=row_id)
        logger.debug(f"Secondary insert ok: table={destination} id={saved_id}")
        return WriteOutcome.ok(saved_id)
