from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Optional, TypedDict, TypeVar

import psycopg
from loguru import logger
from psycopg import sql as psql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from . import sql as q
from .errors import StoreError, map_db_error
from .models import StorageHealth
from .utils import elapsed_ms

R = TypeVar("R")


class AsyncStoreConfig(TypedDict, total=False):
    dsn: str
    app_name: str
    statement_timeout_ms: int
    timeout_sec: float
    pool_min: int
    pool_max: int


DEFAULTS: AsyncStoreConfig = {
    "app_name": "content-dual-store",
    "timeout_sec": 5.0,
    "pool_min": 1,
    "pool_max": 10,
}


class AsyncStore:
    """Pooled async PostgreSQL store shared by the primary and secondary adapters.

    Every call is bounded twice: by the server-side ``statement_timeout`` and by
    a client-side ``asyncio.wait_for``. Driver exceptions and timeouts surface
    as StoreError subclasses.
    """

    store_name = "store"

    def __init__(self, cfg: AsyncStoreConfig, *, pool: Optional[AsyncConnectionPool] = None):
        self.cfg: AsyncStoreConfig = {**DEFAULTS, **(cfg or {})}
        if pool is None and "dsn" not in self.cfg:
            raise ValueError("dsn required")
        self.pool = pool or AsyncConnectionPool(
            conninfo=self.cfg["dsn"],
            min_size=self.cfg["pool_min"],
            max_size=self.cfg["pool_max"],
            kwargs={"autocommit": False},
            open=False,
        )
        self.statement_timeout_ms = self.cfg.get("statement_timeout_ms")
        self.timeout_sec = self.cfg.get("timeout_sec")
        self.app_name = self.cfg.get("app_name")

    async def open(self) -> None:
        await self.pool.open()

    async def aclose(self) -> None:
        await self.pool.close()

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    @asynccontextmanager
    async def _conn(self):
        async with self.pool.connection() as conn:
            if self.app_name:
                await conn.execute(
                    psql.SQL("SET application_name = {}").format(psql.Literal(self.app_name))
                )
            if self.statement_timeout_ms:
                await conn.execute(
                    psql.SQL("SET statement_timeout = {}").format(
                        psql.Literal(int(self.statement_timeout_ms))
                    )
                )
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def _run(self, fn: Callable[..., Awaitable[R]], *args: Any, **kwargs: Any) -> R:
        """Await ``fn`` under the client timeout, mapping failures to StoreError."""
        try:
            return await asyncio.wait_for(fn(*args, **kwargs), timeout=self.timeout_sec)
        except StoreError:
            raise
        except (psycopg.Error, asyncio.TimeoutError, OSError) as e:
            raise map_db_error(e) from e

    @staticmethod
    def _prepare(table: str, row: dict) -> dict:
        preset = q.TABLE_PRESETS[table]
        out = {c: row.get(c) for c in preset["cols"]}
        for c in preset.get("json", []):
            if out[c] is not None:
                out[c] = Jsonb(out[c])
        return out

    async def _upsert_row(self, table: str, row: dict) -> int:
        preset = q.TABLE_PRESETS[table]
        stmt = q.upsert_statement(table, preset["cols"], preset["conflict"], preset["update"])
        async with self._conn() as conn, conn.cursor() as cur:
            await cur.execute(stmt, self._prepare(table, row))
            return cur.rowcount

    async def _delete_row(self, table: str, id: str) -> int:
        async with self._conn() as conn, conn.cursor() as cur:
            await cur.execute(q.delete_by_id(table), {"id": id})
            return cur.rowcount

    async def _select(self, table: str, column: str, value: Any, **kw) -> list[dict]:
        async with self._conn() as conn, conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(q.select_where(table, column, **kw), {"value": value})
            return list(await cur.fetchall())

    # ---------- health / meta ----------

    async def _ping(self) -> None:
        async with self._conn() as conn:
            await conn.execute(q.HEALTH)

    async def health(self) -> StorageHealth:
        started = time.perf_counter()
        try:
            await self._run(self._ping)
        except StoreError as err:
            logger.warning(f"{self.store_name} health check failed: {err}")
            return StorageHealth(
                status="unhealthy",
                response_time_ms=elapsed_ms(started),
                is_connected=False,
                error=str(err),
            )
        return StorageHealth(
            status="healthy", response_time_ms=elapsed_ms(started), is_connected=True
        )
