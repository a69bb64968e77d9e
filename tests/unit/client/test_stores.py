"""
Unit tests for PrimaryStore and SecondaryStore.

The connection pool is mocked; row-level helpers are patched so the tests
exercise outcome mapping, logging paths and the repository contract.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import psycopg
import pytest

from cds_client import PrimaryStore, SecondaryStore
from cds_client import sql as q
from cds_client.errors import ConstraintViolation, MissingFieldError
from cds_client.primary import system_of_record


@pytest.fixture
def primary_store():
    return PrimaryStore({"timeout_sec": 1.0}, pool=MagicMock())


@pytest.fixture
def secondary_store():
    return SecondaryStore({"timeout_sec": 1.0}, pool=MagicMock())


def test_dsn_required_without_pool():
    with pytest.raises(ValueError):
        PrimaryStore({})


def test_system_of_record_row(scenario_item):
    row = system_of_record(scenario_item)
    assert row["type"] == "scenario"
    assert row["project_id"] == "proj-1"
    assert row["payload"]["story"] == scenario_item.story
    assert "id" not in row["payload"]
    assert set(row) == set(q.TABLE_PRESETS[q.PRIMARY_TABLE]["cols"])


@pytest.mark.asyncio
async def test_primary_upsert_ok(primary_store, scenario_item):
    primary_store._upsert_row = AsyncMock(return_value=1)
    outcome = await primary_store.upsert(scenario_item)
    assert outcome.saved is True
    assert outcome.id == "scn-1"
    primary_store._upsert_row.assert_awaited_once()
    assert primary_store._upsert_row.await_args.args[0] == "content_items"


@pytest.mark.asyncio
async def test_primary_upsert_unchanged_is_still_saved(primary_store, scenario_item):
    primary_store._upsert_row = AsyncMock(return_value=0)
    outcome = await primary_store.upsert(scenario_item)
    assert outcome.saved is True
    assert outcome.failed is False


@pytest.mark.asyncio
async def test_primary_upsert_maps_driver_error(primary_store, scenario_item):
    primary_store._upsert_row = AsyncMock(
        side_effect=psycopg.OperationalError("server closed the connection")
    )
    outcome = await primary_store.upsert(scenario_item)
    assert outcome.saved is False
    assert outcome.error_code == "retryable"


@pytest.mark.asyncio
async def test_primary_upsert_times_out(primary_store, scenario_item):
    async def slow(*args):
        await asyncio.sleep(5)

    primary_store.timeout_sec = 0.01
    primary_store._upsert_row = slow
    outcome = await primary_store.upsert(scenario_item)
    assert outcome.error_code == "timeout"


@pytest.mark.asyncio
async def test_primary_undo(primary_store):
    primary_store._delete_row = AsyncMock(return_value=1)
    outcome = await primary_store.undo("scn-1")
    assert outcome.saved is False
    assert outcome.failed is False


@pytest.mark.asyncio
async def test_primary_undo_missing_row_is_not_an_error(primary_store):
    primary_store._delete_row = AsyncMock(return_value=0)
    outcome = await primary_store.undo("scn-1")
    assert outcome.saved is False
    assert outcome.failed is False


@pytest.mark.asyncio
async def test_primary_undo_failure_keeps_saved(primary_store):
    primary_store._delete_row = AsyncMock(side_effect=psycopg.OperationalError("gone"))
    outcome = await primary_store.undo("scn-1")
    assert outcome.saved is True
    assert outcome.failed is True


@pytest.mark.asyncio
async def test_secondary_insert_ok(secondary_store):
    secondary_store._upsert_row = AsyncMock(return_value=1)
    outcome = await secondary_store.insert("stories", {"id": "sty-1", "title": "T"})
    assert outcome.saved is True
    assert secondary_store._upsert_row.await_args.args[0] == "stories"


@pytest.mark.asyncio
async def test_secondary_insert_reports_failure(secondary_store):
    secondary_store._upsert_row = AsyncMock(side_effect=ConstraintViolation("check failed"))
    outcome = await secondary_store.insert("stories", {"id": "sty-1"})
    assert outcome.saved is False
    assert outcome.error == "check failed"
    assert outcome.error_code == "constraint_violation"


@pytest.mark.asyncio
async def test_secondary_save_requires_id(secondary_store):
    with pytest.raises(MissingFieldError):
        await secondary_store.save("stories", {"title": "T"})


@pytest.mark.asyncio
async def test_secondary_rejects_unknown_destination(secondary_store):
    with pytest.raises(ValueError):
        await secondary_store.find_by_id("content_items", "x")
    with pytest.raises(ValueError):
        await secondary_store.insert("podcasts", {"id": "x"})


@pytest.mark.asyncio
async def test_secondary_find(secondary_store):
    secondary_store._select = AsyncMock(return_value=[{"id": "sty-1"}])
    assert await secondary_store.find_by_id("stories", "sty-1") == {"id": "sty-1"}
    assert await secondary_store.find_by_user_id("stories", "user-1") == [{"id": "sty-1"}]
    assert secondary_store._select.await_args.kwargs == {"order_by": "created_at"}


@pytest.mark.asyncio
async def test_secondary_update_rejects_unknown_columns(secondary_store):
    with pytest.raises(ValueError):
        await secondary_store.update("stories", "sty-1", {"payload": {}})


@pytest.mark.asyncio
async def test_secondary_delete(secondary_store):
    secondary_store._delete_row = AsyncMock(return_value=1)
    assert await secondary_store.delete("stories", "sty-1") is True


@pytest.mark.asyncio
async def test_health_unhealthy_on_error(secondary_store):
    secondary_store._ping = AsyncMock(side_effect=psycopg.OperationalError("refused"))
    h = await secondary_store.get_storage_health()
    assert h.status == "unhealthy"
    assert h.is_connected is False
    assert h.error == "refused"


@pytest.mark.asyncio
async def test_health_ok(primary_store):
    primary_store._ping = AsyncMock(return_value=None)
    h = await primary_store.health()
    assert h.status == "healthy"
    assert h.response_time_ms >= 0


def test_presets_consistent():
    for table, preset in q.TABLE_PRESETS.items():
        cols = set(preset["cols"])
        assert "id" in cols, table
        assert set(preset["update"]) <= cols, table
        assert set(preset.get("json", [])) <= cols, table
        assert "id" not in preset["update"], table
