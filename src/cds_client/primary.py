"""
Primary store adapter: the relational system of record.

One row per content item in ``content_items``, keyed by item id. The envelope
is stored in columns; the type-specific payload goes into a JSONB column.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from .aclient import AsyncStore
from .errors import StoreError
from .models import ContentEnvelope
from .outcome import WriteOutcome
from .sql import PRIMARY_TABLE

ENVELOPE_FIELDS = {
    "id",
    "type",
    "project_id",
    "user_id",
    "source",
    "title",
    "status",
    "created_at",
}


def system_of_record(item: ContentEnvelope) -> dict:
    """Row shape of ``item`` in the primary store."""
    return {
        "id": item.id,
        "type": item.content_type.value,
        "project_id": item.project_ref,
        "user_id": item.user_id,
        "source": item.source,
        "title": item.title,
        "status": item.status,
        "payload": item.model_dump(mode="json", exclude=ENVELOPE_FIELDS),
        "created_at": item.created_at,
    }


class PrimaryStore(AsyncStore):
    """Idempotent upsert/undo of content items in the system of record."""

    store_name = "primary"

    async def upsert(self, item: ContentEnvelope) -> WriteOutcome:
        """Insert or update the item row; replaying identical content is a no-op."""
        try:
            changed = await self._run(self._upsert_row, PRIMARY_TABLE, system_of_record(item))
        except StoreError as err:
            logger.error(f"Primary upsert failed: id={item.id} code={err.code} error={err}")
            return WriteOutcome.from_error(err, id=item.id)
        if changed:
            logger.debug(f"Primary upsert wrote id={item.id}")
        else:
            logger.debug(f"Primary upsert unchanged id={item.id}")
        return WriteOutcome.ok(item.id)

    async def undo(self, id: str) -> WriteOutcome:
        """Delete the item row; a failed delete is reported with the row still saved."""
        try:
            deleted = await self._run(self._delete_row, PRIMARY_TABLE, id)
        except StoreError as err:
            logger.error(f"Primary undo failed: id={id} code={err.code} error={err}")
            return WriteOutcome.from_error(err, id=id, saved=True)
        if not deleted:
            logger.warning(f"Primary undo found no row for id={id}")
        return WriteOutcome.removed(id)

    async def find_by_id(self, id: str) -> Optional[dict]:
        rows = await self._run(self._select, PRIMARY_TABLE, "id", id)
        return rows[0] if rows else None
