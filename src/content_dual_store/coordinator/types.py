from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from cds_client.models import ContentEnvelope, StorageHealth, UnsupportedTypeError
from cds_client.outcome import WriteOutcome


@runtime_checkable
class PrimaryAdapter(Protocol):
    """System-of-record store: idempotent upsert and compensating undo."""

    async def upsert(self, item: ContentEnvelope) -> WriteOutcome: ...

    async def undo(self, id: str) -> WriteOutcome: ...

    async def health(self) -> StorageHealth: ...


@runtime_checkable
class SecondaryAdapter(Protocol):
    """Per-type query store; failures come back as WriteOutcome.error."""

    async def insert(self, destination: str, row: dict) -> WriteOutcome: ...

    async def get_storage_health(self) -> StorageHealth: ...


class HasId(Protocol):
    id: str


UserRef = Union[HasId, Mapping[str, Any], str, None]


def user_id_of(user: UserRef) -> Optional[str]:
    """Extract the id from a user object, mapping, or bare id string."""
    if user is None:
        return None
    if isinstance(user, str):
        return user
    if isinstance(user, Mapping):
        return user.get("id")
    return getattr(user, "id", None)


class ValidationError(ValueError):
    """Required fields are missing for the declared content type."""

    def __init__(self, content_type: str, missing_fields: Sequence[str]):
        self.content_type = content_type
        self.missing_fields = tuple(missing_fields)
        super().__init__(
            f"{content_type} item is missing required fields: {', '.join(self.missing_fields)}"
        )


class RollbackFailureError(RuntimeError):
    """Undo of the primary write failed after a secondary failure under REQUIRED.

    Primary and secondary now disagree and nothing will fix it automatically.
    """

    def __init__(self, item_id: str, secondary_error: Optional[str], undo_error: Optional[str]):
        self.item_id = item_id
        self.secondary_error = secondary_error
        self.undo_error = undo_error
        super().__init__(
            f"Rollback of primary write failed for id={item_id}: {undo_error} "
            f"(secondary failure: {secondary_error}); manual cleanup required"
        )


__all__ = [
    "PrimaryAdapter",
    "SecondaryAdapter",
    "UserRef",
    "user_id_of",
    "ValidationError",
    "RollbackFailureError",
    "UnsupportedTypeError",
]
