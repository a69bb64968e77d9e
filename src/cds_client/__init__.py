"""
Content Store Client Library

Async adapters for the two content stores: the relational system of record
(PrimaryStore) and the per-content-type query store (SecondaryStore).

Usage:
    from cds_client import PrimaryStore, SecondaryStore, ScenarioItem

    primary = PrimaryStore({"dsn": "postgresql://.../content"})
    secondary = SecondaryStore({"dsn": "postgresql://.../content_index"})
    async with primary, secondary:
        outcome = await primary.upsert(ScenarioItem(id="s1", title="T", story="..."))
"""

from .aclient import AsyncStore, AsyncStoreConfig
from .errors import (
    StoreError,
    RetryableError,
    ConstraintViolation,
    MissingFieldError,
    PermissionDenied,
    TimeoutExceeded,
    map_db_error,
)
from .models import (
    ContentType,
    ContentEnvelope,
    ContentItem,
    ScenarioItem,
    PromptItem,
    VideoItem,
    StoryItem,
    StorageHealth,
    UnsupportedTypeError,
    parse_content_item,
)
from .outcome import WriteOutcome
from .primary import PrimaryStore
from .secondary import SecondaryStore

__version__ = "1.0.0"
__all__ = [
    "AsyncStore",
    "AsyncStoreConfig",
    "PrimaryStore",
    "SecondaryStore",
    "WriteOutcome",
    "StorageHealth",
    "ContentType",
    "ContentEnvelope",
    "ContentItem",
    "ScenarioItem",
    "PromptItem",
    "VideoItem",
    "StoryItem",
    "UnsupportedTypeError",
    "parse_content_item",
    "StoreError",
    "RetryableError",
    "ConstraintViolation",
    "MissingFieldError",
    "PermissionDenied",
    "TimeoutExceeded",
    "map_db_error",
]
