"""
Pydantic data models for content items.

A content item is a tagged union over four content types. The common envelope
(id, type, project, source, creation time, owner) is shared; every variant adds
its own payload. Payload fields are optional here: which of them are required
is decided by the content type router, so that a single validation pass can
report every missing field at once.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from .utils import utc_now


class ContentType(str, Enum):
    """Content type tags."""

    SCENARIO = "scenario"
    PROMPT = "prompt"
    VIDEO = "video"
    STORY = "story"


class UnsupportedTypeError(ValueError):
    """Raised for a content type tag outside ContentType."""

    def __init__(self, type_tag: Any):
        super().__init__(f"Unsupported content type: {type_tag!r}")
        self.type_tag = type_tag


VALID_STATUSES = {"draft", "active", "completed", "archived", "failed"}


class ContentEnvelope(BaseModel):
    """Fields shared by every content item."""

    id: str
    project_id: Optional[str] = None
    user_id: Optional[str] = None
    source: str = "planning_register"
    created_at: datetime = Field(default_factory=utc_now)
    title: Optional[str] = None
    description: Optional[str] = None
    status: str = "active"

    @field_validator("id")
    @classmethod
    def _strip_id(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("id must not be blank")
        return v

    @field_validator("status")
    @classmethod
    def _validate_status(cls, v):
        v = v.lower()
        if v not in VALID_STATUSES:
            raise ValueError(f"Invalid status: {v}. Must be one of {VALID_STATUSES}")
        return v

    @property
    def content_type(self) -> ContentType:
        return ContentType(self.type)

    @property
    def project_ref(self) -> str:
        """Owning project, defaulting to the item itself."""
        return self.project_id or self.id


class ScenarioItem(ContentEnvelope):
    """Scenario with story text and structural fields."""

    type: Literal["scenario"] = "scenario"
    story: Optional[str] = None
    genre: Optional[str] = None
    tone: Optional[str] = None
    target: Optional[str] = None
    structure: dict = Field(default_factory=dict)
    has_four_step: bool = True
    has_twelve_shot: bool = False
    version: Optional[str] = None
    author: Optional[str] = None
    format: Optional[str] = None
    tempo: Optional[str] = None
    development_method: Optional[str] = None
    development_intensity: Optional[str] = None
    duration_sec: Optional[int] = None


class PromptItem(ContentEnvelope):
    """Prompt with template text and derived keywords."""

    type: Literal["prompt"] = "prompt"
    final_prompt: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    negative_prompt: Optional[str] = None
    visual_style: Optional[str] = None
    mood: Optional[str] = None
    quality: Optional[str] = None
    scenario_id: Optional[str] = None
    segment_count: int = 1
    version: Optional[str] = None
    director_style: Optional[str] = None

    @field_validator("keywords")
    @classmethod
    def _normalize_keywords(cls, v):
        out: list[str] = []
        for kw in v:
            kw = kw.strip()
            if kw and kw not in out:
                out.append(kw)
        return out


class VideoItem(ContentEnvelope):
    """Generated video with provider, duration, status and media reference."""

    type: Literal["video"] = "video"
    provider: Optional[str] = None
    duration_sec: Optional[int] = None
    video_status: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    aspect_ratio: Optional[str] = None
    codec: Optional[str] = None
    final_prompt: Optional[str] = None
    ref_prompt_title: Optional[str] = None
    job_id: Optional[str] = None
    operation_id: Optional[str] = None
    version: Optional[str] = None
    completed_at: Optional[datetime] = None

    @field_validator("duration_sec")
    @classmethod
    def _validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be positive")
        return v


class StoryItem(ContentEnvelope):
    """Story with narrative text."""

    type: Literal["story"] = "story"
    content: Optional[str] = None
    genre: Optional[str] = None
    tone: Optional[str] = None
    target_audience: Optional[str] = None
    structure: dict = Field(default_factory=dict)


ContentItem = Annotated[
    Union[ScenarioItem, PromptItem, VideoItem, StoryItem],
    Field(discriminator="type"),
]

_content_item_adapter: TypeAdapter = TypeAdapter(ContentItem)


def parse_content_item(data: dict) -> ContentEnvelope:
    """Validate a mapping into the matching ContentItem variant.

    Raises:
        UnsupportedTypeError: when ``data["type"]`` is not a known tag
        pydantic.ValidationError: when envelope or payload values are malformed
    """
    tag = data.get("type")
    if tag not in {t.value for t in ContentType}:
        raise UnsupportedTypeError(tag)
    return _content_item_adapter.validate_python(data)


class StorageHealth(BaseModel):
    """Out-of-band health snapshot of one store."""

    status: Literal["healthy", "unhealthy"]
    response_time_ms: float
    is_connected: bool
    error: Optional[str] = None
