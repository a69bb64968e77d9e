"""Content type routing.

Maps a content item's type tag to its secondary-store destination and required
fields, validates items before any store is touched, and transforms items into
the row shape each destination expects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from cds_client.models import (
    ContentEnvelope,
    ContentType,
    PromptItem,
    ScenarioItem,
    StoryItem,
    UnsupportedTypeError,
    VideoItem,
)

DESTINATIONS: dict[ContentType, str] = {
    ContentType.SCENARIO: "scenarios",
    ContentType.PROMPT: "prompts",
    ContentType.VIDEO: "video_assets",
    ContentType.STORY: "stories",
}

COMMON_REQUIRED = ("id", "user_id")

REQUIRED_FIELDS: dict[ContentType, tuple[str, ...]] = {
    ContentType.SCENARIO: COMMON_REQUIRED + ("title", "story"),
    ContentType.PROMPT: COMMON_REQUIRED + ("title", "final_prompt"),
    ContentType.VIDEO: COMMON_REQUIRED + ("title", "provider", "video_url"),
    ContentType.STORY: COMMON_REQUIRED + ("title", "content"),
}


@dataclass(frozen=True)
class Route:
    destination: str
    required_fields: tuple[str, ...]


def content_type_of(item: Any) -> ContentType:
    tag = getattr(item, "type", None)
    try:
        return ContentType(tag)
    except ValueError:
        raise UnsupportedTypeError(tag) from None


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


# --- status / provider normalization ---


def map_status(status: str | None) -> str:
    status = (status or "").lower()
    if status in ("draft", "active", "completed"):
        return status
    if status in ("archived", "failed"):
        return "archived"
    return "draft"


def map_video_status(status: str | None) -> str:
    status = (status or "").lower()
    if status in ("queued", "pending"):
        return "queued"
    if status in ("processing", "active"):
        return "processing"
    if status == "completed":
        return "completed"
    if status in ("failed", "error"):
        return "failed"
    return "queued"


_PROVIDER_ALIASES = {
    "seedance": "seedance",
    "openai": "openai",
    "sora": "openai",
    "runways": "runways",
    "runway": "runways",
    "luma": "luma",
    "stable_video": "stable_video",
    "stable": "stable_video",
}


def normalize_provider(provider: str | None) -> str:
    return _PROVIDER_ALIASES.get((provider or "").lower(), "seedance")


# --- per-type transformers ---


def _metadata(item: ContentEnvelope, **extra: Any) -> dict:
    meta = {
        "original_item_id": item.id,
        "source": item.source,
        "item_type": item.content_type.value,
    }
    meta.update({k: v for k, v in extra.items() if v is not None})
    return meta


def _envelope(item: ContentEnvelope) -> dict:
    return {
        "id": item.id,
        "user_id": item.user_id,
        "project_id": item.project_ref,
        "created_at": item.created_at,
    }


def _scenario_row(item: ScenarioItem) -> dict:
    return {
        **_envelope(item),
        "title": item.title,
        "content": item.story,
        "structure": {
            "acts": item.structure,
            "has_four_step": item.has_four_step,
            "has_twelve_shot": item.has_twelve_shot,
            "version": item.version or "V1",
            "author": item.author or "AI Generated",
            "genre": item.genre,
            "tone": item.tone,
            "target": item.target,
            "format": item.format,
            "tempo": item.tempo,
            "development_method": item.development_method,
            "development_intensity": item.development_intensity,
            "duration_sec": item.duration_sec,
        },
        "metadata": _metadata(item),
        "status": map_status(item.status),
    }


def _prompt_row(item: PromptItem) -> dict:
    return {
        **_envelope(item),
        "title": item.title,
        "content": item.final_prompt,
        "final_prompt": item.final_prompt,
        "keywords": list(item.keywords),
        "negative_prompt": item.negative_prompt,
        "visual_style": item.visual_style,
        "mood": item.mood,
        "quality": item.quality,
        "scenario_id": item.scenario_id,
        "metadata": _metadata(
            item,
            keyword_count=len(item.keywords),
            segment_count=item.segment_count,
            version=item.version or "V1",
            director_style=item.director_style,
        ),
    }


def _video_row(item: VideoItem) -> dict:
    provider = normalize_provider(item.provider)
    status = map_video_status(item.video_status or item.status)
    completed_at = (item.completed_at or item.created_at) if status == "completed" else None
    return {
        **_envelope(item),
        "title": item.title,
        "description": f"Video generation - {provider}",
        "file_url": item.video_url,
        "thumbnail_url": item.thumbnail_url,
        "provider": provider,
        "duration": item.duration_sec,
        "aspect_ratio": item.aspect_ratio,
        "codec": item.codec or "H.264",
        "status": status,
        "job_id": item.job_id,
        "operation_id": item.operation_id,
        "completed_at": completed_at,
        "metadata": _metadata(
            item,
            prompt=item.final_prompt,
            ref_prompt_title=item.ref_prompt_title,
            version=item.version or "V1",
        ),
    }


def _story_row(item: StoryItem) -> dict:
    return {
        **_envelope(item),
        "title": item.title,
        "content": item.content,
        "genre": item.genre or "general",
        "tone": item.tone,
        "target_audience": item.target_audience,
        "structure": item.structure,
        "metadata": _metadata(item),
        "status": map_status(item.status),
    }


TRANSFORMERS: dict[ContentType, Callable[[Any], dict]] = {
    ContentType.SCENARIO: _scenario_row,
    ContentType.PROMPT: _prompt_row,
    ContentType.VIDEO: _video_row,
    ContentType.STORY: _story_row,
}


class ContentTypeRouter:
    """Pure mapping from content items to secondary-store destinations."""

    def route(self, item: Any) -> Route:
        ctype = content_type_of(item)
        return Route(DESTINATIONS[ctype], REQUIRED_FIELDS[ctype])

    def validate(self, item: Any) -> list[str]:
        """Every required field that is absent or blank; empty when valid."""
        route = self.route(item)
        return [f for f in route.required_fields if _is_missing(getattr(item, f, None))]

    def transform(self, item: ContentEnvelope) -> dict:
        return TRANSFORMERS[content_type_of(item)](item)

    def validate_mapping(self, content_type: ContentType, data: Mapping[str, Any]) -> list[str]:
        """Like ``validate`` for a raw mapping that did not parse into an item."""
        return [f for f in REQUIRED_FIELDS[content_type] if _is_missing(data.get(f))]
