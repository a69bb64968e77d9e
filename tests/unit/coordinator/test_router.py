"""
Unit tests for ContentTypeRouter: destinations, validation, row transforms.
"""

from datetime import datetime, timezone

import pytest

from cds_client import sql as q
from cds_client.models import ContentType, PromptItem, VideoItem
from content_dual_store.coordinator import (
    DESTINATIONS,
    REQUIRED_FIELDS,
    ContentTypeRouter,
    UnsupportedTypeError,
    content_type_of,
)
from content_dual_store.coordinator.router import (
    map_status,
    map_video_status,
    normalize_provider,
)


@pytest.fixture
def router():
    return ContentTypeRouter()


def test_every_type_has_a_distinct_destination():
    assert set(DESTINATIONS) == set(ContentType)
    assert len(set(DESTINATIONS.values())) == len(ContentType)


def test_route(router, scenario_item, video_item):
    assert router.route(scenario_item).destination == "scenarios"
    assert router.route(video_item).destination == "video_assets"
    assert router.route(video_item).required_fields == REQUIRED_FIELDS[ContentType.VIDEO]


def test_unknown_type_raises():
    class Podcast:
        type = "podcast"

    with pytest.raises(UnsupportedTypeError) as exc_info:
        content_type_of(Podcast())
    assert exc_info.value.type_tag == "podcast"


def test_validate_reports_every_missing_field(router):
    item = VideoItem(id="v", provider="luma")
    assert router.validate(item) == ["user_id", "title", "video_url"]


def test_validate_passes_complete_items(router, scenario_item, prompt_item, video_item, story_item):
    for item in (scenario_item, prompt_item, video_item, story_item):
        assert router.validate(item) == []


def test_scenario_row(router, scenario_item):
    row = router.transform(scenario_item)
    assert row["id"] == "scn-1"
    assert row["content"] == scenario_item.story
    assert row["project_id"] == "proj-1"
    assert row["structure"]["acts"] == {"act1": "setup"}
    assert row["structure"]["version"] == "V1"
    assert row["status"] == "active"
    assert row["metadata"]["original_item_id"] == "scn-1"
    assert row["metadata"]["item_type"] == "scenario"


def test_prompt_row(router, prompt_item):
    row = router.transform(prompt_item)
    assert row["keywords"] == ["lantern", "warm"]
    assert row["content"] == row["final_prompt"]
    assert row["metadata"]["keyword_count"] == 2
    # project defaults to the item itself
    assert row["project_id"] == "prm-1"


def test_video_row(router, video_item):
    row = router.transform(video_item)
    assert row["provider"] == "openai"
    assert row["file_url"] == "https://cdn.example.com/v/1.mp4"
    assert row["status"] == "completed"
    assert row["completed_at"] == video_item.created_at
    assert row["duration"] == 8
    assert row["codec"] == "H.264"


def test_story_row(router, story_item):
    row = router.transform(story_item)
    assert row["genre"] == "general"
    assert row["content"].startswith("Once")


def test_rows_fit_destination_tables(router, scenario_item, prompt_item, video_item, story_item):
    for item in (scenario_item, prompt_item, video_item, story_item):
        row = router.transform(item)
        cols = set(q.TABLE_PRESETS[router.route(item).destination]["cols"])
        assert set(row) <= cols


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("draft", "draft"),
        ("ACTIVE", "active"),
        ("failed", "archived"),
        (None, "draft"),
        ("x", "draft"),
    ],
)
def test_map_status(raw, expected):
    assert map_status(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("pending", "queued"), ("active", "processing"), ("error", "failed"), (None, "queued")],
)
def test_map_video_status(raw, expected):
    assert map_video_status(raw) == expected


def test_normalize_provider():
    assert normalize_provider("Runway") == "runways"
    assert normalize_provider("stable") == "stable_video"
    assert normalize_provider(None) == "seedance"
    assert normalize_provider("unknown-vendor") == "seedance"


def test_transform_is_deterministic(router):
    item = PromptItem(id="p", user_id="u", title="T", final_prompt="F")
    assert router.transform(item) == router.transform(item)


def test_video_row_keeps_explicit_completion_time(router, video_item):
    done = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    row = router.transform(video_item.model_copy(update={"completed_at": done}))
    assert row["completed_at"] == done


def test_unfinished_video_has_no_completion_time(router, video_item):
    row = router.transform(video_item.model_copy(update={"video_status": "processing"}))
    assert row["completed_at"] is None


def test_validate_mapping_lists_blank_and_absent_fields(router):
    data = {"type": "video", "id": "v", "title": " ", "provider": "Sora"}
    assert router.validate_mapping(ContentType.VIDEO, data) == ["user_id", "title", "video_url"]
