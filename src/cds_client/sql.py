from __future__ import annotations

from typing import Sequence
from psycopg import sql as psql

PRIMARY_TABLE = "content_items"

# Canonical column sets + conflict/update specs (match the Alembic schema)
TABLE_PRESETS: dict[str, dict] = {
    "content_items": {
        "cols": [
            "id",
            "type",
            "project_id",
            "user_id",
            "source",
            "title",
            "status",
            "payload",
            "created_at",
        ],
        "conflict": ["id"],
        "update": ["type", "project_id", "user_id", "source", "title", "status", "payload"],
        "json": ["payload"],
    },
    "scenarios": {
        "cols": [
            "id",
            "title",
            "content",
            "structure",
            "metadata",
            "status",
            "user_id",
            "project_id",
            "created_at",
        ],
        "conflict": ["id"],
        "update": ["title", "content", "structure", "metadata", "status", "user_id", "project_id"],
        "json": ["structure", "metadata"],
    },
    "prompts": {
        "cols": [
            "id",
            "title",
            "content",
            "final_prompt",
            "keywords",
            "negative_prompt",
            "visual_style",
            "mood",
            "quality",
            "metadata",
            "scenario_id",
            "user_id",
            "project_id",
            "created_at",
        ],
        "conflict": ["id"],
        "update": [
            "title",
            "content",
            "final_prompt",
            "keywords",
            "negative_prompt",
            "visual_style",
            "mood",
            "quality",
            "metadata",
            "scenario_id",
            "user_id",
            "project_id",
        ],
        "json": ["metadata"],
    },
    "video_assets": {
        "cols": [
            "id",
            "title",
            "description",
            "file_url",
            "thumbnail_url",
            "provider",
            "duration",
            "aspect_ratio",
            "codec",
            "status",
            "job_id",
            "operation_id",
            "completed_at",
            "metadata",
            "user_id",
            "project_id",
            "created_at",
        ],
        "conflict": ["id"],
        "update": [
            "title",
            "description",
            "file_url",
            "thumbnail_url",
            "provider",
            "duration",
            "aspect_ratio",
            "codec",
            "status",
            "job_id",
            "operation_id",
            "completed_at",
            "metadata",
            "user_id",
            "project_id",
        ],
        "json": ["metadata"],
    },
    "stories": {
        "cols": [
            "id",
            "title",
            "content",
            "genre",
            "tone",
            "target_audience",
            "structure",
            "metadata",
            "status",
            "user_id",
            "project_id",
            "created_at",
        ],
        "conflict": ["id"],
        "update": [
            "title",
            "content",
            "genre",
            "tone",
            "target_audience",
            "structure",
            "metadata",
            "status",
            "user_id",
            "project_id",
        ],
        "json": ["structure", "metadata"],
    },
}

HEALTH = "SELECT 1"


def upsert_statement(
    table: str,
    cols: Sequence[str],
    conflict_cols: Sequence[str],
    update_cols: Sequence[str],
) -> psql.Composed:
    """INSERT ... ON CONFLICT ... DO UPDATE with named parameters (%(name)s).

    The update only fires when a column actually changed (IS DISTINCT FROM), so
    replaying an identical row leaves it untouched and reports rowcount 0.
    """
    ins_cols = psql.SQL(", ").join(psql.Identifier(c) for c in cols)
    ins_vals = psql.SQL(", ").join(psql.Placeholder(c) for c in cols)
    conflict = psql.SQL(", ").join(psql.Identifier(c) for c in conflict_cols)
    setlist = psql.SQL(", ").join(
        psql.SQL("{} = EXCLUDED.{}").format(psql.Identifier(c), psql.Identifier(c))
        for c in update_cols
    )
    current = psql.SQL(", ").join(
        psql.SQL("t.{}").format(psql.Identifier(c)) for c in update_cols
    )
    incoming = psql.SQL(", ").join(
        psql.SQL("EXCLUDED.{}").format(psql.Identifier(c)) for c in update_cols
    )
    return psql.SQL(
        "INSERT INTO {} AS t ({}) VALUES ({}) ON CONFLICT ({}) DO UPDATE SET {}, "
        "updated_at = NOW() WHERE ({}) IS DISTINCT FROM ({})"
    ).format(psql.Identifier(table), ins_cols, ins_vals, conflict, setlist, current, incoming)


def select_where(table: str, column: str, *, order_by: str | None = None) -> psql.Composed:
    q = psql.SQL("SELECT * FROM {} WHERE {} = %(value)s").format(
        psql.Identifier(table), psql.Identifier(column)
    )
    if order_by:
        q = psql.SQL("{} ORDER BY {} DESC").format(q, psql.Identifier(order_by))
    return q


def delete_by_id(table: str) -> psql.Composed:
    return psql.SQL("DELETE FROM {} WHERE id = %(id)s").format(psql.Identifier(table))


def update_by_id(table: str, cols: Sequence[str]) -> psql.Composed:
    setlist = psql.SQL(", ").join(
        psql.SQL("{} = {}").format(psql.Identifier(c), psql.Placeholder(c)) for c in cols
    )
    return psql.SQL("UPDATE {} SET {}, updated_at = NOW() WHERE id = %(id)s").format(
        psql.Identifier(table), setlist
    )
