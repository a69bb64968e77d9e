"""Per-content-type query tables (secondary store)

Revision ID: 0002_secondary_tables
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0002_secondary_tables"
down_revision = None
branch_labels = ("secondary",)
depends_on = None

TABLES = ("scenarios", "prompts", "video_assets", "stories")


def _owner_columns() -> list[sa.Column]:
    return [
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("project_id", sa.Text, nullable=False),
        sa.Column("metadata", postgresql.JSONB, server_default="{}"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    ]


def upgrade() -> None:
    op.create_table(
        "scenarios",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("structure", postgresql.JSONB, server_default="{}"),
        sa.Column("status", sa.String(20), server_default="draft"),
        *_owner_columns(),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'completed', 'archived')", name="ck_scenarios_status"
        ),
    )

    op.create_table(
        "prompts",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("content", sa.Text),
        sa.Column("final_prompt", sa.Text, nullable=False),
        sa.Column("keywords", postgresql.ARRAY(sa.Text), server_default="{}"),
        sa.Column("negative_prompt", sa.Text),
        sa.Column("visual_style", sa.Text),
        sa.Column("mood", sa.Text),
        sa.Column("quality", sa.Text),
        sa.Column("scenario_id", sa.Text),
        *_owner_columns(),
    )

    op.create_table(
        "video_assets",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("file_url", sa.Text, nullable=False),
        sa.Column("thumbnail_url", sa.Text),
        sa.Column("provider", sa.String(30), nullable=False),
        sa.Column("duration", sa.Integer),
        sa.Column("aspect_ratio", sa.String(10)),
        sa.Column("codec", sa.String(20)),
        sa.Column("status", sa.String(20), server_default="queued"),
        sa.Column("job_id", sa.Text),
        sa.Column("operation_id", sa.Text),
        sa.Column("completed_at", sa.TIMESTAMP(timezone=True)),
        *_owner_columns(),
        sa.CheckConstraint(
            "status IN ('queued', 'processing', 'completed', 'failed')",
            name="ck_video_assets_status",
        ),
        sa.CheckConstraint("duration IS NULL OR duration > 0", name="ck_video_assets_duration"),
    )

    op.create_table(
        "stories",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("genre", sa.Text, server_default="general"),
        sa.Column("tone", sa.Text),
        sa.Column("target_audience", sa.Text),
        sa.Column("structure", postgresql.JSONB, server_default="{}"),
        sa.Column("status", sa.String(20), server_default="draft"),
        *_owner_columns(),
    )

    for table in TABLES:
        op.create_index(f"ix_{table}_user", table, ["user_id", "created_at"])


def downgrade() -> None:
    for table in reversed(TABLES):
        op.drop_index(f"ix_{table}_user", table_name=table)
        op.drop_table(table)
