"""System-of-record table (primary store)

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic
revision = "0001_initial"
down_revision = None
branch_labels = ("primary",)
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
    ]


def upgrade() -> None:
    # System of record: one row per content item, payload as JSONB
    op.create_table(
        "content_items",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("project_id", sa.Text, nullable=False),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("source", sa.String(50), nullable=False, server_default="planning_register"),
        sa.Column("title", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("payload", postgresql.JSONB, nullable=False, server_default="{}"),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('scenario', 'prompt', 'video', 'story')", name="ck_content_items_type"
        ),
    )
    op.create_index("ix_content_items_user", "content_items", ["user_id", "created_at"])
    op.create_index("ix_content_items_project", "content_items", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_content_items_project", table_name="content_items")
    op.drop_index("ix_content_items_user", table_name="content_items")
    op.drop_table("content_items")
