"""Create exercise, equipment and meta tables.

Revision ID: 0001
Revises:
Create Date: 2026-01-14
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _list_column(name: str) -> sa.Column[object]:
    return sa.Column(name, sa.JSON(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "exercise",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("stable_id", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        _list_column("primary_muscles"),
        _list_column("secondary_muscles"),
        _list_column("equipment"),
        _list_column("optional_equipment"),
        _list_column("aliases"),
        _list_column("instructions"),
        _list_column("cautions"),
        _list_column("common_mistakes"),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("pattern", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("youtube_search_query", sa.String(length=255), nullable=True),
        sa.Column("youtube_video_id", sa.String(length=32), nullable=True),
        sa.Column("video_url", sa.String(length=512), nullable=True),
        sa.Column("source", sa.String(length=64), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=True),
        sa.Column("source_key", sa.String(length=255), nullable=True),
        sa.Column("is_custom", sa.Boolean(), nullable=False),
        sa.Column("seed_version", sa.String(length=64), nullable=True),
        _list_column("progressions"),
        _list_column("regressions"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_exercise")),
    )
    with op.batch_alter_table("exercise", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_exercise_stable_id"), ["stable_id"], unique=True)
        batch_op.create_index(batch_op.f("ix_exercise_slug"), ["slug"], unique=False)
        batch_op.create_index(batch_op.f("ix_exercise_source"), ["source"], unique=False)
        batch_op.create_index(batch_op.f("ix_exercise_external_id"), ["external_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_exercise_source_key"), ["source_key"], unique=False)

    op.create_table(
        "equipment",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        _list_column("aliases"),
        sa.Column("is_portable", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_equipment")),
    )

    op.create_table(
        "meta",
        sa.Column("key", sa.String(length=128), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_meta")),
    )


def downgrade() -> None:
    op.drop_table("meta")
    op.drop_table("equipment")
    with op.batch_alter_table("exercise", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_exercise_source_key"))
        batch_op.drop_index(batch_op.f("ix_exercise_external_id"))
        batch_op.drop_index(batch_op.f("ix_exercise_source"))
        batch_op.drop_index(batch_op.f("ix_exercise_slug"))
        batch_op.drop_index(batch_op.f("ix_exercise_stable_id"))
    op.drop_table("exercise")
