"""initial catalog schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-09-14 10:12:41.318204

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

REFERENCE_TABLES = ("author", "artist", "genre", "work_type")

WORK_STATUS = sa.Enum(
    "ONGOING",
    "COMPLETED",
    "HIATUS",
    "DROPPED",
    "SEASON_END",
    "COMING_SOON",
    name="workstatus",
    native_enum=False,
)


def upgrade() -> None:
    for table_name in REFERENCE_TABLES:
        op.create_table(
            table_name,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table_name}"),
            sa.UniqueConstraint("name", name=f"uq_{table_name}_name"),
        )

    op.create_table(
        "work",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("slug", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover_image", sa.String(length=1000), nullable=True),
        sa.Column("status", WORK_STATUS, nullable=False),
        sa.Column("publication_date", sa.String(length=100), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(length=1000), nullable=True),
        sa.Column("serialization", sa.String(length=255), nullable=True),
        sa.Column("author_id", sa.Uuid(), nullable=True),
        sa.Column("artist_id", sa.Uuid(), nullable=True),
        sa.Column("type_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["author.id"], name="fk_work_author_id_author"),
        sa.ForeignKeyConstraint(["artist_id"], ["artist.id"], name="fk_work_artist_id_artist"),
        sa.ForeignKeyConstraint(["type_id"], ["work_type.id"], name="fk_work_type_id_work_type"),
        sa.PrimaryKeyConstraint("id", name="pk_work"),
        sa.UniqueConstraint("slug", name="uq_work_slug"),
        sa.UniqueConstraint("title", name="uq_work_title"),
    )

    op.create_table(
        "work_genre",
        sa.Column("work_id", sa.Uuid(), nullable=False),
        sa.Column("genre_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["genre_id"], ["genre.id"], name="fk_work_genre_genre_id_genre", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["work_id"], ["work.id"], name="fk_work_genre_work_id_work", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("work_id", "genre_id", name="pk_work_genre"),
    )

    op.create_table(
        "work_image",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("work_id", sa.Uuid(), nullable=False),
        sa.Column("image_url", sa.String(length=1000), nullable=False),
        sa.Column("image_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["work_id"], ["work.id"], name="fk_work_image_work_id_work", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_work_image"),
    )

    op.create_table(
        "chapter",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("work_id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(length=500), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("chapter_number", sa.Integer(), nullable=False),
        sa.Column("release_date", sa.String(length=100), nullable=True),
        sa.Column("url", sa.String(length=1000), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["work_id"], ["work.id"], name="fk_chapter_work_id_work", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_chapter"),
        sa.UniqueConstraint("work_id", "chapter_number", name="uq_chapter_work_chapter_number"),
    )

    op.create_table(
        "chapter_image",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chapter_id", sa.Uuid(), nullable=False),
        sa.Column("image_url", sa.String(length=1000), nullable=False),
        sa.Column("page_number", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["chapter_id"],
            ["chapter.id"],
            name="fk_chapter_image_chapter_id_chapter",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_chapter_image"),
    )


def downgrade() -> None:
    op.drop_table("chapter_image")
    op.drop_table("chapter")
    op.drop_table("work_image")
    op.drop_table("work_genre")
    op.drop_table("work")
    for table_name in reversed(REFERENCE_TABLES):
        op.drop_table(table_name)
