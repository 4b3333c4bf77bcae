"""create resource tables

Revision ID: 20251019_01
Revises:
Create Date: 2025-10-19 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20251019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "entries",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("slug", sa.String(length=765), nullable=False),
        sa.Column("type", sa.String(length=8), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("slug", name="uq_entries_slug"),
        sa.CheckConstraint("type IN ('link', 'file')", name="ck_entries_type"),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "links",
        sa.Column(
            "entry_id",
            sa.Integer(),
            sa.ForeignKey("entries.id", ondelete="CASCADE", name="fk_links_entry_id_entries"),
            primary_key=True,
            nullable=False,
        ),
        sa.Column("target_url", sa.Text(), nullable=False),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "files",
        sa.Column(
            "entry_id",
            sa.Integer(),
            sa.ForeignKey("entries.id", ondelete="CASCADE", name="fk_files_entry_id_entries"),
            primary_key=True,
            nullable=False,
        ),
        sa.Column("file_uuid", sa.String(length=36), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("mime_type", sa.String(length=127), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("pending", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.UniqueConstraint("file_uuid", name="uq_files_file_uuid"),
        mysql_charset="utf8mb4",
    )


def downgrade() -> None:
    op.drop_table("files")
    op.drop_table("links")
    op.drop_table("entries")
