"""Create folders table and its lookup indexes.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_INDEXES = {
    "idx_folders_parent_deleted_name": ["parent_id", "deleted_at", "name"],
    "idx_folders_container_deleted_name": ["is_container", "deleted_at", "name"],
    "idx_folders_deleted_name": ["deleted_at", "name"],
    "idx_folders_parent_id": ["parent_id"],
    "idx_folders_name": ["name"],
}


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "folders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("parent_id", sa.Integer, nullable=True),
        sa.Column("is_container", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        schema="public",
    )
    for name, columns in _INDEXES.items():
        op.create_index(name, "folders", columns, schema="public")


def downgrade() -> None:
    """Downgrade schema."""
    for name in reversed(list(_INDEXES)):
        op.drop_index(name, table_name="folders", schema="public")
    op.drop_table("folders", schema="public")
