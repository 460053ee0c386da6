"""Initial schema - users and date-bucketed address book

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("nickname", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    # Address book collections (one per user per day)
    op.create_table(
        "address_book_collections",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_address_book_collections"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_address_book_collections_user_id_users", ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", "label", name="uq_address_book_collections_user_label"),
    )
    op.create_index("ix_address_book_collections_user_id", "address_book_collections", ["user_id"])

    # Address book entries (one per user per device)
    op.create_table(
        "address_book_entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("device_id", sa.String(255), nullable=False),
        sa.Column("hostname", sa.String(255), nullable=True),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("collection_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_address_book_entries"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_address_book_entries_user_id_users", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["collection_id"], ["address_book_collections.id"],
            name="fk_address_book_entries_collection_id_address_book_collections",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", "device_id", name="uq_address_book_entries_user_device"),
    )
    op.create_index("ix_address_book_entries_user_id", "address_book_entries", ["user_id"])
    op.create_index("ix_address_book_entries_collection_id", "address_book_entries", ["collection_id"])


def downgrade() -> None:
    op.drop_table("address_book_entries")
    op.drop_table("address_book_collections")
    op.drop_table("users")
