"""create_accounts_and_reviews

Revision ID: a1c4e7f20b31
Revises:
Create Date: 2026-10-19 10:00:00.000000

Users, email verification tokens, password reset tokens and reviews.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "a1c4e7f20b31"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=21), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    for table in ("email_verification_tokens", "password_reset_tokens"):
        op.create_table(
            table,
            sa.Column("id", sa.String(length=21), nullable=False),
            sa.Column("owner_id", sa.String(length=21), nullable=False),
            sa.Column("token_hash", sa.String(length=255), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        # One live token per user; expired rows are replaced or pruned
        op.create_index(f"ix_{table}_owner_id", table, ["owner_id"], unique=True)
        op.create_index(f"ix_{table}_expires_at", table, ["expires_at"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.String(length=21), nullable=False),
        sa.Column("owner_id", sa.String(length=21), nullable=False),
        sa.Column("movie_id", sa.String(length=21), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "movie_id", name="uq_reviews_owner_movie"),
    )
    op.create_index("ix_reviews_owner_id", "reviews", ["owner_id"])
    op.create_index("ix_reviews_movie_id", "reviews", ["movie_id"])


def downgrade() -> None:
    op.drop_index("ix_reviews_movie_id", table_name="reviews")
    op.drop_index("ix_reviews_owner_id", table_name="reviews")
    op.drop_table("reviews")
    for table in ("password_reset_tokens", "email_verification_tokens"):
        op.drop_index(f"ix_{table}_expires_at", table_name=table)
        op.drop_index(f"ix_{table}_owner_id", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
