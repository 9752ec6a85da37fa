"""Initial schema (users, notifications, favorites, comments, account events)

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

This migration adds:
1. users table with the pending proof columns of every proof family
2. notifications table (bilingual in-app notifications)
3. favorites table (bookmarked episodes and articles)
4. comments table (threaded comments on episodes and articles)
5. account_events table (account lifecycle audit trail)
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("google_id", sa.String(255), nullable=True, unique=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_token_hash", sa.String(64), nullable=True),
        sa.Column("verification_token_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reset_token_hash", sa.String(64), nullable=True),
        sa.Column("reset_token_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("magic_token_hash", sa.String(64), nullable=True),
        sa.Column("magic_token_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("otp_code_hash", sa.String(64), nullable=True),
        sa.Column("otp_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("otp_purpose", sa.String(20), nullable=True),
        sa.Column("otp_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("otp_verified_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("new_email", sa.String(255), nullable=True),
        sa.Column("email_change_code_hash", sa.String(64), nullable=True),
        sa.Column("email_change_code_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_verification_token_hash", "users", ["verification_token_hash"])
    op.create_index("ix_users_reset_token_hash", "users", ["reset_token_hash"])
    op.create_index("ix_users_magic_token_hash", "users", ["magic_token_hash"])

    # Create notifications table
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("title_en", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("message_en", sa.Text(), nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("related_id", sa.String(100), nullable=True),
        sa.Column("related_type", sa.String(50), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("action_text", sa.String(100), nullable=True),
        sa.Column("action_text_en", sa.String(100), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false(), index=True),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            index=True,
        ),
    )

    # Create favorites table
    op.create_table(
        "favorites",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("content_type", sa.String(20), nullable=False),
        sa.Column("content_id", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint(
            "user_id", "content_type", "content_id", name="uq_favorites_user_content"
        ),
    )

    # Create comments table
    op.create_table(
        "comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("content_type", sa.String(20), nullable=False),
        sa.Column("content_id", sa.String(100), nullable=False, index=True),
        sa.Column(
            "parent_id",
            sa.String(36),
            sa.ForeignKey("comments.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("user_image_url", sa.String(500), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )

    # Create account_events table
    op.create_table(
        "account_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("event_type", sa.String(50), nullable=False, index=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
            index=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("account_events")
    op.drop_table("comments")
    op.drop_table("favorites")
    op.drop_table("notifications")
    op.drop_index("ix_users_magic_token_hash", table_name="users")
    op.drop_index("ix_users_reset_token_hash", table_name="users")
    op.drop_index("ix_users_verification_token_hash", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
