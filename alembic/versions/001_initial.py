"""Initial schema – users, roles, moderation status/actions, reports, mutes, memes.

Revision ID: 001
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    # -- users --
    op.create_table(
        "users",
        sa.Column("user_id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        _created_at(),
    )

    # -- user_roles --
    op.create_table(
        "user_roles",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, unique=True, nullable=False),
        sa.Column("role", sa.String(10), nullable=False),
        sa.Column("assigned_by", sa.BigInteger, nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_user_roles_role", "user_roles", ["role"])

    # -- moderation_status --
    op.create_table(
        "moderation_status",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, unique=True, nullable=False),
        sa.Column("warning_count", sa.Integer, server_default="0", nullable=False),
        sa.Column("strike_count", sa.Integer, server_default="0", nullable=False),
        sa.Column("is_muted", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("is_suspended", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("suspended_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_warning_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_strike_at", sa.DateTime(timezone=True), nullable=True),
    )

    # -- moderation_actions --
    op.create_table(
        "moderation_actions",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, nullable=False),
        sa.Column("moderator_id", sa.BigInteger, nullable=False),
        sa.Column("action_type", sa.String(10), nullable=False),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("related_report_id", sa.BigInteger, nullable=True),
        sa.Column("related_report_type", sa.String(10), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column("seen_by_user", sa.Boolean, nullable=True),
        _created_at(),
    )
    op.create_index("idx_mod_action_user", "moderation_actions", ["user_id"])
    op.create_index("idx_mod_action_user_active", "moderation_actions", ["user_id", "is_active"])
    op.create_index("idx_mod_action_type", "moderation_actions", ["action_type"])

    # -- content_reports --
    op.create_table(
        "content_reports",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("reporter_id", sa.BigInteger, nullable=False),
        sa.Column("target_content_id", sa.BigInteger, nullable=False),
        sa.Column("reason", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(10), server_default="pending", nullable=False),
        sa.Column("moderator_id", sa.BigInteger, nullable=True),
        sa.Column("moderator_notes", sa.Text, nullable=True),
        sa.Column("action_taken", sa.String(20), nullable=True),
        _created_at(),
        sa.UniqueConstraint(
            "reporter_id", "target_content_id", name="uq_content_report_reporter_target"
        ),
    )
    op.create_index("idx_content_report_status", "content_reports", ["status"])
    op.create_index("idx_content_report_target", "content_reports", ["target_content_id"])

    # -- user_reports --
    op.create_table(
        "user_reports",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("reporter_id", sa.BigInteger, nullable=False),
        sa.Column("reported_user_id", sa.BigInteger, nullable=False),
        sa.Column("reason", sa.String(30), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(10), server_default="pending", nullable=False),
        sa.Column("moderator_id", sa.BigInteger, nullable=True),
        sa.Column("moderator_notes", sa.Text, nullable=True),
        sa.Column("action_taken", sa.String(20), nullable=True),
        _created_at(),
        sa.UniqueConstraint(
            "reporter_id", "reported_user_id", name="uq_user_report_reporter_target"
        ),
    )
    op.create_index("idx_user_report_status", "user_reports", ["status"])
    op.create_index("idx_user_report_reported", "user_reports", ["reported_user_id"])

    # -- muted_users --
    op.create_table(
        "muted_users",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, nullable=False),
        sa.Column("muted_user_id", sa.BigInteger, nullable=False),
        _created_at(),
        sa.UniqueConstraint("user_id", "muted_user_id", name="uq_muted_users_pair"),
    )

    # -- memes / comments --
    op.create_table(
        "memes",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("author_id", sa.BigInteger, nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("file_id", sa.String(255), nullable=False),
        sa.Column("tags", sa.Text, server_default="", nullable=False),
        sa.Column("comments", sa.Integer, server_default="0", nullable=False),
        _created_at(),
    )
    op.create_index("idx_memes_author_created", "memes", ["author_id", "created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("meme_id", sa.BigInteger, nullable=False),
        sa.Column("author_id", sa.BigInteger, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("parent_id", sa.BigInteger, nullable=True),
        _created_at(),
    )
    op.create_index("idx_comments_meme", "comments", ["meme_id"])
    op.create_index("idx_comments_parent", "comments", ["parent_id"])


def downgrade() -> None:
    op.drop_table("comments")
    op.drop_table("memes")
    op.drop_table("muted_users")
    op.drop_table("user_reports")
    op.drop_table("content_reports")
    op.drop_table("moderation_actions")
    op.drop_table("moderation_status")
    op.drop_table("user_roles")
    op.drop_table("users")
