"""case linkage tables

Revision ID: 3b1f0c2a9d41
Revises:
Create Date: 2026-10-19 09:12:44.310518

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3b1f0c2a9d41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create members, content, sanctions, cases and case logs."""
    op.create_table(
        "user",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("is_moderator", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "thread",
        sa.Column("thread_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("node_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=150), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.user_id"]),
        sa.PrimaryKeyConstraint("thread_id"),
    )
    op.create_table(
        "post",
        sa.Column("post_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["thread_id"], ["thread.thread_id"]),
        sa.ForeignKeyConstraint(["user_id"], ["user.user_id"]),
        sa.PrimaryKeyConstraint("post_id"),
    )
    op.create_table(
        "warning",
        sa.Column("warning_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content_type", sa.String(length=25), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("content_title", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("warning_date", sa.Integer(), nullable=False),
        sa.Column("warning_user_id", sa.Integer(), nullable=False),
        sa.Column("warning_definition_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("expiry_date", sa.Integer(), nullable=False),
        sa.Column("is_expired", sa.Boolean(), nullable=False),
        sa.Column("extra_user_group_ids", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.user_id"]),
        sa.PrimaryKeyConstraint("warning_id"),
    )
    op.create_table(
        "thread_reply_ban",
        sa.Column("thread_reply_ban_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=True),
        sa.Column("ban_date", sa.Integer(), nullable=False),
        sa.Column("expiry_date", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.post_id"]),
        sa.ForeignKeyConstraint(["thread_id"], ["thread.thread_id"]),
        sa.ForeignKeyConstraint(["user_id"], ["user.user_id"]),
        sa.PrimaryKeyConstraint("thread_reply_ban_id"),
    )
    op.create_table(
        "case_log",
        sa.Column("warning_log_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("operation_type", sa.String(length=10), nullable=False),
        sa.Column("warning_edit_date", sa.Integer(), nullable=False),
        sa.Column("content_type", sa.String(length=25), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("content_title", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("warning_id", sa.Integer(), nullable=True),
        sa.Column("warning_date", sa.Integer(), nullable=False),
        sa.Column("warning_user_id", sa.Integer(), nullable=False),
        sa.Column("warning_definition_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("expiry_date", sa.Integer(), nullable=False),
        sa.Column("is_expired", sa.Boolean(), nullable=False),
        sa.Column("extra_user_group_ids", sa.String(length=255), nullable=False),
        sa.Column("reply_ban_thread_id", sa.Integer(), nullable=False),
        sa.Column("reply_ban_post_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("warning_log_id"),
    )
    op.create_index("ix_case_log_warning_id", "case_log", ["warning_id"])
    op.create_table(
        "moderation_case",
        sa.Column("case_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content_type", sa.String(length=25), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("content_user_id", sa.Integer(), nullable=False),
        sa.Column("content_info", sa.JSON(), nullable=False),
        sa.Column("first_report_date", sa.Integer(), nullable=False),
        sa.Column("report_state", sa.String(length=25), nullable=False),
        sa.Column("assigned_user_id", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        sa.Column("last_modified_date", sa.Integer(), nullable=False),
        sa.Column("last_modified_user_id", sa.Integer(), nullable=False),
        sa.Column("autoreported", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("case_id"),
        sa.UniqueConstraint("content_type", "content_id"),
    )
    op.create_table(
        "case_note",
        sa.Column("case_note_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("comment_date", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("state_change", sa.String(length=25), nullable=False),
        sa.Column("is_report", sa.Boolean(), nullable=False),
        sa.Column("warning_log_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["case_id"], ["moderation_case.case_id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["warning_log_id"], ["case_log.warning_log_id"]),
        sa.PrimaryKeyConstraint("case_note_id"),
    )


def downgrade() -> None:
    """Drop all case linkage tables."""
    op.drop_table("case_note")
    op.drop_table("moderation_case")
    op.drop_index("ix_case_log_warning_id", table_name="case_log")
    op.drop_table("case_log")
    op.drop_table("thread_reply_ban")
    op.drop_table("warning")
    op.drop_table("post")
    op.drop_table("thread")
    op.drop_table("user")
