# src/caselog/models/sanction.py
"""Models for the sanctions a moderator can apply to a member."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caselog.db.session import Base
from caselog.models.post import Post, Thread
from caselog.models.user import User


class FormalWarning(Base):
    """Formal, points-bearing warning issued against a piece of content."""

    __tablename__ = "warning"

    warning_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Content the warning was issued for, e.g. ("post", 12).
    content_type: Mapped[str] = mapped_column(String(25), nullable=False)
    content_id: Mapped[int] = mapped_column(Integer, nullable=False)
    content_title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    # Member being warned.
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user.user_id"), nullable=False)
    warning_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Moderator who issued the warning.
    warning_user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    warning_definition_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 0 = never expires.
    expiry_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_expired: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Comma separated user group ids applied while the warning is active.
    extra_user_group_ids: Mapped[str] = mapped_column(String(255), nullable=False, default="")


class ThreadReplyBan(Base):
    """Time-bounded ban on replying to a thread, optionally tied to one post."""

    __tablename__ = "thread_reply_ban"

    thread_reply_ban_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    thread_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("thread.thread_id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user.user_id"), nullable=False)
    # Post that triggered the ban, if it was issued from a warning on a post.
    post_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("post.post_id"), nullable=True
    )
    ban_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 0 = permanent.
    expiry_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reason: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    thread: Mapped[Thread] = relationship("Thread")
    user: Mapped[User] = relationship("User")
    post: Mapped[Post | None] = relationship("Post")
