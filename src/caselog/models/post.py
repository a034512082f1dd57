# src/caselog/models/post.py
"""SQLAlchemy models for threads and the posts inside them."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caselog.db.session import Base


class Thread(Base):
    """Discussion thread living in a forum node."""

    __tablename__ = "thread"

    thread_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Forum the thread belongs to; carried into case content info.
    node_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user.user_id"), nullable=False)
    title: Mapped[str] = mapped_column(String(150), nullable=False)


class Post(Base):
    """Single message within a thread."""

    __tablename__ = "post"

    post_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("thread.thread_id"),
        nullable=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user.user_id"), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")

    thread: Mapped[Thread | None] = relationship("Thread")
