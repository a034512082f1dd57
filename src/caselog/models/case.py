# src/caselog/models/case.py
"""Models tracking moderation cases and the notes attached to them."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caselog.db.session import Base

CASE_STATE_OPEN = "open"
CASE_STATE_ASSIGNED = "assigned"
CASE_STATE_RESOLVED = "resolved"
CASE_STATE_REJECTED = "rejected"

CASE_STATES = (CASE_STATE_OPEN, CASE_STATE_ASSIGNED, CASE_STATE_RESOLVED, CASE_STATE_REJECTED)
CLOSED_CASE_STATES = frozenset({CASE_STATE_RESOLVED, CASE_STATE_REJECTED})


class Case(Base):
    """Moderation case collecting reports and notes about one piece of content."""

    __tablename__ = "moderation_case"
    # One case per piece of content; a second opener for the same content fails on insert.
    __table_args__ = (UniqueConstraint("content_type", "content_id"),)

    case_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content_type: Mapped[str] = mapped_column(String(25), nullable=False)
    content_id: Mapped[int] = mapped_column(Integer, nullable=False)
    content_user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Denormalized snapshot of the content (title, node id, ...).
    content_info: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    first_report_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    report_state: Mapped[str] = mapped_column(
        String(25), nullable=False, default=CASE_STATE_OPEN
    )
    assigned_user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_modified_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_modified_user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Set when the case was resolved as a side effect of a sanction.
    autoreported: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    notes: Mapped[list[CaseNote]] = relationship(
        "CaseNote",
        back_populates="case",
        order_by="CaseNote.case_note_id",
    )

    @property
    def is_closed(self) -> bool:
        """Return True if the case is resolved or rejected."""
        return self.report_state in CLOSED_CASE_STATES


class CaseNote(Base):
    """Comment or state change recorded against a case."""

    __tablename__ = "case_note"

    case_note_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("moderation_case.case_id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    comment_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Empty when the note does not change the case state.
    state_change: Mapped[str] = mapped_column(String(25), nullable=False, default="")
    # True only for the note that carries the original report.
    is_report: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    warning_log_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("case_log.warning_log_id"),
        nullable=True,
    )

    case: Mapped[Case] = relationship("Case", back_populates="notes")

    # Placeholder for warning_log_id while the case log is not yet inserted.
    pending_case_log = None

    @property
    def has_case_log_link(self) -> bool:
        """Return True if the note points at a case log, staged or persisted."""
        return self.warning_log_id is not None or self.pending_case_log is not None
