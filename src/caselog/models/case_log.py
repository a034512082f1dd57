# src/caselog/models/case_log.py
"""Append-only audit record of a sanction at the moment it was applied or edited."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, Integer, String, Text, event
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapped, mapped_column

from caselog.core.errors import ImmutableCaseLogError
from caselog.db.session import Base

OPERATION_NEW = "new"
OPERATION_EDIT = "edit"
OPERATION_TYPES = (OPERATION_NEW, OPERATION_EDIT)

TITLE_MAX_LENGTH = 255
CONTENT_TITLE_MAX_LENGTH = 255


class CaseLog(Base):
    """Snapshot of a warning or reply ban; later edits produce new rows."""

    __tablename__ = "case_log"

    warning_log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    operation_type: Mapped[str] = mapped_column(String(10), nullable=False)
    # 0 for "new", otherwise the unix time of the edit.
    warning_edit_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    content_type: Mapped[str] = mapped_column(String(25), nullable=False)
    content_id: Mapped[int] = mapped_column(Integer, nullable=False)
    content_title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Copy of the sanction's own fields.
    warning_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    warning_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    warning_user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    warning_definition_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expiry_date: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_expired: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    extra_user_group_ids: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Only populated for reply bans.
    reply_ban_thread_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reply_ban_post_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def validate(self) -> dict[str, str]:
        """Return field-level validation errors keyed by field name."""
        errors: dict[str, str] = {}

        if self.operation_type not in OPERATION_TYPES:
            errors["operation_type"] = (
                f"Operation type must be one of {', '.join(OPERATION_TYPES)}"
            )
        if not self.content_type:
            errors["content_type"] = "Please enter a valid content type."
        if not self.content_id:
            errors["content_id"] = "Please enter a valid content id."
        if self.content_title and len(self.content_title) > CONTENT_TITLE_MAX_LENGTH:
            errors["content_title"] = (
                f"Please enter a value using {CONTENT_TITLE_MAX_LENGTH} characters or fewer."
            )
        if not self.user_id:
            errors["user_id"] = "Please enter a valid user."
        if not self.warning_user_id:
            errors["warning_user_id"] = "Please enter a valid moderator."
        if not self.title:
            errors["title"] = "Please enter a valid title."
        elif len(self.title) > TITLE_MAX_LENGTH:
            errors["title"] = f"Please enter a value using {TITLE_MAX_LENGTH} characters or fewer."
        if self.points is not None and self.points < 0:
            errors["points"] = "Please enter a number that is at least 0."

        return errors

    def __repr__(self) -> str:
        return (
            f"<CaseLog id={self.warning_log_id} {self.operation_type} "
            f"{self.content_type}:{self.content_id}>"
        )


@event.listens_for(CaseLog, "before_update")
def _reject_case_log_update(mapper: Any, connection: Any, target: CaseLog) -> None:
    # Dirty rows without net column changes are skipped by the flush anyway.
    if not any(attr.history.has_changes() for attr in sa_inspect(target).attrs):
        return
    raise ImmutableCaseLogError(
        f"Case log {target.warning_log_id} is append-only; record a new log instead"
    )
