"""Data access helpers for working with cases, notes and case logs."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from caselog.models import Case, CaseLog, CaseNote

__all__ = ["CaseRepository"]


class CaseRepository:
    """Thin wrapper around database access for case entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, case_id: int) -> Case | None:
        """Return a case by identifier."""
        return self.session.get(Case, case_id)

    def get_for_content(self, content_type: str, content_id: int) -> Case | None:
        """Return the case opened for a piece of content, if any.

        The lookup takes no lock; two concurrent callers can both see no case.
        """
        return self.session.scalars(
            select(Case).where(
                Case.content_type == content_type,
                Case.content_id == content_id,
            )
        ).first()

    def list_notes(self, case_id: int) -> list[CaseNote]:
        """Return the notes of a case in insertion order."""
        return list(
            self.session.scalars(
                select(CaseNote)
                .where(CaseNote.case_id == case_id)
                .order_by(CaseNote.case_note_id)
            )
        )

    def list_logs_for_warning(self, warning_id: int) -> list[CaseLog]:
        """Return every case log recorded for a warning, oldest first."""
        return list(
            self.session.scalars(
                select(CaseLog)
                .where(CaseLog.warning_id == warning_id)
                .order_by(CaseLog.warning_log_id)
            )
        )
