"""Append a note to an existing moderation case."""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from caselog.core.settings import Settings
from caselog.db.time import unix_now
from caselog.models import Case, CaseNote
from caselog.services.alerts import Notifier
from caselog.services.case_writer import CaseNoteWriter

logger = logging.getLogger(__name__)


class CaseCommenter(CaseNoteWriter):
    """Prepare an additional note on a case that is already persisted."""

    def __init__(
        self,
        db: Session,
        case: Case,
        user_id: int,
        *,
        message: str = "",
        state_change: str = "",
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        super().__init__(db, user_id, settings=settings, notifier=notifier, clock=clock)
        self.report = case
        # Linked by key only: attaching to case.notes would drag the note into
        # the session before save().
        self.comment = CaseNote(
            case_id=case.case_id,
            user_id=user_id,
            comment_date=self.clock(),
            message=message,
            state_change=state_change,
            is_report=False,
        )

    def _validate_case(self, errors: dict[str, str]) -> None:
        if self.report.case_id is None:
            errors["case_id"] = "Notes can only be added to an existing case."

    def _save(self) -> Case:
        report = self.report
        comment = self.comment
        report.comment_count = (report.comment_count or 0) + 1
        report.last_modified_date = comment.comment_date
        report.last_modified_user_id = comment.user_id
        if comment.state_change:
            report.report_state = comment.state_change

        # The case is already in the session, so it is flushed with the note.
        self.db.add(comment)
        self.db.flush()
        logger.info("Added note %s to case %s", comment.case_note_id, report.case_id)
        return report
