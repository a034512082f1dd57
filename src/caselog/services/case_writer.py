"""Shared validate/save/notify plumbing for services that write a case note."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from sqlalchemy.orm import Session

from caselog.core.errors import NoteLinkageError
from caselog.core.settings import Settings, settings as default_settings
from caselog.db.time import unix_now
from caselog.models import Case, CaseNote
from caselog.models.case import CASE_STATES
from caselog.services.alerts import LoggingNotifier, Notifier, find_user_ids_to_alert
from caselog.services.note_access import NoteLinkageGrant, is_granted

logger = logging.getLogger(__name__)

MESSAGE_MAX_LENGTH = 10_000


class CaseNoteWriter(ABC):
    """Base for services that prepare one case note and persist it.

    Subclasses build ``self.report`` and ``self.comment`` in their constructor
    and implement :meth:`_validate_case` and :meth:`_save`. Nothing is written
    until :meth:`save`; committing is left to the caller's unit of work.
    """

    notification_action = "comment"

    report: Case
    comment: CaseNote

    def __init__(
        self,
        db: Session,
        user_id: int,
        *,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self.db = db
        self.user_id = user_id
        self.settings = settings or default_settings
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock

    def get_comment(self) -> CaseNote:
        return self.comment

    def get_report(self) -> Case:
        return self.report

    def validate(
        self,
        errors: dict[str, str] | None = None,
        access: NoteLinkageGrant | None = None,
    ) -> bool:
        """Collect validation errors into ``errors``; return True if there are none."""
        errors = {} if errors is None else errors
        self._validate_case(errors)
        self._validate_note(errors, access)
        return not errors

    def save(self, access: NoteLinkageGrant | None = None) -> Case:
        """Write the case and note into the session and flush them."""
        if self.comment.has_case_log_link and not is_granted(access):
            raise NoteLinkageError("Case notes linked to a case log require a linkage grant")
        return self._save()

    def send_notifications(self) -> None:
        """Alert interested members about the written case or note."""
        entity = self._notification_entity()
        user_ids = [
            user_id
            for user_id in find_user_ids_to_alert(self.db, entity, self.settings)
            if user_id != self.user_id
        ]
        if not user_ids:
            logger.debug("No one to alert for %s", entity)
            return
        self.notifier.notify(user_ids, entity, self.notification_action)

    def _validate_note(self, errors: dict[str, str], access: NoteLinkageGrant | None) -> None:
        note = self.comment
        if not note.user_id:
            errors["user_id"] = "Please enter a valid user."
        if note.has_case_log_link and not is_granted(access):
            errors["warning_log_id"] = "Case notes created here cannot link to a case log."
        if note.state_change and note.state_change not in CASE_STATES:
            errors["state_change"] = f"Unknown case state '{note.state_change}'."
        if not note.message and not note.has_case_log_link and not note.state_change:
            errors["message"] = "Please enter a valid message."
        elif note.message and len(note.message) > MESSAGE_MAX_LENGTH:
            errors["message"] = (
                f"Please enter a message with no more than {MESSAGE_MAX_LENGTH} characters."
            )

    @abstractmethod
    def _validate_case(self, errors: dict[str, str]) -> None:
        """Add errors about the case itself to ``errors``."""

    @abstractmethod
    def _save(self) -> Case:
        """Write the case and note into the session."""

    def _notification_entity(self) -> Case | CaseNote:
        return self.comment
