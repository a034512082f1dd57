"""Record a sanction as a case log and attach it to the moderation case system.

The creator turns a warning or a reply ban into a :class:`CaseLog`, finds the
case about the same content (or opens one), writes a case note that points at
the log and optionally resolves the case. Everything is validated in one pass
and committed in one transaction.

Typical use::

    creator = CaseLogCreator(db, warning, "new")
    creator.set_auto_resolve(True)
    case_log = creator.save()
    creator.send_notifications()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from caselog.core.errors import CaseLogValidationError, CaseNotificationError
from caselog.core.settings import Settings, settings as default_settings
from caselog.db.deferred import DeferredKey
from caselog.db.history import previous_value
from caselog.db.time import unix_now
from caselog.models import Case, CaseLog, CaseNote
from caselog.models.case import CASE_STATE_RESOLVED, CLOSED_CASE_STATES
from caselog.models.case_log import OPERATION_NEW
from caselog.services.alerts import Notifier
from caselog.services.case_commenter import CaseCommenter
from caselog.services.case_opener import CaseOpener
from caselog.services.case_writer import CaseNoteWriter
from caselog.services.note_access import NoteLinkageGrant, note_linkage_access
from caselog.services.sanction_source import SanctionContext, sanction_source_for

# Configure logger for this module
logger = logging.getLogger(__name__)


def _collect_errors(component: str, errors: Mapping[Any, Any], output: list[str]) -> None:
    """Append ``errors`` to ``output`` as ``"<component>[-<field>]: <message>"``."""
    for key, error in errors.items():
        if isinstance(key, int):
            output.append(f"{component}: {error}")
        else:
            output.append(f"{component}-{key}: {error}")


class CaseLogCreator:
    """Build, validate and persist the case log for one sanction action.

    Construction resolves the sanction type, fills the case log and prepares
    either a :class:`CaseOpener` or a :class:`CaseCommenter`. Nothing touches
    the database for writing until :meth:`save`.
    """

    def __init__(
        self,
        db: Session,
        sanction: Any,
        operation_type: str,
        *,
        acting_user_id: int | None = None,
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        """Initialize the creator and compute the case log defaults.

        Args:
            db: Session whose transaction all writes are committed in.
            sanction: A ``FormalWarning`` or ``ThreadReplyBan``.
            operation_type: ``"new"`` or ``"edit"``.
            acting_user_id: Moderator applying a reply ban; warnings carry their own.
            settings: Settings override, mainly for tests.
            notifier: Alert delivery used by :meth:`send_notifications`.
            clock: Source of the current unix time.

        Raises:
            UnsupportedSanctionError: If ``sanction`` is not a supported type.
        """
        self.source = sanction_source_for(sanction)
        self.db = db
        self.operation_type = operation_type
        self.settings = settings or default_settings
        self.notifier = notifier
        self.clock = clock

        self.auto_resolve = False
        self.auto_resolve_new_reports: bool | None = None

        self.case_opener: CaseOpener | None = None
        self.case_commenter: CaseCommenter | None = None
        self.report: Case | None = None
        self._grant = NoteLinkageGrant()

        self.case_log = CaseLog()
        self._setup_defaults(acting_user_id)

    @property
    def sanction(self) -> Any:
        return self.source.sanction

    def set_auto_resolve(self, auto_resolve: bool) -> None:
        """Resolve the case as part of saving the log."""
        self.auto_resolve = bool(auto_resolve)

    def set_auto_resolve_new_reports(self, auto_resolve: bool | None) -> None:
        """Override :meth:`set_auto_resolve` for cases opened by this creator.

        ``None`` removes the override.
        """
        self.auto_resolve_new_reports = None if auto_resolve is None else bool(auto_resolve)

    def get_case_log(self) -> CaseLog:
        return self.case_log

    def get_report(self) -> Case | None:
        """Return the case the log is attached to, or None if there is none."""
        return self.report

    def get_comment(self) -> CaseNote | None:
        writer = self._writer()
        return writer.get_comment() if writer else None

    def _writer(self) -> CaseNoteWriter | None:
        return self.case_opener or self.case_commenter

    def _setup_defaults(self, acting_user_id: int | None) -> None:
        now = self.clock()
        log = self.case_log
        log.operation_type = self.operation_type
        log.warning_edit_date = 0 if self.operation_type == OPERATION_NEW else now

        context = SanctionContext(now=now, acting_user_id=acting_user_id, settings=self.settings)
        self.source.populate(log, context)

        note_user_id = self.source.note_user_id(context) or 0
        writer_options = {"settings": self.settings, "notifier": self.notifier, "clock": self.clock}

        report = self.source.find_case(self.db)
        if report is not None:
            self.case_commenter = CaseCommenter(self.db, report, note_user_id, **writer_options)
        elif self.source.opens_case(context):
            content = self.source.case_content(self.db)
            if content is not None:
                content_type, entity = content
                self.case_opener = CaseOpener(
                    self.db, content_type, entity, note_user_id, **writer_options
                )
                report = self.case_opener.get_report()
        self.report = report

        comment = self.get_comment()
        if comment is not None:
            # The log has no id yet; the note carries a placeholder until save().
            comment.pending_case_log = DeferredKey(log, "warning_log_id")

    def validate(self) -> None:
        """Validate the case log and the case or note in one pass.

        Raises:
            CaseLogValidationError: Listing every error from every component.
        """
        with note_linkage_access(self._grant) as grant:
            case_log_errors = self.case_log.validate()
            case_errors: dict[str, str] = {}
            note_errors: dict[str, str] = {}
            if self.case_opener is not None:
                self.case_opener.validate(case_errors, grant)
            elif self.case_commenter is not None:
                self.case_commenter.validate(note_errors, grant)

        output: list[str] = []
        _collect_errors("Case log", case_log_errors, output)
        _collect_errors("Case", case_errors, output)
        _collect_errors("Case note", note_errors, output)
        if output:
            raise CaseLogValidationError(output, prefix=self.source.label)

    def save(self) -> CaseLog:
        """Validate, then persist the log, case and note in one transaction.

        Returns:
            The persisted case log.

        Raises:
            CaseLogValidationError: If validation fails; nothing is written.
        """
        self.validate()
        # Read before the log insert flushes pending case changes.
        prior_state, prior_assignee = self._read_prior_case_state()

        with note_linkage_access(self._grant) as grant:
            try:
                # Inserting the log first assigns the id the note is waiting for.
                self.db.add(self.case_log)
                self.db.flush()

                if self.case_opener is not None:
                    self._finalize_new_case(prior_state)
                    self.case_opener.save(grant)
                elif self.case_commenter is not None:
                    self._finalize_case_note(prior_state, prior_assignee)
                    self.case_commenter.save(grant)

                self.db.commit()
            except Exception:
                self.db.rollback()
                logger.warning(
                    "Rolled back case log for %s:%s",
                    self.case_log.content_type,
                    self.case_log.content_id,
                )
                raise

        logger.info(
            "Recorded %s case log %s for %s:%s (case %s)",
            self.case_log.operation_type,
            self.case_log.warning_log_id,
            self.case_log.content_type,
            self.case_log.content_id,
            self.report.case_id if self.report is not None else None,
        )
        return self.case_log

    def _read_prior_case_state(self) -> tuple[str | None, int | None]:
        """Return the case state and assignee as loaded, ignoring unsaved changes."""
        if self.report is None:
            return None, None
        return (
            previous_value(self.report, "report_state"),
            previous_value(self.report, "assigned_user_id"),
        )

    def _link_case_log(self, comment: CaseNote) -> None:
        key = comment.pending_case_log or DeferredKey(self.case_log, "warning_log_id")
        comment.warning_log_id = key.resolve()
        comment.pending_case_log = None
        comment.is_report = False

    def _finalize_new_case(self, prior_state: str | None) -> None:
        auto_resolve = self.auto_resolve
        if self.auto_resolve_new_reports is not None:
            auto_resolve = self.auto_resolve_new_reports

        comment = self.case_opener.get_comment()
        report = self.report = self.case_opener.get_report()
        resolve_state = (
            CASE_STATE_RESOLVED if auto_resolve and prior_state not in CLOSED_CASE_STATES else ""
        )

        self._link_case_log(comment)
        comment.state_change = resolve_state
        if resolve_state:
            report.report_state = resolve_state
            if "autoreported" in sa_inspect(Case).columns:
                report.autoreported = True

    def _finalize_case_note(self, prior_state: str | None, prior_assignee: int | None) -> None:
        comment = self.case_commenter.get_comment()
        report = self.report = self.case_commenter.get_report()

        self._link_case_log(comment)
        if self.auto_resolve and prior_state not in CLOSED_CASE_STATES:
            comment.state_change = CASE_STATE_RESOLVED
            report.report_state = CASE_STATE_RESOLVED
        else:
            comment.state_change = ""
            # Pin the case to what was read, overriding any change made since.
            report.report_state = prior_state
            report.assigned_user_id = prior_assignee

    def send_notifications(self) -> None:
        """Send alerts for the case or note; call only after :meth:`save`.

        Raises:
            CaseNotificationError: If delivery failed. Committed data is kept.
        """
        writer = self._writer()
        if writer is None:
            return
        try:
            writer.send_notifications()
        except Exception as exc:
            logger.error(
                "Failed to send notifications for case log %s: %s",
                self.case_log.warning_log_id,
                exc,
                exc_info=True,
            )
            raise CaseNotificationError(str(exc)) from exc
