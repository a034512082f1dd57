"""Adapters exposing warnings and reply bans as loggable sanctions.

A case log can be recorded for two unrelated entities. Each gets a
:class:`SanctionSource` adapter, chosen once by :func:`sanction_source_for`;
everything after that talks to the adapter only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from caselog.core.errors import UnsupportedSanctionError
from caselog.core.settings import Settings
from caselog.models import Case, CaseLog, FormalWarning, ThreadReplyBan
from caselog.repositories.case_repo import CaseRepository
from caselog.services.content import content_type_of, get_content_handler, resolve_content

# Fields copied verbatim from a warning onto its case log.
LOGGED_FIELDS = (
    "content_type",
    "content_id",
    "content_title",
    "user_id",
    "warning_id",
    "warning_date",
    "warning_user_id",
    "warning_definition_id",
    "title",
    "notes",
    "points",
    "expiry_date",
    "is_expired",
    "extra_user_group_ids",
)

_MISSING = object()


@dataclass(frozen=True)
class SanctionContext:
    """Values fixed when a case log is started."""

    now: int
    acting_user_id: int | None
    settings: Settings


def copy_logged_fields(source: Any, log: CaseLog) -> None:
    """Copy every logged field present on ``source`` onto ``log``.

    Sources may leave out some fields; those keep the log's defaults.
    """
    for field in LOGGED_FIELDS:
        value = getattr(source, field, _MISSING)
        if value is not _MISSING:
            setattr(log, field, value)


class SanctionSource(ABC):
    """Loggable view of one sanction."""

    def __init__(self, sanction: Any) -> None:
        self.sanction = sanction

    @property
    @abstractmethod
    def label(self) -> str | None:
        """Identifier used to prefix validation failures, if the sanction has one."""

    @abstractmethod
    def populate(self, log: CaseLog, context: SanctionContext) -> None:
        """Fill ``log`` with the sanction's state at this instant."""

    @abstractmethod
    def find_case(self, db: Session) -> Case | None:
        """Return the case already linked to the sanctioned content."""

    @abstractmethod
    def case_content(self, db: Session) -> tuple[str, Any] | None:
        """Return ``(content_type, entity)`` to open a new case for, if any."""

    @abstractmethod
    def opens_case(self, context: SanctionContext) -> bool:
        """Return True if a new case should be opened when none exists."""

    @abstractmethod
    def note_user_id(self, context: SanctionContext) -> int | None:
        """Return the member the case note is written as."""


class FormalWarningSource(SanctionSource):
    sanction: FormalWarning

    @property
    def label(self) -> str | None:
        if self.sanction.warning_id:
            return f"Warning:{self.sanction.warning_id}"
        return None

    def populate(self, log: CaseLog, context: SanctionContext) -> None:
        copy_logged_fields(self.sanction, log)

    def find_case(self, db: Session) -> Case | None:
        return CaseRepository(db).get_for_content(
            self.sanction.content_type, self.sanction.content_id
        )

    def case_content(self, db: Session) -> tuple[str, Any] | None:
        content = resolve_content(db, self.sanction.content_type, self.sanction.content_id)
        if content is None:
            return None
        return self.sanction.content_type, content

    def opens_case(self, context: SanctionContext) -> bool:
        return context.settings.report_new_warnings

    def note_user_id(self, context: SanctionContext) -> int | None:
        return self.sanction.warning_user_id


class ThreadReplyBanSource(SanctionSource):
    sanction: ThreadReplyBan

    @property
    def label(self) -> str | None:
        if self.sanction.thread_reply_ban_id:
            return f"Reply ban:{self.sanction.thread_reply_ban_id}"
        return None

    def _content(self) -> tuple[str, int, Any]:
        # A ban issued from a post is logged against that post, otherwise the member.
        content = self.sanction.post if self.sanction.post is not None else self.sanction.user
        content_type = content_type_of(content)
        return content_type, get_content_handler(content_type).get_id(content), content

    def reply_ban_link(self, settings: Settings) -> str:
        return f"{settings.board_url}/threads/{self.sanction.thread_id}/reply-bans"

    def populate(self, log: CaseLog, context: SanctionContext) -> None:
        ban = self.sanction
        settings = context.settings
        content_type, content_id, _ = self._content()
        post = ban.post

        if post is not None:
            thread = post.thread or ban.thread
            content_title = settings.post_in_thread_title.format(
                title=thread.title if thread is not None else ""
            )
        else:
            content_title = ban.user.username

        log.warning_date = context.now
        log.content_type = content_type
        log.content_id = content_id
        log.content_title = content_title
        log.expiry_date = ban.expiry_date
        # True while the ban still runs; permanent bans (0) are never flagged.
        log.is_expired = ban.expiry_date > context.now
        log.reply_ban_thread_id = ban.thread_id
        log.reply_ban_post_id = content_id if post is not None else 0
        log.user_id = ban.user_id if ban.user_id is not None else ban.user.user_id
        log.warning_user_id = context.acting_user_id
        log.warning_definition_id = None
        log.title = settings.reply_ban_title
        log.notes = self.reply_ban_link(settings) + "\n" + (ban.reason or "")

    def find_case(self, db: Session) -> Case | None:
        content_type, content_id, _ = self._content()
        return CaseRepository(db).get_for_content(content_type, content_id)

    def case_content(self, db: Session) -> tuple[str, Any] | None:
        content_type, _, content = self._content()
        return content_type, content

    def opens_case(self, context: SanctionContext) -> bool:
        return True

    def note_user_id(self, context: SanctionContext) -> int | None:
        return context.acting_user_id


def sanction_source_for(sanction: Any) -> SanctionSource:
    """Return the adapter for ``sanction``; the only place its type is inspected."""
    if isinstance(sanction, FormalWarning):
        return FormalWarningSource(sanction)
    if isinstance(sanction, ThreadReplyBan):
        return ThreadReplyBanSource(sanction)
    raise UnsupportedSanctionError(
        f"Unsupported content type provided: {type(sanction).__name__}"
    )
