"""Apply a submitted warning: log it, optionally reply-ban, and resolve the case."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from caselog.core.errors import (
    CaseLogValidationError,
    CaseNotificationError,
    ReplyBanNotPermittedError,
)
from caselog.core.settings import Settings
from caselog.db.time import unix_now
from caselog.models import Case, CaseLog, FormalWarning, Post, ThreadReplyBan, User
from caselog.models.case_log import OPERATION_NEW
from caselog.repositories.case_repo import CaseRepository
from caselog.schemas.warn import BAN_LENGTH_PERMANENT, WarnSubmitInput
from caselog.services.alerts import Notifier
from caselog.services.case_log_creator import CaseLogCreator

__all__ = [
    "BAN_UNIT_SECONDS",
    "build_reply_ban",
    "can_resolve_report",
    "record_sanction",
    "submit_warning",
]

logger = logging.getLogger(__name__)

# Calendar units are approximated by fixed lengths.
BAN_UNIT_SECONDS = {
    "hours": 3600,
    "days": 86400,
    "weeks": 7 * 86400,
    "months": 30 * 86400,
    "years": 365 * 86400,
}


def can_resolve_report(
    db: Session,
    content_type: str,
    content_id: int,
    can_update: Callable[[Case], bool],
) -> bool:
    """Return True if the moderator may resolve the case about this content.

    Content without a case can always be resolved. The lookup takes no lock,
    so a case opened concurrently is not seen.
    """
    case = CaseRepository(db).get_for_content(content_type, content_id)
    return case is None or can_update(case)


def build_reply_ban(
    db: Session,
    post: Post,
    data: WarnSubmitInput,
    now: int,
) -> ThreadReplyBan | None:
    """Return the reply ban requested in ``data`` for the author of ``post``.

    Returns None when no ban was requested.

    Raises:
        ReplyBanNotPermittedError: If the post is not inside a thread.
        ValueError: If a temporary ban has no usable length.
    """
    if not data.wants_reply_ban:
        return None
    if post.thread is None:
        raise ReplyBanNotPermittedError(f"Post {post.post_id} is not in a thread")

    if data.ban_length == BAN_LENGTH_PERMANENT:
        expiry_date = 0
    else:
        unit_seconds = BAN_UNIT_SECONDS.get(data.ban_length_unit or "")
        if not data.ban_length_value or unit_seconds is None:
            raise ValueError("A temporary reply ban needs a length and a unit")
        expiry_date = now + data.ban_length_value * unit_seconds

    return ThreadReplyBan(
        thread_id=post.thread_id,
        thread=post.thread,
        user_id=post.user_id,
        user=db.get(User, post.user_id),
        post_id=post.post_id,
        post=post,
        ban_date=now,
        expiry_date=expiry_date,
        reason=data.reply_ban_reason,
    )


def record_sanction(
    db: Session,
    sanction: Any,
    operation_type: str,
    *,
    acting_user_id: int | None = None,
    auto_resolve: bool = False,
    auto_resolve_new_reports: bool | None = None,
    settings: Settings | None = None,
    notifier: Notifier | None = None,
    clock: Callable[[], int] = unix_now,
) -> CaseLog:
    """Record a case log for ``sanction`` and alert interested members.

    Alerts are best-effort: a delivery failure is logged and the committed
    case log is returned regardless.
    """
    creator = CaseLogCreator(
        db,
        sanction,
        operation_type,
        acting_user_id=acting_user_id,
        settings=settings,
        notifier=notifier,
        clock=clock,
    )
    creator.set_auto_resolve(auto_resolve)
    creator.set_auto_resolve_new_reports(auto_resolve_new_reports)

    try:
        case_log = creator.save()
    except CaseLogValidationError:
        # Drop the pending sanction rows along with the rejected log.
        db.rollback()
        raise

    try:
        creator.send_notifications()
    except CaseNotificationError as exc:
        logger.warning("Case log %s saved but alerts failed: %s", case_log.warning_log_id, exc)
    return case_log


def submit_warning(
    db: Session,
    warning: FormalWarning,
    content: Any,
    data: WarnSubmitInput,
    *,
    can_update: Callable[[Case], bool],
    settings: Settings | None = None,
    notifier: Notifier | None = None,
    clock: Callable[[], int] = unix_now,
) -> list[CaseLog]:
    """Persist a new warning plus any requested reply ban, logging both.

    Returns:
        The case logs recorded, the warning's first.
    """
    resolve = data.resolve_report and can_resolve_report(
        db, warning.content_type, warning.content_id, can_update
    )

    db.add(warning)
    db.flush()
    logs = [
        record_sanction(
            db,
            warning,
            OPERATION_NEW,
            auto_resolve=resolve,
            settings=settings,
            notifier=notifier,
            clock=clock,
        )
    ]

    if isinstance(content, Post):
        reply_ban = build_reply_ban(db, content, data, clock())
        if reply_ban is not None:
            db.add(reply_ban)
            db.flush()
            logs.append(
                record_sanction(
                    db,
                    reply_ban,
                    OPERATION_NEW,
                    acting_user_id=warning.warning_user_id,
                    auto_resolve=resolve,
                    settings=settings,
                    notifier=notifier,
                    clock=clock,
                )
            )
            logger.info(
                "Reply banned user %s from thread %s until %s",
                reply_ban.user_id,
                reply_ban.thread_id,
                reply_ban.expiry_date or "forever",
            )
    return logs
