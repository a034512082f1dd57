"""Alert recipients for case activity and the boundary to alert delivery."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from caselog.core.settings import Settings, settings as default_settings
from caselog.models import Case, CaseNote
from caselog.models.case import CASE_STATE_ASSIGNED

# Configure logger for this module
logger = logging.getLogger(__name__)

ALERT_MODE_NONE = "none"
ALERT_MODE_WATCHERS = "watchers"
ALERT_MODE_ALWAYS = "always_alert"


class Notifier(Protocol):
    """Delivers alerts to members; implemented by the alerting subsystem."""

    def notify(self, user_ids: list[int], entity: Case | CaseNote, action: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that only records what would have been sent."""

    def notify(self, user_ids: list[int], entity: Case | CaseNote, action: str) -> None:
        logger.info(
            "Alerting %d user(s) about %s %s: %s",
            len(user_ids),
            type(entity).__name__,
            action,
            user_ids,
        )


def find_user_ids_to_alert(
    db: Session,
    entity: Case | CaseNote,
    settings: Settings | None = None,
) -> list[int]:
    """Return the members to alert about a new case or a new note.

    New cases go to the configured case moderators unless only watchers are
    alerted. New notes go to everyone else who already commented on the case,
    unless every moderator is always alerted; an assignment also alerts the
    assignee.
    """
    settings = settings or default_settings
    mode = settings.report_alert_mode
    if mode == ALERT_MODE_NONE:
        return []

    user_ids: list[int] = []
    if isinstance(entity, Case):
        if mode != ALERT_MODE_WATCHERS:
            user_ids = list(settings.case_moderator_user_ids)
    elif isinstance(entity, CaseNote):
        if mode != ALERT_MODE_ALWAYS:
            user_ids = list(
                db.scalars(
                    select(CaseNote.user_id)
                    .where(
                        CaseNote.case_id == entity.case_id,
                        CaseNote.user_id != entity.user_id,
                    )
                    .distinct()
                )
            )

        case = db.get(Case, entity.case_id)
        if entity.state_change == CASE_STATE_ASSIGNED and case and case.assigned_user_id:
            # The assignee is likely not a watcher yet.
            user_ids.append(case.assigned_user_id)

    return list(dict.fromkeys(user_ids))
