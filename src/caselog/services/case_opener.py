"""Open a new moderation case for a piece of content."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from caselog.core.settings import Settings
from caselog.db.time import unix_now
from caselog.models import Case, CaseNote, Post, Thread
from caselog.models.case import CASE_STATE_OPEN
from caselog.repositories.case_repo import CaseRepository
from caselog.services.alerts import Notifier
from caselog.services.case_writer import CaseNoteWriter
from caselog.services.content import get_content_handler

logger = logging.getLogger(__name__)

THREAD_TITLE_MAX_LENGTH = 150


class CaseOpener(CaseNoteWriter):
    """Prepare a new case together with the note that opens it.

    When ``settings.log_cases_to_forum_node_id`` is set, the case is also
    posted as a new thread in that forum, validated and saved with the case.
    """

    notification_action = "report"

    def __init__(
        self,
        db: Session,
        content_type: str,
        content: Any,
        user_id: int,
        *,
        message: str = "",
        settings: Settings | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        super().__init__(db, user_id, settings=settings, notifier=notifier, clock=clock)
        self.content_type = content_type
        self.content = content
        self.handler = get_content_handler(content_type)

        now = self.clock()
        report = Case(
            content_type=content_type,
            content_id=self.handler.get_id(content) if self.handler else 0,
            content_user_id=self.handler.get_user_id(content) if self.handler else 0,
            content_info=self.handler.get_info(content) if self.handler else {},
            first_report_date=now,
            report_state=CASE_STATE_OPEN,
            assigned_user_id=0,
            comment_count=0,
            last_modified_date=now,
            last_modified_user_id=user_id,
            autoreported=False,
        )
        comment = CaseNote(
            user_id=user_id,
            comment_date=now,
            message=message,
            state_change="",
            is_report=True,
        )
        # Both objects stay transient until save(); the link only lives in memory.
        comment.case = report
        self.report = report
        self.comment = comment

        self.forum_thread: Thread | None = None
        self.forum_post: Post | None = None
        if self.settings.log_cases_to_forum_node_id:
            self._prepare_forum_thread(self.settings.log_cases_to_forum_node_id)

    def _prepare_forum_thread(self, node_id: int) -> None:
        title = self.report.content_info.get("title") or f"{self.content_type} {self.report.content_id}"
        thread = Thread(
            node_id=node_id,
            user_id=self.user_id,
            title=self.settings.case_thread_title.format(title=title),
        )
        body = [f"{self.content_type}:{self.report.content_id}"]
        if self.comment.message:
            body.append(self.comment.message)
        post = Post(user_id=self.user_id, message="\n".join(body))
        post.thread = thread
        self.forum_thread = thread
        self.forum_post = post

    def _validate_case(self, errors: dict[str, str]) -> None:
        if self.handler is None:
            errors["content_type"] = f"Content of type '{self.content_type}' cannot be reported."
            return
        if not self.report.content_id:
            errors["content_id"] = "The requested content could not be found."
            return
        existing = CaseRepository(self.db).get_for_content(
            self.report.content_type, self.report.content_id
        )
        if existing is not None:
            errors["content"] = "This content already has a case."
        if self.forum_thread is not None:
            self._validate_forum_thread(errors)

    def _validate_forum_thread(self, errors: dict[str, str]) -> None:
        thread = self.forum_thread
        if not thread.title:
            errors["thread_title"] = "Please enter a valid title."
        elif len(thread.title) > THREAD_TITLE_MAX_LENGTH:
            errors["thread_title"] = (
                f"Please enter a value using {THREAD_TITLE_MAX_LENGTH} characters or fewer."
            )
        if not thread.user_id:
            errors["thread_user_id"] = "Please enter a valid user."

    def _save(self) -> Case:
        if self.forum_thread is not None:
            # The forum copy goes in first, as part of the same unit of work.
            self.db.add(self.forum_thread)
            self.db.add(self.forum_post)
            self.db.flush()
            logger.info(
                "Posted case thread %s in node %s",
                self.forum_thread.thread_id,
                self.forum_thread.node_id,
            )

        report = self.report
        comment = self.comment
        report.comment_count = (report.comment_count or 0) + 1
        report.last_modified_date = comment.comment_date
        report.last_modified_user_id = comment.user_id

        self.db.add(report)
        self.db.add(comment)
        self.db.flush()
        logger.info(
            "Opened case %s for %s:%s",
            report.case_id,
            report.content_type,
            report.content_id,
        )
        return report

    def _notification_entity(self) -> Case:
        return self.report
