"""Tests for opening cases, commenting on them and the note linkage grant."""

from __future__ import annotations

import pytest

from caselog.core.errors import CaseLogValidationError, NoteLinkageError
from caselog.models import Case, CaseLog, CaseNote, Post, Thread
from caselog.models.case import CASE_STATE_ASSIGNED
from caselog.services import (
    CaseCommenter,
    CaseLogCreator,
    CaseOpener,
    NoteLinkageGrant,
    note_linkage_access,
)
from caselog.services.case_writer import CaseNoteWriter
from caselog.services.note_access import is_granted


def test_opener_creates_case_with_report(
    db_session, post, thread, member, reporter, test_settings, clock, row_count
) -> None:
    opener = CaseOpener(
        db_session, "post", post, reporter.user_id, message="Spam", settings=test_settings, clock=clock
    )

    assert opener.validate() is True
    case = opener.save()
    db_session.commit()

    assert row_count(Case) == 1
    assert case.content_user_id == member.user_id
    assert case.content_info == {
        "title": "Weekend plans",
        "message": "Rude reply",
        "thread_id": thread.thread_id,
        "node_id": 7,
    }
    assert case.comment_count == 1
    assert case.first_report_date == clock()
    assert case.last_modified_user_id == reporter.user_id

    note = opener.get_comment()
    assert note.case_id == case.case_id
    assert note.is_report is True
    assert note.message == "Spam"


def test_opener_rejects_content_that_already_has_a_case(
    db_session, make_case, post, reporter, test_settings, clock
) -> None:
    make_case("post", post.post_id)
    opener = CaseOpener(
        db_session, "post", post, reporter.user_id, message="Again", settings=test_settings, clock=clock
    )

    errors: dict[str, str] = {}
    assert opener.validate(errors) is False
    assert errors == {"content": "This content already has a case."}


def test_opener_rejects_unknown_content_type(db_session, post, reporter, clock) -> None:
    opener = CaseOpener(db_session, "gallery_item", post, reporter.user_id, message="?", clock=clock)

    errors: dict[str, str] = {}
    opener.validate(errors)

    assert "content_type" in errors


def test_opener_requires_a_message_for_plain_reports(db_session, post, reporter, clock) -> None:
    opener = CaseOpener(db_session, "post", post, reporter.user_id, clock=clock)

    errors: dict[str, str] = {}
    opener.validate(errors)

    assert errors == {"message": "Please enter a valid message."}


def test_commenter_adds_note_and_changes_state(
    db_session, make_case, post, moderator, other_moderator, clock
) -> None:
    case = make_case("post", post.post_id, assigned_user_id=other_moderator.user_id)
    commenter = CaseCommenter(
        db_session,
        case,
        moderator.user_id,
        message="Taking this one",
        state_change=CASE_STATE_ASSIGNED,
        clock=clock,
    )

    assert commenter.validate() is True
    commenter.save()
    db_session.commit()

    db_session.refresh(case)
    assert case.report_state == CASE_STATE_ASSIGNED
    assert case.comment_count == 2
    assert case.last_modified_user_id == moderator.user_id
    assert commenter.get_comment().case_note_id is not None


def test_commenter_rejects_unknown_state(db_session, make_case, post, moderator, clock) -> None:
    case = make_case("post", post.post_id)
    commenter = CaseCommenter(db_session, case, moderator.user_id, state_change="archived", clock=clock)

    errors: dict[str, str] = {}
    commenter.validate(errors)

    assert errors == {"state_change": "Unknown case state 'archived'."}


def test_commenter_requires_persisted_case(db_session, moderator, clock) -> None:
    commenter = CaseCommenter(
        db_session, Case(content_type="post", content_id=1), moderator.user_id, message="Hi", clock=clock
    )

    errors: dict[str, str] = {}
    commenter.validate(errors)

    assert errors == {"case_id": "Notes can only be added to an existing case."}


def _link_to_case_log(db_session, note: CaseNote, title: str = "Spam") -> None:
    case_log = CaseLog(
        operation_type="new",
        content_type="post",
        content_id=1,
        user_id=1,
        warning_user_id=1,
        title=title,
    )
    db_session.add(case_log)
    db_session.flush()
    note.warning_log_id = case_log.warning_log_id


def test_linked_note_needs_a_grant(
    db_session, make_case, post, moderator, clock, row_count
) -> None:
    """Only holders of an active grant can write a note pointing at a case log."""
    case = make_case("post", post.post_id)
    commenter = CaseCommenter(db_session, case, moderator.user_id, message="x", clock=clock)
    _link_to_case_log(db_session, commenter.get_comment())

    errors: dict[str, str] = {}
    assert commenter.validate(errors) is False
    assert "warning_log_id" in errors

    with pytest.raises(NoteLinkageError):
        commenter.save()
    with pytest.raises(NoteLinkageError):
        commenter.save(NoteLinkageGrant())

    with note_linkage_access() as grant:
        assert commenter.validate(access=grant) is True
        commenter.save(grant)
    db_session.commit()

    assert row_count(CaseNote) == 2


def test_grant_is_restored_after_scope() -> None:
    grant = NoteLinkageGrant()

    with note_linkage_access(grant):
        assert is_granted(grant)
        with note_linkage_access(grant):
            assert grant.active
        # Leaving the inner scope keeps the outer one active.
        assert grant.active
    assert not grant
    assert not is_granted(None)


def test_grant_is_restored_after_error() -> None:
    grant = NoteLinkageGrant()

    with pytest.raises(RuntimeError):
        with note_linkage_access(grant):
            raise RuntimeError("save failed")

    assert grant.active is False


def test_writer_base_needs_case_hooks(db_session, moderator) -> None:
    with pytest.raises(TypeError):
        CaseNoteWriter(db_session, moderator.user_id)


def test_opener_posts_case_to_forum(
    db_session, post, reporter, test_settings, clock, row_count
) -> None:
    """With a forum configured, opening a case also starts a thread there."""
    test_settings.log_cases_to_forum_node_id = 42
    opener = CaseOpener(
        db_session, "post", post, reporter.user_id, message="Spam", settings=test_settings, clock=clock
    )

    assert opener.validate() is True
    case = opener.save()
    db_session.commit()

    forum_thread = opener.forum_thread
    assert forum_thread.thread_id is not None
    assert forum_thread.node_id == 42
    assert forum_thread.title == "Reported: Weekend plans"
    assert forum_thread.user_id == reporter.user_id
    assert opener.forum_post.thread_id == forum_thread.thread_id
    assert opener.forum_post.message == f"post:{post.post_id}\nSpam"
    assert case.case_id is not None
    # The fixture thread plus the forum copy.
    assert row_count(Thread) == 2
    assert row_count(Post) == 2


def test_opener_without_forum_posts_nothing(
    db_session, post, reporter, test_settings, clock, row_count
) -> None:
    opener = CaseOpener(
        db_session, "post", post, reporter.user_id, message="Spam", settings=test_settings, clock=clock
    )
    opener.save()
    db_session.commit()

    assert opener.forum_thread is None
    assert row_count(Thread) == 1


def test_forum_thread_errors_join_case_validation(
    db_session, make_warning, test_settings, clock, row_count
) -> None:
    test_settings.log_cases_to_forum_node_id = 42
    test_settings.case_thread_title = "x" * 150 + " {title}"
    creator = CaseLogCreator(db_session, make_warning(), "new", settings=test_settings, clock=clock)

    with pytest.raises(CaseLogValidationError) as exc_info:
        creator.save()

    assert exc_info.value.errors == [
        "Case-thread_title: Please enter a value using 150 characters or fewer."
    ]
    assert row_count(Thread) == 1
    assert row_count(CaseLog) == 0


def test_forum_thread_rolls_back_with_case_log(
    db_session, make_warning, test_settings, clock, mocker, row_count
) -> None:
    test_settings.log_cases_to_forum_node_id = 42
    creator = CaseLogCreator(db_session, make_warning(), "new", settings=test_settings, clock=clock)
    mocker.patch.object(db_session, "commit", side_effect=RuntimeError("commit failed"))

    with pytest.raises(RuntimeError):
        creator.save()

    assert row_count(Thread) == 1
    assert row_count(Post) == 1
    assert row_count(Case) == 0
