"""Tests for the ORM helpers and table definitions behind case logs."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError

from caselog.core.errors import CaseLogValidationError
from caselog.core.settings import Settings
from caselog.db import session as session_module
from caselog.db.deferred import DeferredKey, UnresolvedKeyError
from caselog.db.history import previous_value
from caselog.models import Case, CaseLog, CaseNote
from caselog.services.content import content_type_of, get_content_handler, resolve_content
from caselog.services.sanction_source import copy_logged_fields


def test_table_names() -> None:
    assert Case.__tablename__ == "moderation_case"
    assert CaseNote.__tablename__ == "case_note"
    assert CaseLog.__tablename__ == "case_log"


def test_case_is_unique_per_content(db_session, make_case, post) -> None:
    constraints = [c for c in Case.__table__.constraints if isinstance(c, UniqueConstraint)]
    assert [sorted(col.name for col in c.columns) for c in constraints] == [
        ["content_id", "content_type"]
    ]

    make_case("post", post.post_id)
    db_session.add(Case(content_type="post", content_id=post.post_id))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()


def test_case_log_index_on_warning() -> None:
    assert CaseLog.__table__.c.warning_id.index is True


def test_deferred_key_resolves_after_flush(db_session) -> None:
    case_log = CaseLog(
        operation_type="new",
        content_type="post",
        content_id=1,
        user_id=1,
        warning_user_id=1,
        title="Spam",
    )
    key = DeferredKey(case_log, "warning_log_id")

    assert key.resolved is False
    assert "pending" in repr(key)
    with pytest.raises(UnresolvedKeyError):
        key.resolve()

    db_session.add(case_log)
    db_session.flush()

    assert key.resolved is True
    assert key.resolve() == case_log.warning_log_id
    db_session.rollback()


def test_previous_value_ignores_pending_changes(db_session, make_case, post) -> None:
    case = make_case("post", post.post_id, assigned_user_id=4)

    case.report_state = "resolved"
    case.assigned_user_id = 9

    assert previous_value(case, "report_state") == "open"
    assert previous_value(case, "assigned_user_id") == 4
    assert case.report_state == "resolved"


def test_previous_value_loads_expired_attributes(db_session, make_case, post) -> None:
    case = make_case("post", post.post_id)
    db_session.expire(case)

    assert previous_value(case, "report_state") == "open"


def test_previous_value_of_transient_entity() -> None:
    assert previous_value(Case(report_state="open"), "report_state") is None


def test_copy_logged_fields_skips_missing_fields() -> None:
    source = SimpleNamespace(content_type="post", content_id=5, title="Spam", points=3)
    case_log = CaseLog(notes="kept")

    copy_logged_fields(source, case_log)

    assert case_log.content_type == "post"
    assert case_log.content_id == 5
    assert case_log.title == "Spam"
    assert case_log.points == 3
    assert case_log.notes == "kept"


def test_case_log_validation_messages() -> None:
    case_log = CaseLog(
        operation_type="delete",
        content_type="",
        content_id=0,
        content_title="x" * 256,
        user_id=0,
        warning_user_id=2,
        title="t" * 256,
        points=-1,
    )

    errors = case_log.validate()

    assert set(errors) == {
        "operation_type",
        "content_type",
        "content_id",
        "content_title",
        "user_id",
        "title",
        "points",
    }


def test_validation_error_message_format() -> None:
    error = CaseLogValidationError(["Case log-title: Missing", "Case: Broken"], prefix="Warning:4")

    assert str(error) == "Warning:4, \nCase log-title: Missing, \nCase: Broken"
    assert str(CaseLogValidationError(["Case: Broken"])) == "Case: Broken"


def test_content_lookup(db_session, post, member) -> None:
    assert content_type_of(post) == "post"
    assert content_type_of(member) == "user"
    assert get_content_handler("gallery_item") is None
    assert resolve_content(db_session, "post", post.post_id) is post
    assert resolve_content(db_session, "post", 0) is None

    with pytest.raises(ValueError):
        content_type_of(object())


def test_board_url_is_normalized() -> None:
    assert Settings(BOARD_URL="https://forum.test///").board_url == "https://forum.test"


def test_get_db_closes_session(mocker) -> None:
    fake = mocker.Mock()
    mocker.patch.object(session_module, "SessionLocal", return_value=fake)

    scope = session_module.get_db()
    assert next(scope) is fake
    scope.close()

    fake.close.assert_called_once_with()
