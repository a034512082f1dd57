# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from caselog.core.settings import Settings
from caselog.db.session import Base
from caselog.models import Case, CaseNote, FormalWarning, Post, Thread, ThreadReplyBan, User
from caselog.models.case import CASE_STATE_OPEN

TEST_DB_URL = "sqlite://"
NOW = 1_700_000_000

_USERNAME_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def clock() -> Callable[[], int]:
    """Return a frozen clock."""
    return lambda: NOW


@pytest.fixture()
def test_settings() -> Settings:
    """Provide settings with case opening for warnings switched on."""
    return Settings(
        REPORT_NEW_WARNINGS=True,
        BOARD_URL="https://forum.test/",
        REPORT_ALERT_MODE="watchers",
    )


@pytest.fixture()
def row_count(db_session: Session) -> Callable[[type[Base]], int]:
    """Return a helper counting the rows stored for a model."""

    def _count(model: type[Base]) -> int:
        return db_session.scalar(select(func.count()).select_from(model)) or 0

    return _count


def _create_user(db: Session, name: str, *, is_moderator: bool = False) -> User:
    user = User(username=f"{name}{next(_USERNAME_COUNTER)}", is_moderator=is_moderator)
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def moderator(db_session: Session) -> User:
    """Moderator who issues sanctions."""
    return _create_user(db_session, "mod", is_moderator=True)


@pytest.fixture()
def other_moderator(db_session: Session) -> User:
    """Second moderator who receives alerts."""
    return _create_user(db_session, "othermod", is_moderator=True)


@pytest.fixture()
def member(db_session: Session) -> User:
    """Member who gets sanctioned."""
    return _create_user(db_session, "member")


@pytest.fixture()
def reporter(db_session: Session) -> User:
    """Member who reported the content first."""
    return _create_user(db_session, "reporter")


@pytest.fixture()
def thread(db_session: Session, member: User) -> Thread:
    thread = Thread(node_id=7, user_id=member.user_id, title="Weekend plans")
    db_session.add(thread)
    db_session.commit()
    return thread


@pytest.fixture()
def post(db_session: Session, thread: Thread, member: User) -> Post:
    post = Post(thread_id=thread.thread_id, user_id=member.user_id, message="Rude reply")
    db_session.add(post)
    db_session.commit()
    return post


@pytest.fixture()
def make_warning(
    db_session: Session, post: Post, member: User, moderator: User
) -> Callable[..., FormalWarning]:
    """Return a factory for persisted warnings on ``post``."""

    def _make(**overrides: Any) -> FormalWarning:
        values: dict[str, Any] = {
            "content_type": "post",
            "content_id": post.post_id,
            "content_title": "Weekend plans",
            "user_id": member.user_id,
            "warning_date": NOW - 60,
            "warning_user_id": moderator.user_id,
            "warning_definition_id": 3,
            "title": "Inappropriate language",
            "notes": "Second time this week",
            "points": 2,
            "expiry_date": NOW + 86400,
            "is_expired": False,
            "extra_user_group_ids": "5,9",
        }
        values.update(overrides)
        warning = FormalWarning(**values)
        db_session.add(warning)
        db_session.commit()
        return warning

    return _make


@pytest.fixture()
def make_case(db_session: Session, reporter: User) -> Callable[..., Case]:
    """Return a factory for persisted cases that already hold one report."""

    def _make(content_type: str, content_id: int, **overrides: Any) -> Case:
        values: dict[str, Any] = {
            "content_type": content_type,
            "content_id": content_id,
            "content_user_id": 0,
            "content_info": {},
            "first_report_date": NOW - 3600,
            "report_state": CASE_STATE_OPEN,
            "assigned_user_id": 0,
            "comment_count": 1,
            "last_modified_date": NOW - 3600,
            "last_modified_user_id": reporter.user_id,
            "autoreported": False,
        }
        values.update(overrides)
        case = Case(**values)
        db_session.add(case)
        db_session.flush()
        db_session.add(
            CaseNote(
                case_id=case.case_id,
                user_id=reporter.user_id,
                comment_date=NOW - 3600,
                message="Please look at this",
                state_change="",
                is_report=True,
            )
        )
        db_session.commit()
        return case

    return _make


@pytest.fixture()
def make_reply_ban(
    db_session: Session, thread: Thread, member: User
) -> Callable[..., ThreadReplyBan]:
    """Return a factory for persisted reply bans in ``thread``."""

    def _make(post: Post | None = None, **overrides: Any) -> ThreadReplyBan:
        values: dict[str, Any] = {
            "thread_id": thread.thread_id,
            "thread": thread,
            "user_id": member.user_id,
            "user": member,
            "post_id": post.post_id if post is not None else None,
            "post": post,
            "ban_date": NOW,
            "expiry_date": 0,
            "reason": "Keeps derailing",
        }
        values.update(overrides)
        ban = ThreadReplyBan(**values)
        db_session.add(ban)
        db_session.commit()
        return ban

    return _make
