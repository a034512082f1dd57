"""Lookup of reportable content by its content-type tag."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from caselog.db.session import Base
from caselog.models import Post, Thread, User

__all__ = [
    "ContentHandler",
    "get_content_handler",
    "content_type_of",
    "resolve_content",
]


@dataclass(frozen=True)
class ContentHandler:
    """Describe how one content type is loaded and summarized for a case."""

    content_type: str
    model: type[Base]
    id_attribute: str

    def get_id(self, content: Any) -> int:
        return getattr(content, self.id_attribute)

    def get_user_id(self, content: Any) -> int:
        return content.user_id

    def get_title(self, content: Any) -> str:
        if isinstance(content, User):
            return content.username
        if isinstance(content, Thread):
            return content.title
        if isinstance(content, Post) and content.thread is not None:
            return content.thread.title
        return ""

    def get_info(self, content: Any) -> dict[str, Any]:
        """Return the denormalized snapshot stored on the case."""
        info: dict[str, Any] = {"title": self.get_title(content)}
        if isinstance(content, Post):
            info["message"] = content.message
            info["thread_id"] = content.thread_id
            if content.thread is not None:
                info["node_id"] = content.thread.node_id
        elif isinstance(content, Thread):
            info["node_id"] = content.node_id
        elif isinstance(content, User):
            info["username"] = content.username
        return info


_HANDLERS: dict[str, ContentHandler] = {
    "post": ContentHandler("post", Post, "post_id"),
    "thread": ContentHandler("thread", Thread, "thread_id"),
    "user": ContentHandler("user", User, "user_id"),
}


def get_content_handler(content_type: str) -> ContentHandler | None:
    """Return the handler registered for ``content_type``."""
    return _HANDLERS.get(content_type)


def content_type_of(content: Any) -> str:
    """Return the content-type tag of an ORM entity."""
    for handler in _HANDLERS.values():
        if isinstance(content, handler.model):
            return handler.content_type
    raise ValueError(f"{type(content).__name__} is not reportable content")


def resolve_content(db: Session, content_type: str, content_id: int) -> Any | None:
    """Load the entity behind a content reference, or None if it is gone."""
    handler = get_content_handler(content_type)
    if handler is None or not content_id:
        return None
    return db.get(handler.model, content_id)
