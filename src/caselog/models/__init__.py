# src/caselog/models/__init__.py
"""SQLAlchemy models for the case linkage workflow."""

from .case import Case, CaseNote
from .case_log import CaseLog
from .post import Post, Thread
from .sanction import FormalWarning, ThreadReplyBan
from .user import User

__all__ = [
    "Case", "CaseNote",
    "CaseLog",
    "Post", "Thread",
    "FormalWarning", "ThreadReplyBan",
    "User",
]
