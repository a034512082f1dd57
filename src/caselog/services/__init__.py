# src/caselog/services/__init__.py
"""Business logic services for the case linkage workflow."""

from .case_commenter import CaseCommenter
from .case_log_creator import CaseLogCreator
from .case_opener import CaseOpener
from .note_access import NoteLinkageGrant, note_linkage_access

__all__ = [
    "CaseCommenter",
    "CaseLogCreator",
    "CaseOpener",
    "NoteLinkageGrant",
    "note_linkage_access",
]
