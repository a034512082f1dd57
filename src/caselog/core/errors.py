"""Exceptions raised by the case linkage workflow."""

from __future__ import annotations


class CaseLogError(RuntimeError):
    """Base exception for case log failures."""


class UnsupportedSanctionError(CaseLogError, TypeError):
    """Raised when a case log is requested for something that is not a sanction."""


class CaseLogValidationError(CaseLogError):
    """Aggregated validation failure of a case log and its case or note.

    ``errors`` holds every individual message in the order it was collected;
    ``str()`` renders them as one human readable message.
    """

    def __init__(self, errors: list[str], prefix: str | None = None) -> None:
        self.errors = list(errors)
        self.prefix = prefix
        lines = [prefix, *self.errors] if prefix else self.errors
        super().__init__(", \n".join(lines))


class ImmutableCaseLogError(CaseLogError):
    """Raised when a persisted case log row is about to be updated."""


class NoteLinkageError(CaseLogError):
    """Raised when a note linked to a case log is written without a grant."""


class CaseNotificationError(CaseLogError):
    """Raised when alerts could not be sent after a case log was committed."""


class ReplyBanNotPermittedError(CaseLogError):
    """Raised when a reply ban is requested for content outside a thread."""
