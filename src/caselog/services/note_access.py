"""Capability that lets case-log linkage be written onto case notes.

Notes created through the ordinary reporting path must not point at a case
log. Only the case log creator may do so, and only while it holds an active
:class:`NoteLinkageGrant` for its validate and save calls.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class NoteLinkageGrant:
    """Token passed explicitly to code that validates or saves linked notes."""

    __slots__ = ("active",)

    def __init__(self) -> None:
        self.active = False

    def __bool__(self) -> bool:
        return self.active

    def __repr__(self) -> str:
        return f"<NoteLinkageGrant active={self.active}>"


@contextmanager
def note_linkage_access(grant: NoteLinkageGrant | None = None) -> Iterator[NoteLinkageGrant]:
    """Activate ``grant`` for the duration of the block.

    The previous state is restored on every exit path, so nested scopes and
    failures never leave the grant active.
    """
    grant = grant if grant is not None else NoteLinkageGrant()
    previous = grant.active
    grant.active = True
    try:
        yield grant
    finally:
        grant.active = previous


def is_granted(grant: NoteLinkageGrant | None) -> bool:
    """Return True if ``grant`` is present and currently active."""
    return grant is not None and grant.active
