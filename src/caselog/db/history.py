"""Access to the values an ORM attribute held before pending changes."""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect as sa_inspect


def previous_value(entity: Any, attribute: str) -> Any:
    """Return the value ``attribute`` had when ``entity`` was last loaded.

    Pending in-memory changes are ignored. A transient entity has no previous
    value, so ``None`` is returned for it.
    """
    state = sa_inspect(entity)
    if state.has_identity and attribute in state.unloaded:
        # Expired or deferred; loading it yields the stored value.
        return getattr(entity, attribute)

    history = state.attrs[attribute].history
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    return None
