"""Placeholders for primary keys that are only assigned on flush."""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect as sa_inspect


class UnresolvedKeyError(RuntimeError):
    """Raised when a deferred key is read before its entity was flushed."""


class DeferredKey:
    """Stand-in for the primary key of an entity that has not been inserted yet.

    Dependents are linked to the placeholder while everything is still in
    memory. Once the owning entity is flushed, :meth:`resolve` returns the real
    identifier so it can be written into the dependent rows.
    """

    def __init__(self, entity: Any, attribute: str) -> None:
        self.entity = entity
        self.attribute = attribute

    @property
    def resolved(self) -> bool:
        """Return True once the owning entity has a persisted identity."""
        return sa_inspect(self.entity).has_identity and self._value() is not None

    def resolve(self) -> int:
        """Return the real key, raising if the owner has not been flushed."""
        if not self.resolved:
            raise UnresolvedKeyError(
                f"{type(self.entity).__name__}.{self.attribute} has not been assigned yet"
            )
        return self._value()

    def _value(self) -> Any:
        return getattr(self.entity, self.attribute)

    def __repr__(self) -> str:
        state = self._value() if self.resolved else "pending"
        return f"<DeferredKey {type(self.entity).__name__}.{self.attribute}={state}>"
