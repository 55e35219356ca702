"""Exception classes for the node tree."""

from __future__ import annotations

from typing import Any


class ExtraTextError(Exception):
    """Base class for node tree errors."""


class UnregisteredVariantError(ExtraTextError):
    """Raised when no registered definition matches a name or live node."""

    def __init__(self, query: Any) -> None:
        super().__init__(f"Unable to create {query!r}: no matching variant is registered")
        self.query = query


class DefinitionError(ExtraTextError):
    """Raised for an invalid variant definition.

    Covers a missing creation hint, an ambiguous tag/class collision and
    attempts to instantiate an abstract node class.
    """

    pass


class InvalidChildError(ExtraTextError):
    """Raised when a child variant is not allowed inside a container."""

    def __init__(self, parent: str, child: str) -> None:
        super().__init__(f"Cannot insert {child} into {parent}")
        self.parent = parent
        self.child = child


class OptimizeError(ExtraTextError):
    """Raised when optimize does not reach a stable tree shape."""

    pass
