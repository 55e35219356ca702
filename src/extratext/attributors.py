"""Attributor definitions: formatting attributes stored on live elements.

An attributor knows how to read, write and remove one formatting attribute
on a live element. Three storage strategies exist:

- ``Attributor``: a plain element attribute (``key="value"``)
- ``ClassAttributor``: a prefixed class (``key-value``)
- ``StyleAttributor``: an inline style declaration (``key: value``)

The attributor's scope level says which node levels may carry it; the owner
node's scope is passed in so the check needs no registry lookup.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from extratext.live import LiveElement, LiveNode
from extratext.scope import Scope


class Attributor:
    """Formatting attribute stored as a plain element attribute."""

    def __init__(
        self,
        name: str,
        key: str,
        *,
        scope: Scope | None = None,
        whitelist: Iterable[Any] | None = None,
    ) -> None:
        self.name = name
        self.key = key
        if scope is None:
            self.scope = Scope.ATTRIBUTE
        else:
            self.scope = Scope((scope & Scope.LEVEL) | Scope.ATTRIBUTE_KIND)
        self.whitelist = tuple(whitelist) if whitelist is not None else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.key!r})"

    @staticmethod
    def keys(live: LiveNode) -> list[str]:
        """Keys of this storage kind present on a live node."""
        if not isinstance(live, LiveElement):
            return []
        return live.attribute_names()

    def can_add(self, owner_scope: Scope | int, value: Any) -> bool:
        """Return True if a node of ``owner_scope`` may carry ``value``."""
        if not owner_scope & self.scope & Scope.LEVEL:
            return False
        if self.whitelist is None:
            return True
        if isinstance(value, str):
            return value.replace('"', "").replace("'", "") in self.whitelist
        return value in self.whitelist

    def add(self, live: LiveElement, value: Any, owner_scope: Scope | int) -> bool:
        if not self.can_add(owner_scope, value):
            return False
        live.set_attribute(self.key, value)
        return True

    def remove(self, live: LiveElement) -> None:
        live.remove_attribute(self.key)

    def value(self, live: LiveElement, owner_scope: Scope | int) -> Any:
        value = live.get_attribute(self.key)
        if value and self.can_add(owner_scope, value):
            return value
        return ""


class ClassAttributor(Attributor):
    """Formatting attribute stored as a ``key-value`` class."""

    @staticmethod
    def keys(live: LiveNode) -> list[str]:
        if not isinstance(live, LiveElement):
            return []
        return ["-".join(name.split("-")[:-1]) for name in live.classes if "-" in name]

    def _matching(self, live: LiveElement) -> list[str]:
        prefix = f"{self.key}-"
        return [name for name in live.classes if name.startswith(prefix)]

    def add(self, live: LiveElement, value: Any, owner_scope: Scope | int) -> bool:
        if not self.can_add(owner_scope, value):
            return False
        self.remove(live)
        live.add_class(f"{self.key}-{value}")
        return True

    def remove(self, live: LiveElement) -> None:
        for name in self._matching(live):
            live.remove_class(name)

    def value(self, live: LiveElement, owner_scope: Scope | int) -> Any:
        matching = self._matching(live)
        if not matching:
            return ""
        value = matching[0][len(self.key) + 1 :]
        return value if self.can_add(owner_scope, value) else ""


class StyleAttributor(Attributor):
    """Formatting attribute stored as an inline style declaration."""

    @staticmethod
    def keys(live: LiveNode) -> list[str]:
        if not isinstance(live, LiveElement):
            return []
        return live.style_names()

    def add(self, live: LiveElement, value: Any, owner_scope: Scope | int) -> bool:
        if not self.can_add(owner_scope, value):
            return False
        live.set_style(self.key, value)
        return True

    def remove(self, live: LiveElement) -> None:
        live.remove_style(self.key)

    def value(self, live: LiveElement, owner_scope: Scope | int) -> Any:
        value = live.get_style(self.key)
        return value if value and self.can_add(owner_scope, value) else ""
