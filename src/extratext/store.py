"""Per-node cache of the formatting attributes applied to a live element."""

from __future__ import annotations

from itertools import chain
from typing import TYPE_CHECKING, Any

from extratext.attributors import Attributor, ClassAttributor, StyleAttributor
from extratext.scope import Scope

if TYPE_CHECKING:
    from extratext.nodes.format import Format


class AttributorStore:
    """Attributes applied to one Format node.

    The live element is the source of truth; ``build`` re-derives the cache
    from it and every write goes to the live element first.
    """

    def __init__(self, owner: Format) -> None:
        self.owner = owner
        self.attributes: dict[str, Attributor] = {}
        self.build()

    def __len__(self) -> int:
        return len(self.attributes)

    def __contains__(self, name: object) -> bool:
        return name in self.attributes

    def attribute(self, attributor: Attributor, value: Any) -> None:
        """Apply (truthy ``value``) or clear (falsy ``value``) an attribute."""
        live = self.owner.live
        if value:
            if attributor.add(live, value, self.owner.scope):
                if attributor.value(live, self.owner.scope):
                    self.attributes[attributor.name] = attributor
                else:
                    self.attributes.pop(attributor.name, None)
        else:
            attributor.remove(live)
            self.attributes.pop(attributor.name, None)

    def build(self) -> None:
        """Rebuild the cache from the live element."""
        self.attributes = {}
        live = self.owner.live
        registry = self.owner.registry
        keys = chain(Attributor.keys(live), ClassAttributor.keys(live), StyleAttributor.keys(live))
        for key in keys:
            attributor = registry.query(key, Scope.ATTRIBUTE)
            if isinstance(attributor, Attributor) and attributor.value(live, self.owner.scope):
                self.attributes[attributor.name] = attributor

    def copy(self, target: Format) -> None:
        """Apply every cached attribute to ``target``."""
        for name, attributor in list(self.attributes.items()):
            target.format(name, attributor.value(self.owner.live, self.owner.scope))

    def move(self, target: Format) -> None:
        """Copy every attribute to ``target`` then clear them here."""
        self.copy(target)
        for attributor in self.attributes.values():
            attributor.remove(self.owner.live)
        self.attributes = {}

    def values(self) -> dict[str, Any]:
        return {
            name: attributor.value(self.owner.live, self.owner.scope)
            for name, attributor in self.attributes.items()
        }
