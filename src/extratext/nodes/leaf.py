"""Leaf nodes: no children, a value read from the live node."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from extratext.nodes.base import Node

if TYPE_CHECKING:
    from extratext.live import LiveNode
    from extratext.registry import NodeDefinition


class Leaf(Node):
    """A childless node. Its length is 1 unless the variant fixes another."""

    @classmethod
    def live_value(cls, definition: NodeDefinition, live: LiveNode) -> Any:
        if definition.value is not None:
            return definition.value(definition, live)
        return True

    def length(self) -> int:
        if self.definition.length is not None:
            return self.definition.length
        return 1

    def value(self) -> Any:
        return {self.name: self.live_value(self.definition, self.live) or True}

    def index(self, live: LiveNode, offset: int) -> int:
        """Model offset for a live position, or -1 if outside this leaf."""
        if self.live is live or self.live.contains(live):
            return min(offset, self.length())
        return -1

    def position(self, index: int, inclusive: bool = False) -> tuple[LiveNode, int]:
        """Live ``(node, offset)`` for a model offset within this leaf."""
        offset = list(self.parent.live.children).index(self.live)
        if index > 0:
            offset += 1
        return self.parent.live, offset

    def optimize(self, context: dict[str, Any]) -> None:
        if self.definition.placeholder and (self.prev is not None or self.next is not None):
            self.remove()
