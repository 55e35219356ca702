"""Embed leaf: an opaque, formattable unit (image, break, ...)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from extratext.nodes.base import Node
from extratext.nodes.leaf import Leaf

if TYPE_CHECKING:
    from extratext.live import LiveNode
    from extratext.registry import NodeDefinition


class Embed(Leaf):
    """A non-text leaf. Formatting it wraps the whole embed."""

    @classmethod
    def live_formats(cls, definition: NodeDefinition, live: LiveNode) -> dict[str, Any]:
        if definition.formats is not None:
            return dict(definition.formats(definition, live) or {})
        return {}

    def formats(self) -> dict[str, Any]:
        return self.live_formats(self.definition, self.live)

    def format(self, name: str, value: Any) -> None:
        Node.format_at(self, 0, self.length(), name, value)

    def format_at(self, index: int, length: int, name: str, value: Any) -> None:
        if index == 0 and length == self.length():
            self.format(name, value)
        else:
            super().format_at(index, length, name, value)
