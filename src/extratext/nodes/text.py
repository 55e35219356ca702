"""Text leaf: a string payload mirrored with a live text node."""

from __future__ import annotations

import unicodedata
from typing import TYPE_CHECKING, Any, ClassVar

from extratext.changes import ChangeKind
from extratext.nodes.leaf import Leaf

if TYPE_CHECKING:
    from extratext.changes import ChangeRecord
    from extratext.live import LiveFactory, LiveNode, LiveText
    from extratext.nodes.base import Node
    from extratext.registry import NodeDefinition, Registry


class Text(Leaf):
    """A run of text. Length is the payload length."""

    is_text: ClassVar[bool] = True
    live: LiveText

    def __init__(self, registry: Registry, definition: NodeDefinition, live: LiveNode) -> None:
        super().__init__(registry, definition, live)
        self.text = self.live_value(definition, live)

    @classmethod
    def create_live(
        cls, definition: NodeDefinition, factory: LiveFactory, value: Any = None
    ) -> LiveNode:
        return factory.create_text("" if value is None else str(value))

    @classmethod
    def live_value(cls, definition: NodeDefinition, live: LiveNode) -> str:
        return unicodedata.normalize("NFC", live.data)

    def __repr__(self) -> str:
        return f"<Text {self.text!r}>"

    def length(self) -> int:
        return len(self.text)

    def value(self) -> str:
        return self.text

    def index(self, live: LiveNode, offset: int) -> int:
        return offset if live is self.live else -1

    def position(self, index: int, inclusive: bool = False) -> tuple[LiveNode, int]:
        return self.live, index

    def insert_at(self, index: int, content: str, value: Any = None) -> None:
        if value is not None:
            super().insert_at(index, content, value)
            return
        self.text = self.text[:index] + content + self.text[index:]
        self.live.data = self.text

    def delete_at(self, index: int, length: int) -> None:
        self.text = self.text[:index] + self.text[index + length :]
        self.live.data = self.text

    def split(self, index: int, force: bool = False) -> Node | None:
        """Divide the payload; the tail becomes a new text node after this one."""
        if not force:
            if index == 0:
                return self
            if index == self.length():
                return self.next
        tail = self.registry.create(self.live.split_text(index))
        self.parent.insert_before(tail, self.next)
        self.text = self.live_value(self.definition, self.live)
        return tail

    def optimize(self, context: dict[str, Any]) -> None:
        super().optimize(context)
        self.text = self.live_value(self.definition, self.live)
        if not self.text:
            self.remove()
            return
        following = self.next
        if isinstance(following, Text) and following.prev is self and following.name == self.name:
            self.insert_at(self.length(), following.value())
            following.remove()

    def update(self, records: list[ChangeRecord], context: dict[str, Any]) -> None:
        if any(
            record.kind is ChangeKind.CHARACTER_DATA and record.target is self.live
            for record in records
        ):
            self.text = self.live_value(self.definition, self.live)
