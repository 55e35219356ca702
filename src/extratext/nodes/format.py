"""Format nodes: containers that carry formatting.

A format node reports its own structural format (from its variant and live
tag) plus the attributes in its ``AttributorStore``. Block-level and
inline-level formats differ in how range formatting is routed; variant
specific behaviour comes from the definition's hooks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from extratext.attributors import Attributor
from extratext.changes import ChangeKind
from extratext.exceptions import InvalidChildError
from extratext.nodes.container import Container
from extratext.scope import Scope, level_of
from extratext.store import AttributorStore

if TYPE_CHECKING:
    from extratext.changes import ChangeRecord
    from extratext.live import LiveNode
    from extratext.nodes.base import Node
    from extratext.registry import NodeDefinition, Registry


class Format(Container):
    """A container owning an attributor store."""

    def __init__(self, registry: Registry, definition: NodeDefinition, live: LiveNode) -> None:
        super().__init__(registry, definition, live)
        self.attributes = AttributorStore(self)

    @classmethod
    def live_formats(cls, definition: NodeDefinition, live: LiveNode) -> Any:
        """The variant's own format value read from a live node, or None."""
        if definition.formats is not None:
            return definition.formats(definition, live)
        if definition.generic:
            return None
        if isinstance(definition.tag_name, str):
            return True
        if isinstance(definition.tag_name, tuple):
            return live.tag.lower()
        return None

    @property
    def is_block(self) -> bool:
        return bool(self.scope & Scope.BLOCK_LEVEL)

    def formats(self) -> dict[str, Any]:
        formats = self.attributes.values()
        own = self.live_formats(self.definition, self.live)
        if own is not None:
            formats[self.name] = own
        return formats

    def format(self, name: str, value: Any) -> None:
        """Set an attribute or change this node's variant.

        Only names at this node's level are considered. Clearing the node's
        own variant demotes it to the generic variant of its level.
        """
        definition = self.registry.query(name, level_of(self.scope))
        if definition is None:
            return
        if isinstance(definition, Attributor):
            self.attributes.attribute(definition, value)
        elif name == self.name and not value:
            generic = self.registry.generic(self.scope)
            if generic is not None and generic.name != self.name:
                self.replace_with(generic.name)
        elif value and (name != self.name or self.formats().get(name) != value):
            self.replace_with(name, value)

    def format_at(self, index: int, length: int, name: str, value: Any) -> None:
        if self.is_block:
            if self.registry.query(name, Scope.BLOCK) is not None:
                self.format(name, value)
                return
        elif (
            self.formats().get(name) is not None
            or self.registry.query(name, level_of(self.scope) & Scope.ATTRIBUTE) is not None
        ):
            self.isolate(index, length).format(name, value)
            return
        super().format_at(index, length, name, value)

    def insert_at(self, index: int, content: str, value: Any = None) -> None:
        if not self.is_block or value is None or self.registry.query(content, Scope.INLINE):
            super().insert_at(index, content, value)
            return
        # Non-inline content goes between the two halves of this block
        after = self.split(index)
        node = self.registry.create(content, value)
        try:
            self.parent.insert_before(node, after)
        except InvalidChildError:
            node.detach()
            raise

    def replace_with(self, replacement: str | Node, value: Any = None) -> Node:
        replacement = super().replace_with(replacement, value)
        if isinstance(replacement, Format):
            self.attributes.copy(replacement)
        return replacement

    def wrap(self, wrapper: str | Container, value: Any = None) -> Container:
        wrapper = super().wrap(wrapper, value)
        if isinstance(wrapper, Format) and wrapper.scope == self.scope:
            self.attributes.move(wrapper)
        return wrapper

    def optimize(self, context: dict[str, Any]) -> None:
        super().optimize(context)
        if self.parent is None:
            return
        if self.definition.unwrap_when_plain and not self.formats():
            self.unwrap()
            return
        following = self.next
        if (
            self.definition.merge_adjacent
            and isinstance(following, Format)
            and following.prev is self
            and following.name == self.name
            and following.formats() == self.formats()
        ):
            following.move_children(self)
            following.remove()

    def update(self, records: list[ChangeRecord], context: dict[str, Any]) -> None:
        if self.definition.rebuild_on_update:
            self.rebuild()
        else:
            super().update(records, context)
        if any(
            record.target is self.live and record.kind is ChangeKind.ATTRIBUTES
            for record in records
        ):
            self.attributes.build()
