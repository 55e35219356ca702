"""Base model node: identity, tree links and the default edit protocol."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any, ClassVar

from extratext.exceptions import DefinitionError, InvalidChildError
from extratext.registry import NodeDefinition
from extratext.scope import Scope, scope_matches

if TYPE_CHECKING:
    from extratext.changes import ChangeRecord
    from extratext.live import LiveFactory, LiveNode
    from extratext.nodes.container import Container
    from extratext.nodes.scroll import Scroll
    from extratext.registry import Registry
    from extratext.sibling_list import SiblingList


def matches(node: Node, criteria: Any) -> bool:
    """Check a node against a definition, variant name, class, scope or predicate."""
    if isinstance(criteria, NodeDefinition):
        return node.name == criteria.name
    if isinstance(criteria, str):
        return node.name == criteria
    if isinstance(criteria, type):
        return isinstance(node, criteria)
    if isinstance(criteria, int):
        return scope_matches(criteria, node.scope)
    if callable(criteria):
        return bool(criteria(node))
    return False


class Node:
    """A model node mirroring exactly one live node.

    Never instantiate directly: use ``Registry.create``. The registry picks
    the node class from the variant's definition.
    """

    abstract: ClassVar[bool] = True
    is_text: ClassVar[bool] = False

    def __init__(self, registry: Registry, definition: NodeDefinition, live: LiveNode) -> None:
        if type(self).__dict__.get("abstract", False):
            raise DefinitionError(f"Cannot instantiate abstract class {type(self).__name__}")
        self.registry = registry
        self.definition = definition
        self.live = live
        self.parent: Container | None = None
        self.prev: Node | None = None
        self.next: Node | None = None
        self.siblings: SiblingList | None = None
        self._scroll: weakref.ref[Scroll] | None = None
        registry.bind(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} len={self.length()}>"

    @classmethod
    def create_live(
        cls, definition: NodeDefinition, factory: LiveFactory, value: Any = None
    ) -> LiveNode:
        """Create the live element for a new node of ``definition``.

        With several tag hints, ``value`` picks one: a 1-based number or a
        tag name. Unknown values fall back to the first tag.

        Raises:
            DefinitionError: If the definition has no tag hint.
        """
        tags = definition.tag_name
        if tags is None:
            raise DefinitionError(f"Variant {definition.name!r} is missing a tag name")
        if isinstance(tags, tuple):
            if isinstance(value, str):
                value = value.upper()
                if value.isdigit():
                    value = int(value)
            if isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= len(tags):
                tag = tags[value - 1]
            elif value in tags:
                tag = value
            else:
                tag = tags[0]
        else:
            tag = tags
        live = factory.create_element(tag)
        if definition.class_name:
            live.add_class(definition.class_name)
        return live

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def scope(self) -> Scope:
        return self.definition.scope

    @property
    def scroll(self) -> Scroll | None:
        return self._scroll() if self._scroll is not None else None

    @scroll.setter
    def scroll(self, value: Scroll | None) -> None:
        self._scroll = weakref.ref(value) if value is not None else None

    def length(self) -> int:
        return 1

    def offset(self, root: Node | None = None) -> int:
        """Distance from the start of ``root`` (default: the parent)."""
        if root is None:
            root = self.parent
        if self.parent is None or self is root:
            return 0
        return self.parent.children.offset(self) + self.parent.offset(root)

    # --- Attachment ---

    def attach(self) -> None:
        if self.parent is not None:
            self.scroll = self.parent.scroll
        self.registry.bind(self)

    def detach(self) -> None:
        if self.parent is not None:
            self.parent.remove_child(self)
            self.parent = None
        self.registry.unbind(self)

    def insert_into(self, parent: Container, ref: Node | None = None) -> None:
        """Move this node into ``parent`` before ``ref`` (append when None)."""
        if self.parent is not None:
            self.parent.children.remove(self)
        parent.children.insert_before(self, ref)
        ref_live = ref.live if ref is not None else None
        if self.live.parent is not parent.live or self.live.next_sibling is not ref_live:
            parent.live.insert_before(self.live, ref_live)
        self.parent = parent
        self.attach()

    def remove(self) -> None:
        """Take the live node out of the live tree, then detach."""
        if self.live.parent is not None:
            self.live.parent.remove_child(self.live)
        self.detach()

    def clone(self) -> Node:
        """A new, childless node of the same variant over a shallow live copy."""
        return self.definition.node_class(self.registry, self.definition, self.live.clone(deep=False))

    # --- Edit protocol ---

    def _create_content(self, content: str, value: Any = None) -> Node:
        if value is None:
            return self.registry.create_text(content)
        return self.registry.create(content, value)

    def insert_at(self, index: int, content: str, value: Any = None) -> None:
        """Insert text, or a ``content`` variant created with ``value``."""
        node = self._create_content(content, value)
        ref = self.split(index)
        try:
            self.parent.insert_before(node, ref)
        except InvalidChildError:
            node.detach()
            raise

    def delete_at(self, index: int, length: int) -> None:
        self.isolate(index, length).remove()

    def formats(self) -> dict[str, Any]:
        return {}

    def format(self, name: str, value: Any) -> None:
        pass

    def format_at(self, index: int, length: int, name: str, value: Any) -> None:
        """Format a range by wrapping the isolated piece.

        A node variant wraps directly; an attribute gets a fresh generic
        format node of this node's level to live on.
        """
        target = self.isolate(index, length)
        if self.registry.query(name, Scope.BLOT) is not None and value:
            target.wrap(name, value)
        elif self.registry.query(name, Scope.ATTRIBUTE) is not None:
            wrapper = self.registry.create(self.scope)
            target.wrap(wrapper)
            wrapper.format(name, value)

    def split(self, index: int, force: bool = False) -> Node | None:
        """Return the node starting at ``index``; plain nodes cannot divide."""
        return self if index == 0 else self.next

    def isolate(self, index: int, length: int) -> Node:
        """Split so that one node spans exactly ``[index, index + length)``."""
        target = self.split(index)
        target.split(length)
        return target

    def optimize(self, context: dict[str, Any]) -> None:
        pass

    def update(self, records: list[ChangeRecord], context: dict[str, Any]) -> None:
        pass

    # --- Structural replacement ---

    def replace(self, target: Node) -> None:
        """Take ``target``'s place in its parent and remove ``target``."""
        if target.parent is None:
            return
        target.parent.insert_before(self, target.next)
        target.remove()

    def replace_with(self, replacement: str | Node, value: Any = None) -> Node:
        if isinstance(replacement, str):
            replacement = self.registry.create(replacement, value)
        replacement.replace(self)
        return replacement

    def wrap(self, wrapper: str | Container, value: Any = None) -> Container:
        """Put ``wrapper`` in this node's slot and move this node inside it."""
        from extratext.nodes.container import Container

        if isinstance(wrapper, str):
            wrapper = self.registry.create(wrapper, value)
        if not isinstance(wrapper, Container):
            raise InvalidChildError(wrapper.name, self.name)
        if self.parent is not None:
            self.parent.insert_before(wrapper, self.next)
        wrapper.append_child(self)
        return wrapper
