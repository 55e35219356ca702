"""Container nodes: ordered children, index delegation and reconciliation."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from loguru import logger

from extratext.changes import ChangeKind
from extratext.exceptions import InvalidChildError, UnregisteredVariantError
from extratext.nodes.base import Node, matches
from extratext.scope import Scope
from extratext.sibling_list import SiblingList

if TYPE_CHECKING:
    from extratext.changes import ChangeRecord
    from extratext.live import LiveNode
    from extratext.registry import NodeDefinition, Registry

# Context key holding the nodes an optimize pass is limited to; None means all
MARKED_NODES = "marked_nodes"


def make_node(registry: Registry, live: LiveNode) -> Node:
    """Find or adopt the model node of a live node.

    A live node no variant recognizes is replaced in the live tree by a
    generic inline element that takes over its children. The unknown
    node's own attributes are lost.
    """
    node = registry.find(live)
    if node is not None:
        return node
    try:
        return registry.create(live)
    except UnregisteredVariantError:
        node = registry.create(Scope.INLINE)
        logger.debug("Adopting unrecognized {!r} as {}", live, node.name)
        for child in list(live.children):
            node.live.append_child(child)
        if live.parent is not None:
            live.parent.replace_child(node.live, live)
        node.build()
        node.attach()
        return node


class Container(Node):
    """A node owning an ordered list of child nodes."""

    def __init__(self, registry: Registry, definition: NodeDefinition, live: LiveNode) -> None:
        super().__init__(registry, definition, live)
        self.children = SiblingList()
        self.build()

    def length(self) -> int:
        return self.children.length()

    # --- Children ---

    def build(self) -> None:
        """Create children from the live node's children.

        Children this container does not allow are skipped when
        ``lenient_build`` is on; other errors propagate.
        """
        self.children = SiblingList()
        for live in reversed(self.live.children):
            child = make_node(self.registry, live)
            try:
                self.insert_before(child, self.children.head)
            except InvalidChildError as err:
                if not self.registry.settings.lenient_build:
                    raise
                logger.warning("Skipping child while building {}: {}", self.name, err)
                child.detach()

    def rebuild(self) -> None:
        """Re-derive all children from live state, dropping stale ones."""
        stale = list(self.children)
        for child in stale:
            child.parent = None
            child.prev = child.next = None
            child.siblings = None
        self.build()
        for child in stale:
            if child.parent is None:
                child.detach()

    def accepts(self, child: Node) -> bool:
        allowed = self.definition.allowed_children
        if allowed is None:
            return True
        return any(matches(child, criteria) for criteria in allowed)

    def append_child(self, child: Node) -> None:
        self.insert_before(child)

    def insert_before(self, child: Node, ref: Node | None = None) -> None:
        """Insert ``child`` before ``ref``.

        Raises:
            InvalidChildError: If the child's variant is not allowed here.
                Nothing has changed when this is raised.
        """
        if not self.accepts(child):
            raise InvalidChildError(self.name, child.name)
        child.insert_into(self, ref)

    def remove_child(self, child: Node) -> None:
        self.children.remove(child)

    def move_children(self, target: Container, ref: Node | None = None) -> None:
        for child in list(self.children):
            target.insert_before(child, ref)

    def attach(self) -> None:
        super().attach()
        for child in self.children:
            child.attach()

    def detach(self) -> None:
        for child in list(self.children):
            child.detach()
        super().detach()

    # --- Read-side queries ---

    def descendant(self, criteria: Any, index: int = 0) -> tuple[Node | None, int]:
        """First node at ``index`` matching ``criteria``, searching downwards.

        Returns:
            ``(node, offset within node)``, or ``(None, -1)``.
        """
        child, offset = self.children.find(index)
        if child is None:
            return None, -1
        if matches(child, criteria):
            return child, offset
        if isinstance(child, Container):
            return child.descendant(criteria, offset)
        return None, -1

    def descendants(self, criteria: Any, index: int = 0, length: int | None = None) -> list[Node]:
        """All nodes matching ``criteria`` that overlap the range."""
        if length is None:
            length = sys.maxsize
        found: list[Node] = []

        def visit(child: Node, offset: int, overlap: int) -> None:
            if matches(child, criteria):
                found.append(child)
            if isinstance(child, Container):
                found.extend(child.descendants(criteria, offset, overlap))

        self.children.for_each_at(index, length, visit)
        return found

    def path(self, index: int, inclusive: bool = False) -> list[tuple[Node, int]]:
        """``(node, offset)`` pairs from this container down to the leaf at ``index``."""
        child, offset = self.children.find(index, inclusive)
        position: list[tuple[Node, int]] = [(self, index)]
        if isinstance(child, Container):
            return position + child.path(offset, inclusive)
        if child is not None:
            position.append((child, offset))
        return position

    # --- Edit protocol ---

    def insert_at(self, index: int, content: str, value: Any = None) -> None:
        """Insert at ``index``, appending when ``index`` is the end.

        Appended content this container does not allow goes into the last
        child if that child accepts it (so typing at the end of a header
        extends the header), otherwise into a new ``default_child``.
        """
        child, offset = self.children.find(index)
        if child is not None:
            child.insert_at(offset, content, value)
            return
        node = self._create_content(content, value)
        target: Container = self
        if self.definition.default_child is not None and not self.accepts(node):
            holder = self.children.tail
            if not isinstance(holder, Container) or not holder.accepts(node):
                holder = self.registry.create(self.definition.default_child)
                self.append_child(holder)
            target = holder
        try:
            target.append_child(node)
        except InvalidChildError:
            node.detach()
            raise

    def delete_at(self, index: int, length: int) -> None:
        if index == 0 and length > 0 and length == self.length():
            self.remove()
            return
        self.children.for_each_at(
            index, length, lambda child, offset, overlap: child.delete_at(offset, overlap)
        )

    def format_at(self, index: int, length: int, name: str, value: Any) -> None:
        self.children.for_each_at(
            index,
            length,
            lambda child, offset, overlap: child.format_at(offset, overlap, name, value),
        )

    def split(self, index: int, force: bool = False) -> Node | None:
        """Split into two containers of the same variant at ``index``.

        Returns:
            The node beginning at ``index``.
        """
        if not force:
            if index == 0:
                return self
            if index == self.length():
                return self.next
        after = self.clone()
        self.parent.insert_before(after, self.next)
        child, offset = self.children.find(index)
        if child is not None:
            start = child.split(offset, force)
            if start is not None:
                for moving in list(self.children.iterator(start)):
                    after.append_child(moving)
        return after

    def replace(self, target: Node) -> None:
        if isinstance(target, Container):
            target.move_children(self)
        super().replace(target)

    def unwrap(self) -> None:
        """Move the children into the parent at this node's slot, then remove it."""
        self.move_children(self.parent, self.next)
        self.remove()

    # --- Normalization ---

    def _optimize_children(self, context: dict[str, Any]) -> None:
        marked = context.get(MARKED_NODES)
        child = self.children.head
        while child is not None:
            following = child.next
            if marked is None or child in marked:
                child.optimize(context)
            if child.parent is self:
                following = child.next
            child = following if following is not None and following.parent is self else None

    def optimize(self, context: dict[str, Any]) -> None:
        """Optimize children first, then fill or drop this node if empty.

        Only children in ``context[MARKED_NODES]`` are visited when it is set.
        The default child must be zero-length so that optimizing never
        changes the document's length.
        """
        self._optimize_children(context)
        if len(self.children) > 0:
            return
        if self.definition.default_child is not None:
            child = self.registry.create(self.definition.default_child)
            self.append_child(child)
            child.optimize(context)
        elif self.parent is not None:
            self.remove()

    # --- Reconciliation ---

    def _reference_for(self, live: LiveNode) -> Node | None:
        """Model child to insert before: the first mapped live sibling after ``live``."""
        sibling = live.next_sibling
        while sibling is not None:
            node = self.registry.find(sibling)
            if node is not None and node.parent is self:
                return node
            sibling = sibling.next_sibling
        return None

    def update(self, records: list[ChangeRecord], context: dict[str, Any]) -> None:
        """Apply childList changes reported on this node's live node."""
        added: list[LiveNode] = []
        removed: list[LiveNode] = []
        for record in records:
            if record.target is self.live and record.kind is ChangeKind.CHILD_LIST:
                added.extend(record.added_nodes)
                removed.extend(record.removed_nodes)

        scroll = self.scroll
        root_live = scroll.live if scroll is not None else self.live
        for live in removed:
            # Reported removals may precede the live tree catching up
            if live.parent is not None and root_live.contains(live):
                continue
            node = self.registry.find(live)
            if node is None:
                continue
            if node.live.parent is None or node.live.parent is self.live:
                node.detach()

        candidates: list[LiveNode] = []
        seen: set[LiveNode] = set()
        for live in added:
            if live.parent is self.live and live not in seen:
                seen.add(live)
                candidates.append(live)
        # Last in live order first, so each reference sibling is already placed
        candidates.sort(key=lambda live: live.tree_position(), reverse=True)

        for live in candidates:
            ref = self._reference_for(live)
            node = make_node(self.registry, live)
            if node.parent is self and node.next is ref:
                continue
            try:
                self.insert_before(node, ref)
            except InvalidChildError as err:
                logger.warning("Dropping added child of {}: {}", self.name, err)
                node.detach()

        if added or removed:
            logger.debug(
                "Reconciled {}: {} added, {} removed", self.name, len(candidates), len(removed)
            )
