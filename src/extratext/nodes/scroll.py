"""The root node: public edit surface, change batches and the optimize loop."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from extratext.changes import ChangeKind, ChangeRecorder
from extratext.exceptions import DefinitionError, OptimizeError, UnregisteredVariantError
from extratext.live import LiveDocument
from extratext.nodes.container import MARKED_NODES, Container
from extratext.registry import Registry
from extratext.scope import Scope

if TYPE_CHECKING:
    from collections.abc import Iterable

    from extratext.changes import ChangeFeed, ChangeRecord
    from extratext.config import Settings
    from extratext.live import LiveElement, LiveNode
    from extratext.nodes.base import Node
    from extratext.registry import Definition, NodeDefinition


class Scroll(Container):
    """Root container of a document tree.

    Every public edit first applies pending external changes, then performs
    the edit, then optimizes the nodes the edit touched until the tree stops
    changing.
    """

    def __init__(self, registry: Registry, definition: NodeDefinition, live: LiveNode) -> None:
        super().__init__(registry, definition, live)
        self.feed: ChangeFeed | None = None
        self.scroll = self
        self.attach()

    # --- Reconciliation ---

    def update(
        self,
        records: Iterable[ChangeRecord] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Apply a batch of external live tree changes.

        Args:
            records: The batch. Pending records are pulled from ``feed``
                when omitted.
            context: Scratch dict shared by every node during this update.
        """
        if records is None:
            records = self.feed.take_records() if self.feed is not None else []
        records = list(records)
        if not records:
            return
        if context is None:
            context = {}

        groups: dict[int, tuple[Node, list[ChangeRecord]]] = {}
        for record in records:
            node = self.registry.find(record.target, bubble=True)
            if node is None:
                continue
            groups.setdefault(id(node), (node, []))[1].append(record)

        own = groups.pop(id(self), None)
        for node, batch in groups.values():
            # An earlier group may have dropped this node
            if self.registry.find(node.live) is not node:
                continue
            node.update(batch, context)
        if own is not None:
            super().update(own[1], context)

        logger.debug(
            "Applied {} change records across {} nodes",
            len(records),
            len(groups) + (own is not None),
        )
        self.optimize(records, context)

    def apply_external_changes(self, batch: Iterable[ChangeRecord]) -> None:
        self.update(batch)

    # --- Normalization ---

    def _mark(self, records: Iterable[ChangeRecord]) -> set[Node]:
        """Nodes a batch touched, plus their ancestors and adjacent siblings."""
        marked: set[Node] = set()

        def mark(node: Node | None, parents: bool = True) -> None:
            while node is not None and node is not self and node.live.parent is not None:
                marked.add(node)
                if not parents:
                    return
                node = node.parent

        for record in records:
            node = self.registry.find(record.target, bubble=True)
            if node is None:
                continue
            if node.live is record.target:
                if record.kind is ChangeKind.CHILD_LIST:
                    mark(self.registry.find(record.previous_sibling))
                    mark(self.registry.find(record.next_sibling), parents=False)
                    for live in record.added_nodes:
                        child = self.registry.find(live)
                        mark(child, parents=False)
                        if isinstance(child, Container):
                            for grandchild in child.children:
                                mark(grandchild, parents=False)
                elif record.kind is ChangeKind.ATTRIBUTES:
                    mark(node.prev)
            mark(node)
        return marked

    def optimize(
        self,
        records: Iterable[ChangeRecord] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Normalize the tree until a pass leaves nothing behind.

        Without ``records`` the first pass covers the whole tree. With
        ``records`` it only visits the nodes they touched. Every later pass
        visits the nodes touched by the previous pass, as reported by the
        feed. Without a feed, later passes cover the whole tree until the
        identity map stops changing.

        Raises:
            OptimizeError: If ``max_optimize_iterations`` passes are not enough.
        """
        if context is None:
            context = {}
        marked = None if records is None else self._mark(records)
        limit = self.registry.settings.max_optimize_iterations
        try:
            for iteration in range(1, limit + 1):
                revision = self.registry.revision
                context[MARKED_NODES] = marked
                super().optimize(context)
                if self.feed is not None:
                    pending = self.feed.take_records()
                    if not pending:
                        logger.trace("Optimize settled after {} passes", iteration)
                        return
                    marked = self._mark(pending)
                elif self.registry.revision == revision:
                    logger.trace("Optimize settled after {} passes", iteration)
                    return
                else:
                    marked = None
        finally:
            context.pop(MARKED_NODES, None)
        raise OptimizeError(f"Tree did not settle after {limit} optimize passes")

    def _optimize_own_changes(self) -> None:
        if self.feed is None:
            self.optimize()
        else:
            self.optimize(self.feed.take_records())

    # --- Edit protocol ---

    def insert_at(self, index: int, content: str, value: Any = None) -> None:
        self.update()
        super().insert_at(index, content, value)
        self._optimize_own_changes()

    def delete_at(self, index: int, length: int) -> None:
        if length <= 0:
            return
        self.update()
        if index == 0 and length == self.length():
            for child in list(self.children):
                child.remove()
        else:
            super().delete_at(index, length)
        self._optimize_own_changes()

    def format_at(self, index: int, length: int, name: str, value: Any) -> None:
        self.update()
        super().format_at(index, length, name, value)
        self._optimize_own_changes()


def create_scroll(
    definitions: Iterable[Definition] | None = None,
    *,
    live_root: LiveElement | None = None,
    document: LiveDocument | None = None,
    observe: bool = True,
    settings: Settings | None = None,
) -> Scroll:
    """Build a document tree over a live root.

    Args:
        definitions: Variant and attribute definitions. Defaults to
            ``extratext.variants.DEFAULT_DEFINITIONS``.
        live_root: Existing live element to mirror. A fresh root element is
            created when omitted.
        document: Live node factory. Defaults to the root's document, or a
            new ``LiveDocument``.
        observe: Attach a ``ChangeRecorder`` so external edits are picked up
            by ``Scroll.update()``.
        settings: Overrides ``get_settings()``.

    Raises:
        UnregisteredVariantError: If no root-level variant is registered.
        DefinitionError: If the root variant is not a Scroll.
    """
    if definitions is None:
        from extratext.variants import DEFAULT_DEFINITIONS

        definitions = DEFAULT_DEFINITIONS
    if document is None:
        if live_root is not None and live_root.document is not None:
            document = live_root.document
        else:
            document = LiveDocument()

    registry = Registry(definitions, document, settings)
    definition = registry.generic(Scope.ROOT)
    if definition is None:
        raise UnregisteredVariantError(Scope.ROOT)
    if not issubclass(definition.node_class, Scroll):
        raise DefinitionError(f"Root variant {definition.name!r} must use the Scroll class")

    feed = ChangeRecorder(document) if observe else None
    if live_root is None:
        live_root = definition.create_live(document)
    scroll = definition.node_class(registry, definition, live_root)
    scroll.feed = feed
    scroll.optimize()
    return scroll
