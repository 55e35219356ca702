"""Variant table and per-tree registry.

``VariantTable`` is the immutable set of node and attribute definitions a
document tree understands. ``Registry`` pairs one table with the live node
factory and the identity map from live nodes to model nodes. Each document
tree owns its own Registry; nothing here is process-global.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Union

from loguru import logger

from extratext.attributors import Attributor
from extratext.config import Settings, get_settings
from extratext.exceptions import DefinitionError, UnregisteredVariantError
from extratext.live import LiveElement, LiveFactory, LiveNode
from extratext.scope import Scope, scope_matches

if TYPE_CHECKING:
    from extratext.nodes.base import Node

LiveCreator = Callable[["NodeDefinition", LiveFactory, Any], LiveNode]
LiveReader = Callable[["NodeDefinition", LiveNode], Any]
Definition = Union["NodeDefinition", Attributor]


@dataclass(frozen=True)
class NodeDefinition:
    """A registered node variant.

    Attributes:
        name: Unique registration key.
        node_class: Model class instantiated for this variant.
        scope: Level and kind bits (kind must include BLOT_KIND).
        tag_name: Live tag hint, or a tuple of tags (e.g. H1..H6).
        class_name: Class hint distinguishing variants sharing a tag.
        allowed_children: Variant names, node classes or scope masks accepted
            as direct children. None accepts anything.
        default_child: Variant created when the container becomes empty.
        generic: The plain variant of its level (no format of its own).
        merge_adjacent: Merge with an equal following sibling on optimize.
        unwrap_when_plain: Unwrap on optimize when carrying no format.
        rebuild_on_update: Rebuild children from live state on update.
        placeholder: Zero-length leaf that drops out once it has siblings.
        length: Fixed leaf length (defaults to 1).
        create: Overrides live node creation.
        value: Overrides how a leaf reads its value from the live node.
        formats: Overrides how a node reports its own format.
    """

    name: str
    node_class: type[Node]
    scope: Scope
    tag_name: str | tuple[str, ...] | None = None
    class_name: str | None = None
    allowed_children: tuple[Any, ...] | None = None
    default_child: str | None = None
    generic: bool = False
    merge_adjacent: bool = False
    unwrap_when_plain: bool = False
    rebuild_on_update: bool = False
    placeholder: bool = False
    length: int | None = None
    create: LiveCreator | None = field(default=None, compare=False)
    value: LiveReader | None = field(default=None, compare=False)
    formats: LiveReader | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.tag_name, str):
            object.__setattr__(self, "tag_name", self.tag_name.upper())
        elif self.tag_name is not None:
            object.__setattr__(self, "tag_name", tuple(tag.upper() for tag in self.tag_name))
        if not self.scope & Scope.BLOT_KIND:
            raise DefinitionError(f"Node definition {self.name!r} must have a BLOT scope")

    @property
    def tags(self) -> tuple[str, ...]:
        if self.tag_name is None:
            return ()
        if isinstance(self.tag_name, str):
            return (self.tag_name,)
        return self.tag_name

    def create_live(self, factory: LiveFactory, value: Any = None) -> LiveNode:
        if self.create is not None:
            return self.create(self, factory, value)
        return self.node_class.create_live(self, factory, value)


class VariantTable:
    """Immutable lookup tables built once from a list of definitions.

    Raises:
        DefinitionError: For duplicate names, abstract node classes, two
            definitions sharing a class hint, or two definitions sharing a
            tag without a class hint.
    """

    def __init__(self, definitions: Iterable[Definition]) -> None:
        nodes: dict[str, NodeDefinition] = {}
        attributes: dict[str, Attributor] = {}
        attribute_keys: dict[str, Attributor] = {}
        classes: dict[str, NodeDefinition] = {}
        tags: dict[str, NodeDefinition] = {}
        generics: dict[int, NodeDefinition] = {}

        for definition in definitions:
            if isinstance(definition, Attributor):
                if definition.name in attributes:
                    raise DefinitionError(f"Attribute {definition.name!r} is registered twice")
                attributes[definition.name] = definition
                attribute_keys.setdefault(definition.key, definition)
                continue
            if not isinstance(definition, NodeDefinition):
                raise DefinitionError(f"Invalid definition: {definition!r}")
            if definition.node_class.__dict__.get("abstract", False):
                raise DefinitionError(
                    f"Cannot register abstract class {definition.node_class.__name__}"
                )
            if definition.name in nodes:
                raise DefinitionError(f"Variant {definition.name!r} is registered twice")
            nodes[definition.name] = definition

            if definition.class_name is not None:
                if definition.class_name in classes:
                    other = classes[definition.class_name]
                    raise DefinitionError(
                        f"{definition.name!r} and {other.name!r} share class {definition.class_name!r}"
                    )
                classes[definition.class_name] = definition
            for tag in definition.tags:
                current = tags.get(tag)
                if current is None:
                    tags[tag] = definition
                elif definition.class_name is None:
                    if current.class_name is None:
                        raise DefinitionError(
                            f"{definition.name!r} and {current.name!r} share tag {tag} "
                            "without a class discriminator"
                        )
                    # The class-less definition owns the bare tag.
                    tags[tag] = definition

            if definition.generic:
                level = int(definition.scope & Scope.LEVEL)
                if level in generics:
                    raise DefinitionError(
                        f"{definition.name!r} and {generics[level].name!r} are both generic"
                    )
                generics[level] = definition

        self.nodes = MappingProxyType(nodes)
        self.attributes = MappingProxyType(attributes)
        self.attribute_keys = MappingProxyType(attribute_keys)
        self.classes = MappingProxyType(classes)
        self.tags = MappingProxyType(tags)
        self.generics = MappingProxyType(generics)
        self.text = next((d for d in nodes.values() if d.node_class.is_text), None)

    def __iter__(self) -> Iterator[Definition]:
        yield from self.nodes.values()
        yield from self.attributes.values()

    def __len__(self) -> int:
        return len(self.nodes) + len(self.attributes)


class Registry:
    """Definition lookups and the live-to-model identity map of one tree."""

    def __init__(
        self,
        table: VariantTable | Iterable[Definition],
        factory: LiveFactory,
        settings: Settings | None = None,
    ) -> None:
        self.table = table if isinstance(table, VariantTable) else VariantTable(table)
        self.factory = factory
        self.settings = settings or get_settings()
        self._identity: dict[LiveNode, Node] = {}
        # Bumped on every bind/unbind; optimize compares it across passes.
        self.revision = 0

    def __len__(self) -> int:
        return len(self._identity)

    # --- Lookups ---

    def query(self, query: Any, scope: Scope | int = Scope.ANY) -> Definition | None:
        """Resolve a definition by name, live node or scope mask.

        Returns None when nothing matches ``scope``.
        """
        match: Definition | None = None
        if isinstance(query, str):
            match = (
                self.table.attributes.get(query)
                or self.table.attribute_keys.get(query)
                or self.table.nodes.get(query)
            )
        elif isinstance(query, LiveNode):
            match = self._query_live(query)
        elif isinstance(query, int):
            if query & Scope.LEVEL & Scope.BLOCK_LEVEL:
                match = self.table.generics.get(int(Scope.BLOCK_LEVEL))
            elif query & Scope.LEVEL & Scope.INLINE_LEVEL:
                match = self.table.generics.get(int(Scope.INLINE_LEVEL))
            elif query & Scope.LEVEL & Scope.ROOT_LEVEL:
                match = self.table.generics.get(int(Scope.ROOT_LEVEL))
        if match is None or not scope_matches(scope, match.scope):
            return None
        return match

    def _query_live(self, live: LiveNode) -> NodeDefinition | None:
        if live.is_text:
            return self.table.text
        if not isinstance(live, LiveElement):
            return None
        for name in live.classes:
            if name in self.table.classes:
                return self.table.classes[name]
        return self.table.tags.get(live.tag)

    def generic(self, scope: Scope | int) -> NodeDefinition | None:
        """The generic node variant of a scope's level."""
        match = self.query(int(scope & Scope.LEVEL), Scope.BLOT)
        return match if isinstance(match, NodeDefinition) else None

    # --- Creation ---

    def create(self, query: Any, value: Any = None) -> Node:
        """Create a model node from a name, scope mask or live node.

        A live node is adopted as-is; otherwise the definition creates one.

        Raises:
            UnregisteredVariantError: If no node definition matches.
            DefinitionError: If the definition cannot create a live node.
        """
        definition = self.query(query, Scope.BLOT)
        if not isinstance(definition, NodeDefinition):
            raise UnregisteredVariantError(query)
        live = query if isinstance(query, LiveNode) else definition.create_live(self.factory, value)
        return definition.node_class(self, definition, live)

    def create_text(self, data: str) -> Node:
        """Create a node of the registered text variant."""
        definition = self.table.text
        if definition is None:
            raise UnregisteredVariantError("text")
        return definition.node_class(self, definition, definition.create_live(self.factory, data))

    # --- Identity map ---

    def find(self, live: LiveNode | None, bubble: bool = False) -> Node | None:
        """Return the model node of ``live``; never raises.

        With ``bubble`` the live ancestors are searched as well.
        """
        while live is not None:
            node = self._identity.get(live)
            if node is not None or not bubble:
                return node
            live = live.parent
        return None

    def bind(self, node: Node) -> None:
        if self._identity.get(node.live) is not node:
            self._identity[node.live] = node
            self.revision += 1

    def unbind(self, node: Node) -> None:
        if self._identity.get(node.live) is node:
            del self._identity[node.live]
            self.revision += 1
            logger.trace("Unbound {}", node.name)
