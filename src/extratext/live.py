"""Live tree adapter contract and an in-memory live tree.

The node tree mirrors a live tree it does not own. Everything the core needs
from that tree is expressed by ``LiveNode`` (navigation, child list edits,
text payload, attributes, class membership and inline style) and by
``LiveFactory`` (node creation).

``LiveDocument`` is the in-memory implementation used by tests and by hosts
that do not render. It reports every mutation to its observers, which is how
``extratext.changes.ChangeRecorder`` collects change batches.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any, Protocol

CHILD_LIST = "childList"
ATTRIBUTES = "attributes"
CHARACTER_DATA = "characterData"

Observer = Callable[..., None]


class LiveFactory(Protocol):
    """Creates live nodes for the registry."""

    def create_element(self, tag: str) -> LiveElement: ...

    def create_text(self, data: str) -> LiveText: ...


class LiveNode:
    """A node of the live tree.

    Subclasses provide ``children`` and ``clone``; navigation helpers are
    derived from ``parent`` and ``children``.
    """

    is_text = False

    def __init__(self, document: LiveDocument | None = None) -> None:
        self.document = document
        self.parent: LiveElement | None = None

    @property
    def children(self) -> Sequence[LiveNode]:
        return ()

    def clone(self, deep: bool = False) -> LiveNode:
        raise NotImplementedError

    @property
    def next_sibling(self) -> LiveNode | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = siblings.index(self) + 1
        return siblings[index] if index < len(siblings) else None

    @property
    def previous_sibling(self) -> LiveNode | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = siblings.index(self)
        return siblings[index - 1] if index > 0 else None

    def ancestors(self) -> Iterator[LiveElement]:
        """Yield parents from the nearest up to the top of the tree."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def contains(self, other: LiveNode | None) -> bool:
        """Return True if ``other`` is this node or one of its descendants."""
        if other is None:
            return False
        if other is self:
            return True
        return any(ancestor is self for ancestor in other.ancestors())

    def tree_position(self) -> tuple[int, ...]:
        """Child indexes from the top of the tree down to this node.

        Tuples compare in document order for nodes sharing a top node.
        """
        path: list[int] = []
        node: LiveNode = self
        while node.parent is not None:
            path.append(node.parent.children.index(node))
            node = node.parent
        return tuple(reversed(path))

    def _notify(self, kind: str, target: LiveNode, **details: Any) -> None:
        if self.document is not None:
            self.document.notify(kind, target, **details)


class LiveText(LiveNode):
    """A text node holding a string payload."""

    is_text = True

    def __init__(self, data: str = "", document: LiveDocument | None = None) -> None:
        super().__init__(document)
        self._data = data

    def __repr__(self) -> str:
        return f"LiveText({self._data!r})"

    @property
    def data(self) -> str:
        return self._data

    @data.setter
    def data(self, value: str) -> None:
        old_value = self._data
        self._data = value
        self._notify(CHARACTER_DATA, self, old_value=old_value)

    @property
    def text_content(self) -> str:
        return self._data

    def split_text(self, index: int) -> LiveText:
        """Split the payload at ``index``; the tail becomes the next sibling."""
        if not 0 <= index <= len(self._data):
            raise IndexError(f"split index {index} outside 0..{len(self._data)}")
        tail = LiveText(self._data[index:], self.document)
        self.data = self._data[:index]
        if self.parent is not None:
            self.parent.insert_before(tail, self.next_sibling)
        return tail

    def clone(self, deep: bool = False) -> LiveText:
        return LiveText(self._data, self.document)


class LiveElement(LiveNode):
    """An element with a tag, attributes and an ordered child list."""

    def __init__(self, tag: str, document: LiveDocument | None = None) -> None:
        super().__init__(document)
        self.tag = tag.upper()
        self._attributes: dict[str, str] = {}
        self._children: list[LiveNode] = []

    def __repr__(self) -> str:
        classes = ".".join(self.classes)
        return f"LiveElement({self.tag}{'.' + classes if classes else ''})"

    @property
    def children(self) -> Sequence[LiveNode]:
        return tuple(self._children)

    @property
    def text_content(self) -> str:
        return "".join(getattr(child, "text_content", "") for child in self._children)

    # --- Child list ---

    def insert_before(self, node: LiveNode, ref: LiveNode | None = None) -> LiveNode:
        """Insert ``node`` before ``ref`` (append when ``ref`` is None).

        A node that already has a parent is moved.
        """
        if node is self or node.contains(self):
            raise ValueError("Cannot insert a node into itself or its descendant")
        if ref is not None and ref.parent is not self:
            raise ValueError(f"{ref!r} is not a child of {self!r}")
        if ref is node:
            ref = node.next_sibling
        if node.parent is not None:
            node.parent.remove_child(node)
        index = self._children.index(ref) if ref is not None else len(self._children)
        previous = self._children[index - 1] if index > 0 else None
        self._children.insert(index, node)
        node.parent = self
        self._notify(
            CHILD_LIST,
            self,
            added_nodes=(node,),
            previous_sibling=previous,
            next_sibling=ref,
        )
        return node

    def append_child(self, node: LiveNode) -> LiveNode:
        return self.insert_before(node, None)

    def remove_child(self, node: LiveNode) -> LiveNode:
        if node.parent is not self:
            raise ValueError(f"{node!r} is not a child of {self!r}")
        previous = node.previous_sibling
        following = node.next_sibling
        self._children.remove(node)
        node.parent = None
        self._notify(
            CHILD_LIST,
            self,
            removed_nodes=(node,),
            previous_sibling=previous,
            next_sibling=following,
        )
        return node

    def replace_child(self, new: LiveNode, old: LiveNode) -> LiveNode:
        """Put ``new`` where ``old`` was and detach ``old``."""
        self.insert_before(new, old)
        self.remove_child(old)
        return old

    # --- Attributes ---

    def attribute_names(self) -> list[str]:
        return list(self._attributes)

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def get_attribute(self, name: str) -> str | None:
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        old_value = self._attributes.get(name)
        self._attributes[name] = str(value)
        self._notify(ATTRIBUTES, self, attribute_name=name, old_value=old_value)

    def remove_attribute(self, name: str) -> None:
        if name not in self._attributes:
            return
        old_value = self._attributes.pop(name)
        self._notify(ATTRIBUTES, self, attribute_name=name, old_value=old_value)

    # --- Class membership ---

    @property
    def classes(self) -> list[str]:
        return (self._attributes.get("class") or "").split()

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def add_class(self, name: str) -> None:
        classes = self.classes
        if name not in classes:
            self.set_attribute("class", " ".join([*classes, name]))

    def remove_class(self, name: str) -> None:
        classes = self.classes
        if name not in classes:
            return
        classes.remove(name)
        if classes:
            self.set_attribute("class", " ".join(classes))
        else:
            self.remove_attribute("class")

    # --- Inline style ---

    def _styles(self) -> dict[str, str]:
        styles: dict[str, str] = {}
        for declaration in (self._attributes.get("style") or "").split(";"):
            name, sep, value = declaration.partition(":")
            if sep and name.strip():
                styles[name.strip()] = value.strip()
        return styles

    def _write_styles(self, styles: dict[str, str]) -> None:
        if styles:
            self.set_attribute("style", "; ".join(f"{k}: {v}" for k, v in styles.items()))
        else:
            self.remove_attribute("style")

    def style_names(self) -> list[str]:
        return list(self._styles())

    def get_style(self, name: str) -> str:
        return self._styles().get(name, "")

    def set_style(self, name: str, value: Any) -> None:
        styles = self._styles()
        styles[name] = str(value)
        self._write_styles(styles)

    def remove_style(self, name: str) -> None:
        styles = self._styles()
        if styles.pop(name, None) is not None:
            self._write_styles(styles)

    def clone(self, deep: bool = False) -> LiveElement:
        copy = LiveElement(self.tag, self.document)
        copy._attributes = dict(self._attributes)
        if deep:
            for child in self._children:
                copy.append_child(child.clone(deep=True))
        return copy


class LiveDocument:
    """Factory and mutation hub for an in-memory live tree."""

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def create_element(self, tag: str) -> LiveElement:
        return LiveElement(tag, self)

    def create_text(self, data: str) -> LiveText:
        return LiveText(data, self)

    def observe(self, observer: Observer) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def disconnect(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def notify(self, kind: str, target: LiveNode, **details: Any) -> None:
        for observer in list(self._observers):
            observer(kind, target, **details)
