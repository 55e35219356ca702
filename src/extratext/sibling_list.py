"""Ordered, doubly-linked list of a container's children.

Members carry their own ``prev``/``next`` references and a ``siblings``
reference to the list holding them, so inserting before, removing and
membership checks are O(1). Index lookups walk from the head and
accumulate member lengths.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from extratext.nodes.base import Node

Visitor = Callable[["Node", int, int], None]


class SiblingList:
    """Children of one container, in document order."""

    def __init__(self) -> None:
        self.head: Node | None = None
        self.tail: Node | None = None
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Node]:
        return self.iterator()

    def __repr__(self) -> str:
        return f"SiblingList({list(self)!r})"

    def iterator(self, start: Node | None = None) -> Iterator[Node]:
        """Iterate from ``start`` (default: head) to the tail.

        The successor is read before yielding, so the yielded member may be
        removed or moved by the caller.
        """
        current = self.head if start is None else start
        while current is not None:
            following = current.next
            yield current
            current = following

    def append(self, *nodes: Node) -> None:
        for node in nodes:
            self.insert_before(node, None)

    def at(self, index: int) -> Node | None:
        """Return the member at a position (not a document offset)."""
        if index < 0:
            return None
        for position, node in enumerate(self):
            if position == index:
                return node
        return None

    def contains(self, node: Node) -> bool:
        return node.siblings is self

    def insert_before(self, node: Node, ref: Node | None) -> None:
        """Link ``node`` before ``ref``, or at the tail when ``ref`` is None."""
        node.siblings = self
        node.next = ref
        if ref is not None:
            node.prev = ref.prev
            if ref.prev is not None:
                ref.prev.next = node
            ref.prev = node
            if ref is self.head:
                self.head = node
        elif self.tail is not None:
            self.tail.next = node
            node.prev = self.tail
            self.tail = node
        else:
            node.prev = None
            self.head = self.tail = node
        self._count += 1

    def remove(self, node: Node) -> None:
        """Unlink ``node``; members of other lists are ignored."""
        if not self.contains(node):
            return
        if node.prev is not None:
            node.prev.next = node.next
        if node.next is not None:
            node.next.prev = node.prev
        if node is self.head:
            self.head = node.next
        if node is self.tail:
            self.tail = node.prev
        node.prev = None
        node.next = None
        node.siblings = None
        self._count -= 1

    def offset(self, target: Node) -> int:
        """Sum of the lengths of the members before ``target``.

        Raises:
            ValueError: If ``target`` is not a member.
        """
        total = 0
        for node in self:
            if node is target:
                return total
            total += node.length()
        raise ValueError(f"{target!r} is not a member of this list")

    def length(self) -> int:
        return sum(node.length() for node in self)

    def find(self, index: int, inclusive: bool = False) -> tuple[Node | None, int]:
        """Translate an offset into ``(member, offset within member)``.

        On a boundary the following member wins. With ``inclusive`` the
        preceding member wins instead, unless the following member has zero
        length. Past the end, ``(None, 0)`` is returned unless ``inclusive``
        selects the last member.
        """
        for node in self:
            length = node.length()
            if index < length or (
                inclusive
                and index == length
                and (node.next is None or node.next.length() != 0)
            ):
                return node, index
            index -= length
        return None, 0

    def for_each_at(self, index: int, length: int, visitor: Visitor) -> None:
        """Call ``visitor(member, local_offset, overlap)`` for members in range.

        Only members overlapping ``[index, index + length)`` are visited and
        the walk stops once ``length`` has been consumed.
        """
        if length <= 0:
            return
        start, offset = self.find(index)
        if start is None:
            return
        current_index = index - offset
        end = index + length
        for node in self.iterator(start):
            if current_index >= end:
                break
            node_length = node.length()
            if index > current_index:
                local_offset = index - current_index
                overlap = min(length, current_index + node_length - index)
            else:
                local_offset = 0
                overlap = min(node_length, end - current_index)
            if overlap > 0:
                visitor(node, local_offset, overlap)
            current_index += node_length
