"""Tests for SiblingList."""

from __future__ import annotations

import pytest

from extratext.sibling_list import SiblingList


class Item:
    """Minimal list member with a fixed length."""

    def __init__(self, label: str, size: int = 1) -> None:
        self.label = label
        self.size = size
        self.prev: Item | None = None
        self.next: Item | None = None
        self.siblings: SiblingList | None = None

    def __repr__(self) -> str:
        return self.label

    def length(self) -> int:
        return self.size


def make_list(*sizes: int) -> tuple[SiblingList, list[Item]]:
    items = [Item(f"n{i}", size) for i, size in enumerate(sizes)]
    siblings = SiblingList()
    siblings.append(*items)
    return siblings, items


class TestLinking:
    """Tests for insertion and removal."""

    def test_append_keeps_order(self) -> None:
        """Appended members iterate in insertion order."""
        siblings, items = make_list(1, 1, 1)
        assert list(siblings) == items
        assert len(siblings) == 3
        assert siblings.head is items[0]
        assert siblings.tail is items[2]
        assert items[1].prev is items[0]
        assert items[1].next is items[2]

    def test_insert_before_head(self) -> None:
        """Inserting before the head makes the new member the head."""
        siblings, items = make_list(1, 1)
        first = Item("first")
        siblings.insert_before(first, items[0])
        assert siblings.head is first
        assert first.next is items[0]
        assert items[0].prev is first
        assert list(siblings) == [first, *items]

    def test_insert_before_middle(self) -> None:
        """Inserting before an inner member links both neighbours."""
        siblings, items = make_list(1, 1)
        middle = Item("middle")
        siblings.insert_before(middle, items[1])
        assert list(siblings) == [items[0], middle, items[1]]
        assert middle.prev is items[0]
        assert items[0].next is middle

    def test_insert_before_none_appends(self) -> None:
        """A None reference appends at the tail."""
        siblings, items = make_list(1)
        last = Item("last")
        siblings.insert_before(last, None)
        assert siblings.tail is last
        assert last.prev is items[0]

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_remove(self, position: int) -> None:
        """Removing any member relinks its neighbours and clears its links."""
        siblings, items = make_list(1, 1, 1)
        removed = items[position]
        siblings.remove(removed)
        remaining = [item for item in items if item is not removed]
        assert list(siblings) == remaining
        assert len(siblings) == 2
        assert siblings.head is remaining[0]
        assert siblings.tail is remaining[-1]
        assert removed.prev is None
        assert removed.next is None

    def test_remove_non_member_is_ignored(self) -> None:
        """Removing something that is not a member changes nothing."""
        siblings, items = make_list(1, 1)
        siblings.remove(Item("stranger"))
        assert list(siblings) == items
        assert len(siblings) == 2

    def test_remove_member_of_other_list_is_ignored(self) -> None:
        """A member of another list keeps its place there."""
        siblings, items = make_list(1, 1)
        others, strangers = make_list(1, 1, 1)
        siblings.remove(strangers[1])
        assert list(siblings) == items
        assert list(others) == strangers
        assert strangers[1].prev is strangers[0]
        assert strangers[1].siblings is others

    def test_membership_follows_moves(self) -> None:
        """A removed member stops being contained; re-inserting restores it."""
        siblings, items = make_list(1, 1)
        others = SiblingList()
        assert siblings.contains(items[0])
        siblings.remove(items[0])
        assert not siblings.contains(items[0])
        others.append(items[0])
        assert others.contains(items[0])
        assert not siblings.contains(items[0])

    def test_iterator_survives_removal(self) -> None:
        """The current member may be removed while iterating."""
        siblings, items = make_list(1, 1, 1)
        seen = []
        for item in siblings:
            seen.append(item)
            siblings.remove(item)
        assert seen == items
        assert len(siblings) == 0
        assert siblings.head is None
        assert siblings.tail is None

    def test_iterator_from_start(self) -> None:
        """iterator(start) walks from the given member to the tail."""
        siblings, items = make_list(1, 1, 1)
        assert list(siblings.iterator(items[1])) == items[1:]


class TestLookups:
    """Tests for positional and offset lookups."""

    def test_at(self) -> None:
        """at() indexes by position, not by length."""
        siblings, items = make_list(5, 0, 2)
        assert siblings.at(0) is items[0]
        assert siblings.at(2) is items[2]
        assert siblings.at(3) is None
        assert siblings.at(-1) is None

    def test_contains(self) -> None:
        siblings, items = make_list(1)
        assert siblings.contains(items[0])
        assert not siblings.contains(Item("other"))

    def test_offset_and_length(self) -> None:
        """offset() sums the lengths before a member."""
        siblings, items = make_list(3, 0, 2)
        assert siblings.offset(items[0]) == 0
        assert siblings.offset(items[1]) == 3
        assert siblings.offset(items[2]) == 3
        assert siblings.length() == 5

    def test_offset_of_non_member_raises(self) -> None:
        siblings, _ = make_list(1)
        with pytest.raises(ValueError):
            siblings.offset(Item("other"))

    def test_find_inside_member(self) -> None:
        siblings, items = make_list(3, 2)
        assert siblings.find(1) == (items[0], 1)
        assert siblings.find(4) == (items[1], 1)

    def test_find_boundary_prefers_following(self) -> None:
        """On a boundary the following member wins."""
        siblings, items = make_list(3, 2)
        assert siblings.find(3) == (items[1], 0)

    def test_find_boundary_inclusive_prefers_preceding(self) -> None:
        """With inclusive the preceding member wins."""
        siblings, items = make_list(3, 2)
        assert siblings.find(3, inclusive=True) == (items[0], 3)

    def test_find_inclusive_yields_to_zero_length_member(self) -> None:
        """A zero-length follower wins even when inclusive."""
        siblings, items = make_list(3, 0, 2)
        assert siblings.find(3, inclusive=True) == (items[1], 0)
        assert siblings.find(3) == (items[2], 0)

    def test_find_past_end(self) -> None:
        """Past the end nothing is found unless inclusive selects the tail."""
        siblings, items = make_list(3, 2)
        assert siblings.find(5) == (None, 0)
        assert siblings.find(5, inclusive=True) == (items[1], 2)
        assert siblings.find(9) == (None, 0)

    def test_find_empty(self) -> None:
        assert SiblingList().find(0) == (None, 0)


class TestForEachAt:
    """Tests for range visits."""

    def test_visits_overlapping_members(self) -> None:
        """Each overlapping member gets its local offset and overlap."""
        siblings, items = make_list(3, 0, 2)
        visits = []
        siblings.for_each_at(1, 3, lambda item, offset, overlap: visits.append((item, offset, overlap)))
        assert visits == [(items[0], 1, 2), (items[2], 0, 1)]

    def test_single_member_range(self) -> None:
        siblings, items = make_list(5, 5)
        visits = []
        siblings.for_each_at(6, 2, lambda item, offset, overlap: visits.append((item, offset, overlap)))
        assert visits == [(items[1], 1, 2)]

    def test_empty_range_visits_nothing(self) -> None:
        siblings, _ = make_list(3)
        visits = []
        siblings.for_each_at(1, 0, lambda *args: visits.append(args))
        assert visits == []

    def test_range_past_end_visits_nothing(self) -> None:
        siblings, _ = make_list(3)
        visits = []
        siblings.for_each_at(3, 4, lambda *args: visits.append(args))
        assert visits == []
