"""Scope bitmask shared by node variants and attributors.

A scope combines a kind group (ATTRIBUTE or BLOT) with a level group
(INLINE, BLOCK or ROOT). Two scopes match when they intersect in both groups.
"""

from __future__ import annotations

from enum import IntFlag


class Scope(IntFlag):
    """Kind and level bits for registry lookups."""

    ATTRIBUTE_KIND = 0b00001
    BLOT_KIND = 0b00010
    INLINE_LEVEL = 0b00100
    BLOCK_LEVEL = 0b01000
    ROOT_LEVEL = 0b10000

    TYPE = ATTRIBUTE_KIND | BLOT_KIND
    LEVEL = INLINE_LEVEL | BLOCK_LEVEL | ROOT_LEVEL

    ATTRIBUTE = ATTRIBUTE_KIND | LEVEL
    BLOT = BLOT_KIND | LEVEL
    INLINE = INLINE_LEVEL | TYPE
    BLOCK = BLOCK_LEVEL | TYPE
    ROOT = ROOT_LEVEL | TYPE

    INLINE_BLOT = INLINE_LEVEL | BLOT_KIND
    BLOCK_BLOT = BLOCK_LEVEL | BLOT_KIND
    ROOT_BLOT = ROOT_LEVEL | BLOT_KIND
    INLINE_ATTRIBUTE = INLINE_LEVEL | ATTRIBUTE_KIND
    BLOCK_ATTRIBUTE = BLOCK_LEVEL | ATTRIBUTE_KIND

    ANY = TYPE | LEVEL


def scope_matches(requested: Scope | int, candidate: Scope | int) -> bool:
    """Return True if both the level and the kind groups intersect."""
    return bool(requested & Scope.LEVEL & candidate) and bool(
        requested & Scope.TYPE & candidate
    )


def level_of(scope: Scope | int) -> Scope:
    """Return the level bits of a scope, keeping both kind bits.

    Used to ask the registry for anything (blot or attribute) living at the
    same level as a given node.
    """
    return Scope((scope & Scope.LEVEL) | Scope.TYPE)
