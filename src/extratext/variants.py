"""Default variant table for rich text documents.

``DEFAULT_DEFINITIONS`` is what ``create_scroll`` registers when the caller
brings no definitions. Hosts extend it by building their own list::

    definitions = [*DEFAULT_DEFINITIONS, NodeDefinition("code", Format, ...)]
"""

from __future__ import annotations

from typing import Any

from extratext.attributors import Attributor, ClassAttributor, StyleAttributor
from extratext.live import LiveElement, LiveFactory, LiveNode
from extratext.nodes import Embed, Format, Leaf, Scroll, Text
from extratext.registry import Definition, NodeDefinition
from extratext.scope import Scope

HEADER_TAGS = ("H1", "H2", "H3", "H4", "H5", "H6")


def header_level(definition: NodeDefinition, live: LiveNode) -> int | None:
    if isinstance(live, LiveElement) and live.tag in HEADER_TAGS:
        return HEADER_TAGS.index(live.tag) + 1
    return None


def create_link(definition: NodeDefinition, factory: LiveFactory, value: Any) -> LiveNode:
    live = factory.create_element("A")
    if value and value is not True:
        live.set_attribute("href", value)
    return live


def link_href(definition: NodeDefinition, live: LiveNode) -> str | None:
    if isinstance(live, LiveElement):
        return live.get_attribute("href")
    return None


def create_image(definition: NodeDefinition, factory: LiveFactory, value: Any) -> LiveNode:
    live = factory.create_element("IMG")
    if value and value is not True:
        live.set_attribute("src", value)
    return live


def image_src(definition: NodeDefinition, live: LiveNode) -> str | None:
    if isinstance(live, LiveElement):
        return live.get_attribute("src")
    return None


INLINE_CHILDREN = (Scope.INLINE_BLOT,)

DEFAULT_DEFINITIONS: tuple[Definition, ...] = (
    # Root and blocks
    NodeDefinition(
        "scroll",
        Scroll,
        Scope.ROOT_BLOT,
        tag_name="DIV",
        generic=True,
        allowed_children=(Scope.BLOCK_BLOT,),
        default_child="block",
    ),
    NodeDefinition(
        "block",
        Format,
        Scope.BLOCK_BLOT,
        tag_name="P",
        generic=True,
        allowed_children=INLINE_CHILDREN,
        default_child="break",
    ),
    NodeDefinition(
        "header",
        Format,
        Scope.BLOCK_BLOT,
        tag_name=HEADER_TAGS,
        allowed_children=INLINE_CHILDREN,
        default_child="break",
        formats=header_level,
    ),
    # Inline formats
    NodeDefinition(
        "inline",
        Format,
        Scope.INLINE_BLOT,
        tag_name="SPAN",
        generic=True,
        allowed_children=INLINE_CHILDREN,
        merge_adjacent=True,
        unwrap_when_plain=True,
    ),
    NodeDefinition(
        "bold",
        Format,
        Scope.INLINE_BLOT,
        tag_name="STRONG",
        allowed_children=INLINE_CHILDREN,
        merge_adjacent=True,
    ),
    NodeDefinition(
        "italic",
        Format,
        Scope.INLINE_BLOT,
        tag_name="EM",
        allowed_children=INLINE_CHILDREN,
        merge_adjacent=True,
    ),
    NodeDefinition(
        "link",
        Format,
        Scope.INLINE_BLOT,
        tag_name="A",
        allowed_children=INLINE_CHILDREN,
        merge_adjacent=True,
        create=create_link,
        formats=link_href,
    ),
    # Leaves
    NodeDefinition("text", Text, Scope.INLINE_BLOT),
    NodeDefinition(
        "break",
        Leaf,
        Scope.INLINE_BLOT,
        tag_name="BR",
        placeholder=True,
        length=0,
    ),
    NodeDefinition(
        "image",
        Embed,
        Scope.INLINE_BLOT,
        tag_name="IMG",
        create=create_image,
        value=image_src,
    ),
    # Attributes
    ClassAttributor("align", "align", scope=Scope.BLOCK, whitelist=("right", "center", "justify")),
    StyleAttributor("color", "color", scope=Scope.INLINE),
    ClassAttributor("font", "font", scope=Scope.INLINE, whitelist=("serif", "monospace")),
    Attributor("id", "id"),
)
