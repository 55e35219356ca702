"""Shared test fixtures for extratext."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from extratext.config import Settings
from extratext.live import LiveDocument, LiveElement, LiveNode
from extratext.nodes import Scroll, create_scroll
from extratext.registry import Registry
from extratext.variants import DEFAULT_DEFINITIONS

VOID_TAGS = {"BR", "IMG"}


def to_html(live: LiveNode) -> str:
    """Serialize a live subtree for compact assertions."""
    if live.is_text:
        return live.data
    assert isinstance(live, LiveElement)
    tag = live.tag.lower()
    attrs = "".join(f' {name}="{live.get_attribute(name)}"' for name in live.attribute_names())
    if live.tag in VOID_TAGS:
        return f"<{tag}{attrs}>"
    inner = "".join(to_html(child) for child in live.children)
    return f"<{tag}{attrs}>{inner}</{tag}>"


@pytest.fixture
def html() -> Callable[[LiveNode], str]:
    return to_html


@pytest.fixture
def document() -> LiveDocument:
    return LiveDocument()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def registry(document: LiveDocument, settings: Settings) -> Registry:
    """A registry over the default variants, not attached to any tree."""
    return Registry(DEFAULT_DEFINITIONS, document, settings)


@pytest.fixture
def scroll(document: LiveDocument, settings: Settings) -> Scroll:
    """An empty, observed document tree."""
    return create_scroll(document=document, settings=settings)


@pytest.fixture
def make_live(document: LiveDocument) -> Callable[..., LiveElement]:
    """Build live elements: ``make_live("P", "text", child, class_="x")``."""

    def build(tag: str, *children: str | LiveNode, **attributes: str) -> LiveElement:
        element = document.create_element(tag)
        for name, value in attributes.items():
            element.set_attribute(name.rstrip("_"), value)
        for child in children:
            if isinstance(child, str):
                child = document.create_text(child)
            element.append_child(child)
        return element

    return build


@pytest.fixture
def build_scroll(
    document: LiveDocument, settings: Settings
) -> Callable[[LiveElement], Scroll]:
    """Mirror an existing live root."""

    def build(live_root: LiveElement, **kwargs: object) -> Scroll:
        kwargs.setdefault("settings", settings)
        return create_scroll(live_root=live_root, document=document, **kwargs)

    return build
