"""Tests for Scope, VariantTable and Registry."""

from __future__ import annotations

import pytest

from extratext.attributors import Attributor, ClassAttributor
from extratext.exceptions import DefinitionError, UnregisteredVariantError
from extratext.live import LiveDocument
from extratext.nodes import Format, Leaf, Node, Scroll, Text
from extratext.registry import NodeDefinition, Registry, VariantTable
from extratext.scope import Scope, level_of, scope_matches
from extratext.variants import DEFAULT_DEFINITIONS


def minimal_definitions(*extra: object) -> list:
    return [
        NodeDefinition(
            "scroll",
            Scroll,
            Scope.ROOT_BLOT,
            tag_name="DIV",
            generic=True,
            allowed_children=(Scope.BLOCK_BLOT,),
            default_child="block",
        ),
        NodeDefinition("block", Format, Scope.BLOCK_BLOT, tag_name="P", generic=True),
        NodeDefinition("text", Text, Scope.INLINE_BLOT),
        *extra,
    ]


class TestScope:
    """Tests for scope masks."""

    def test_combined_masks(self) -> None:
        assert Scope.ANY == Scope.TYPE | Scope.LEVEL
        assert Scope.INLINE_BLOT == Scope.INLINE_LEVEL | Scope.BLOT_KIND
        assert Scope.BLOCK & Scope.ATTRIBUTE_KIND
        assert Scope.BLOCK & Scope.BLOT_KIND

    def test_matches_requires_both_groups(self) -> None:
        """A match needs a shared level bit and a shared kind bit."""
        assert scope_matches(Scope.BLOT, Scope.INLINE_BLOT)
        assert scope_matches(Scope.INLINE, Scope.INLINE_ATTRIBUTE)
        assert not scope_matches(Scope.BLOCK, Scope.INLINE_BLOT)
        assert not scope_matches(Scope.ATTRIBUTE, Scope.BLOCK_BLOT)
        assert scope_matches(Scope.ANY, Scope.ROOT_BLOT)

    def test_level_of_keeps_both_kinds(self) -> None:
        assert level_of(Scope.BLOCK_BLOT) == Scope.BLOCK
        assert level_of(Scope.INLINE_ATTRIBUTE) == Scope.INLINE


class TestVariantTable:
    """Tests for definition validation."""

    def test_default_table_builds(self) -> None:
        table = VariantTable(DEFAULT_DEFINITIONS)
        assert table.text is not None
        assert table.text.name == "text"
        assert set(table.attributes) == {"align", "color", "font", "id"}
        assert len(table) == len(DEFAULT_DEFINITIONS)

    def test_duplicate_name_rejected(self) -> None:
        with pytest.raises(DefinitionError):
            VariantTable(minimal_definitions(NodeDefinition("block", Format, Scope.BLOCK_BLOT, tag_name="H1")))

    def test_duplicate_attribute_rejected(self) -> None:
        with pytest.raises(DefinitionError):
            VariantTable([Attributor("id", "id"), Attributor("id", "data-id")])

    def test_abstract_class_rejected(self) -> None:
        """The abstract base class cannot back a variant."""
        with pytest.raises(DefinitionError, match="abstract"):
            VariantTable([NodeDefinition("thing", Node, Scope.INLINE_BLOT, tag_name="X")])

    def test_shared_tag_without_class_rejected(self) -> None:
        with pytest.raises(DefinitionError, match="share tag"):
            VariantTable(minimal_definitions(NodeDefinition("para", Format, Scope.BLOCK_BLOT, tag_name="P")))

    def test_shared_class_rejected(self) -> None:
        with pytest.raises(DefinitionError, match="share class"):
            VariantTable(
                [
                    NodeDefinition("a", Format, Scope.BLOCK_BLOT, tag_name="P", class_name="x"),
                    NodeDefinition("b", Format, Scope.BLOCK_BLOT, tag_name="DIV", class_name="x"),
                ]
            )

    def test_two_generics_at_one_level_rejected(self) -> None:
        with pytest.raises(DefinitionError, match="generic"):
            VariantTable(
                minimal_definitions(
                    NodeDefinition("other", Format, Scope.BLOCK_BLOT, tag_name="SECTION", generic=True)
                )
            )

    def test_node_definition_requires_blot_scope(self) -> None:
        with pytest.raises(DefinitionError):
            NodeDefinition("bad", Format, Scope.INLINE_ATTRIBUTE, tag_name="B")

    def test_tag_names_are_uppercased(self) -> None:
        definition = NodeDefinition("h", Format, Scope.BLOCK_BLOT, tag_name=("h1", "h2"))
        assert definition.tags == ("H1", "H2")

    def test_class_hint_discriminates_shared_tag(self, document: LiveDocument) -> None:
        """With a class hint two variants may share a tag, in either order."""
        note = NodeDefinition("note", Format, Scope.BLOCK_BLOT, tag_name="P", class_name="note")
        for definitions in (minimal_definitions(note), [note, *minimal_definitions()]):
            registry = Registry(definitions, document)
            plain = document.create_element("P")
            flagged = document.create_element("P")
            flagged.add_class("note")
            assert registry.query(plain).name == "block"
            assert registry.query(flagged).name == "note"


class TestQuery:
    """Tests for Registry.query."""

    def test_query_by_name(self, registry: Registry) -> None:
        assert registry.query("bold").name == "bold"
        assert registry.query("missing") is None

    def test_query_respects_scope(self, registry: Registry) -> None:
        """A name outside the requested scope resolves to None."""
        assert registry.query("bold", Scope.BLOCK) is None
        assert registry.query("bold", Scope.INLINE).name == "bold"
        assert registry.query("align", Scope.BLOT) is None
        assert registry.query("align", Scope.BLOCK) is not None

    def test_query_attribute_by_name_and_key(self, document: LiveDocument) -> None:
        registry = Registry([ClassAttributor("indent", "ql-indent")], document)
        assert registry.query("indent").name == "indent"
        assert registry.query("ql-indent").name == "indent"

    def test_query_live_nodes(self, registry: Registry, document: LiveDocument) -> None:
        assert registry.query(document.create_element("p")).name == "block"
        assert registry.query(document.create_element("H3")).name == "header"
        assert registry.query(document.create_text("x")).name == "text"
        assert registry.query(document.create_element("BLINK")) is None

    def test_query_scope_returns_generic(self, registry: Registry) -> None:
        assert registry.query(Scope.INLINE).name == "inline"
        assert registry.query(Scope.BLOCK_BLOT).name == "block"
        assert registry.query(Scope.ROOT).name == "scroll"

    def test_generic(self, registry: Registry) -> None:
        assert registry.generic(Scope.INLINE_BLOT).name == "inline"
        assert registry.generic(Scope.BLOCK_ATTRIBUTE).name == "block"


class TestCreate:
    """Tests for Registry.create and the identity map."""

    def test_create_by_name(self, registry: Registry) -> None:
        node = registry.create("bold")
        assert isinstance(node, Format)
        assert node.live.tag == "STRONG"
        assert registry.find(node.live) is node

    def test_create_picks_tag_from_value(self, registry: Registry) -> None:
        """Numeric values select among several tag hints."""
        assert registry.create("header", 2).live.tag == "H2"
        assert registry.create("header", "h4").live.tag == "H4"
        assert registry.create("header").live.tag == "H1"

    def test_create_unknown_raises(self, registry: Registry) -> None:
        with pytest.raises(UnregisteredVariantError) as exc_info:
            registry.create("marquee")
        assert exc_info.value.query == "marquee"

    def test_create_adopts_live_node(self, registry: Registry, document: LiveDocument) -> None:
        live = document.create_element("EM")
        node = registry.create(live)
        assert node.live is live
        assert node.name == "italic"

    def test_create_unknown_live_raises(self, registry: Registry, document: LiveDocument) -> None:
        with pytest.raises(UnregisteredVariantError):
            registry.create(document.create_element("BLINK"))

    def test_create_without_tag_raises(self, document: LiveDocument) -> None:
        registry = Registry(
            minimal_definitions(NodeDefinition("nameless", Format, Scope.BLOCK_BLOT)), document
        )
        with pytest.raises(DefinitionError, match="tag"):
            registry.create("nameless")

    def test_create_hook(self, registry: Registry) -> None:
        link = registry.create("link", "https://example.com")
        assert link.live.get_attribute("href") == "https://example.com"

    def test_create_text(self, registry: Registry) -> None:
        node = registry.create_text("abc")
        assert isinstance(node, Text)
        assert node.value() == "abc"
        assert node.length() == 3

    def test_abstract_node_cannot_be_instantiated(
        self, registry: Registry, document: LiveDocument
    ) -> None:
        definition = NodeDefinition("raw", Leaf, Scope.INLINE_BLOT, tag_name="HR")
        with pytest.raises(DefinitionError):
            Node(registry, definition, document.create_element("HR"))

    def test_find_bubbles(self, registry: Registry, document: LiveDocument) -> None:
        """With bubble, the nearest mapped ancestor is returned."""
        node = registry.create("bold")
        orphan = document.create_text("x")
        node.live.append_child(orphan)
        assert registry.find(orphan) is None
        assert registry.find(orphan, bubble=True) is node
        assert registry.find(None) is None

    def test_unbind(self, registry: Registry) -> None:
        node = registry.create("bold")
        revision = registry.revision
        registry.unbind(node)
        assert registry.find(node.live) is None
        assert registry.revision == revision + 1
        registry.unbind(node)
        assert registry.revision == revision + 1

    def test_registries_are_independent(self, document: LiveDocument) -> None:
        """Identity maps are per registry."""
        first = Registry(DEFAULT_DEFINITIONS, document)
        second = Registry(DEFAULT_DEFINITIONS, document)
        node = first.create("bold")
        assert first.find(node.live) is node
        assert second.find(node.live) is None
