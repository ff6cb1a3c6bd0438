"""
Tests for content.tree module - in-memory content source.

Tests cover:
- Deepest-match semantics of literal and pattern search
- Case-insensitive, whitespace-normalized literal matching
- Scoped pattern search
- Parent traversal clamping at the root
- Strikethrough detection (tag, computed style, inline style, class)
"""

import pytest

from isp_pricing_verifier.content.source import normalize_whitespace
from isp_pricing_verifier.content.tree import TextNode, TextTree, el


@pytest.fixture
def pricing_page():
    """Two LTE pricing cards inside a grid."""
    first = el(
        "div",
        el("h3", "40GB"),
        el("p", "40GB + 40GB Night Time Data"),
        el("span", "R199", classes="price"),
        classes="card",
    )
    second = el(
        "div",
        el("h3", "80GB"),
        el("span", "R249", classes="price"),
        classes="card",
    )
    return el("body", el("section", first, second, classes="grid"))


class TestNormalizeWhitespace:
    """Tests for normalize_whitespace()."""

    def test_collapses_runs(self):
        assert normalize_whitespace("R1   039\n pm") == "R1 039 pm"

    def test_non_breaking_space(self):
        assert normalize_whitespace("R1 039pm") == "R1 039pm"

    def test_strips_ends(self):
        assert normalize_whitespace("  40GB  ") == "40GB"


class TestTextNode:
    """Tests for the TextNode builder."""

    def test_el_splits_text_and_children(self):
        node = el("div", "Deal ", el("span", "R559pm"))
        assert node.text == "Deal "
        assert len(node.children) == 1
        assert node.children[0].parent is node

    def test_rendered_text_concatenates_descendants(self):
        node = el("div", el("span", "R1"), el("span", " 039pm"))
        assert node.rendered_text == "R1 039pm"

    def test_classes_from_string(self):
        assert el("p", classes="price line-through").classes == ("price", "line-through")

    def test_append_sets_parent(self):
        parent = TextNode(tag="div")
        child = TextNode(tag="span", text="R199")
        parent.append(child)
        assert child.parent is parent
        assert parent.children == [child]


class TestFindText:
    """Tests for TextTree.find_text()."""

    @pytest.mark.asyncio
    async def test_returns_deepest_node(self, pricing_page):
        tree = TextTree(pricing_page)
        nodes = await tree.find_text("R199")

        assert len(nodes) == 1
        assert nodes[0].tag == "span"

    @pytest.mark.asyncio
    async def test_every_deepest_match_in_document_order(self, pricing_page):
        tree = TextTree(pricing_page)
        nodes = await tree.find_text("40GB")

        assert [n.tag for n in nodes] == ["h3", "p"]

    @pytest.mark.asyncio
    async def test_case_insensitive(self, pricing_page):
        tree = TextTree(pricing_page)
        assert await tree.find_text("40gb")

    @pytest.mark.asyncio
    async def test_substring_match(self, pricing_page):
        tree = TextTree(pricing_page)
        nodes = await tree.find_text("Night Time")
        assert [n.tag for n in nodes] == ["p"]

    @pytest.mark.asyncio
    async def test_text_split_across_children_matches_container(self):
        price = el("div", el("span", "R1"), el("span", "039pm"))
        tree = TextTree(el("body", price))

        nodes = await tree.find_text("R1039pm")

        assert nodes == [price]

    @pytest.mark.asyncio
    async def test_no_match(self, pricing_page):
        tree = TextTree(pricing_page)
        assert await tree.find_text("999GB") == []

    @pytest.mark.asyncio
    async def test_empty_needle(self, pricing_page):
        tree = TextTree(pricing_page)
        assert await tree.find_text("   ") == []


class TestFindPattern:
    """Tests for TextTree.find_pattern()."""

    @pytest.mark.asyncio
    async def test_page_wide(self, pricing_page):
        tree = TextTree(pricing_page)
        nodes = await tree.find_pattern(r"R[0-9,]+")
        assert [n.text for n in nodes] == ["R199", "R249"]

    @pytest.mark.asyncio
    async def test_within_scope(self, pricing_page):
        tree = TextTree(pricing_page)
        second_card = pricing_page.children[0].children[1]

        nodes = await tree.find_pattern(r"R[0-9,]+", within=second_card)

        assert [n.text for n in nodes] == ["R249"]

    @pytest.mark.asyncio
    async def test_pattern_is_case_sensitive(self, pricing_page):
        tree = TextTree(pricing_page)
        assert await tree.find_pattern(r"r199") == []


class TestParent:
    """Tests for TextTree.parent()."""

    @pytest.mark.asyncio
    async def test_returns_container(self, pricing_page):
        tree = TextTree(pricing_page)
        price = (await tree.find_text("R199"))[0]
        card = await tree.parent(price)
        assert "card" in card.classes

    @pytest.mark.asyncio
    async def test_root_is_its_own_parent(self, pricing_page):
        tree = TextTree(pricing_page)
        assert await tree.parent(pricing_page) is pricing_page


class TestIsStruckThrough:
    """Tests for TextTree.is_struck_through()."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "node",
        [
            el("del", "R659pm"),
            el("s", "R659pm"),
            el("span", "R659pm", computed_style={"text-decoration": "line-through solid"}),
            el("span", "R659pm", computed_style={"text-decoration-line": "line-through"}),
            el("span", "R659pm", style={"text-decoration": "line-through"}),
            el("span", "R659pm", classes="text-grey line-through"),
        ],
    )
    async def test_struck_variants(self, node):
        tree = TextTree(el("body", node))
        assert await tree.is_struck_through(node) is True

    @pytest.mark.asyncio
    async def test_plain_price_not_struck(self):
        node = el("span", "R659pm", classes="price", computed_style={"text-decoration": "none"})
        tree = TextTree(el("body", node))
        assert await tree.is_struck_through(node) is False

    @pytest.mark.asyncio
    async def test_similar_class_not_struck(self):
        node = el("span", "R659pm", classes="no-line-through-here")
        tree = TextTree(el("body", node))
        assert await tree.is_struck_through(node) is False
