"""
Tests for content.proximity module - nearby price collection.

Tests cover:
- ascend() level counting and root clamping
- Candidate collection at the start level
- Widening by one level when the start level is empty
- Stopping at max_levels
- Query failures reported as "no candidates"
"""

import pytest

from isp_pricing_verifier.content.proximity import (
    ascend,
    collect_nearby_prices,
    texts_within,
)
from isp_pricing_verifier.content.tree import TextTree, el
from isp_pricing_verifier.exceptions import ContentQueryError


def _card(label, *prices):
    """card > header > label, card > footer > prices."""
    label_node = el("span", label)
    card = el(
        "div",
        el("div", label_node, classes="header"),
        el("div", *(el("span", price) for price in prices), classes="footer"),
        classes="card",
    )
    return card, label_node


class TestAscend:
    """Tests for ascend()."""

    @pytest.mark.asyncio
    async def test_zero_levels_is_identity(self):
        card, label = _card("40GB", "R199")
        tree = TextTree(el("body", card))
        assert await ascend(tree, label, 0) is label

    @pytest.mark.asyncio
    async def test_two_levels(self):
        card, label = _card("40GB", "R199")
        tree = TextTree(el("body", card))
        assert await ascend(tree, label, 2) is card

    @pytest.mark.asyncio
    async def test_clamps_at_root(self):
        card, label = _card("40GB", "R199")
        root = el("body", card)
        tree = TextTree(root)
        assert await ascend(tree, label, 10) is root

    @pytest.mark.asyncio
    async def test_negative_levels_rejected(self):
        card, label = _card("40GB", "R199")
        tree = TextTree(el("body", card))
        with pytest.raises(ValueError, match="non-negative"):
            await ascend(tree, label, -1)


class TestTextsWithin:
    """Tests for texts_within()."""

    @pytest.mark.asyncio
    async def test_strips_and_drops_empty(self):
        scope = el("div", el("span", "  R199 "), el("span", "R249pm"))
        tree = TextTree(el("body", scope))
        assert await texts_within(tree, scope, r"R[0-9,]+") == ["R199", "R249pm"]


class TestCollectNearbyPrices:
    """Tests for collect_nearby_prices()."""

    @pytest.mark.asyncio
    async def test_prices_of_own_card(self):
        card, label = _card("40GB", "R249", "R299pm")
        other, _ = _card("80GB", "R349")
        tree = TextTree(el("body", el("section", card, other)))

        candidates = await collect_nearby_prices(tree, label)

        assert candidates == ["R249", "R299pm"]

    @pytest.mark.asyncio
    async def test_widens_one_level_when_card_has_no_price(self):
        card, label = _card("40GB")
        other, _ = _card("80GB", "R349")
        grid = el("section", card, other)
        tree = TextTree(el("body", grid, el("footer", el("span", "R1 from R9"))))

        candidates = await collect_nearby_prices(tree, label)

        # Level 3 is the grid: the sibling card's price, not the page footer
        assert candidates == ["R349"]

    @pytest.mark.asyncio
    async def test_stops_at_max_levels(self):
        card, label = _card("40GB")
        tree = TextTree(el("body", el("section", card), el("span", "R999")))

        candidates = await collect_nearby_prices(tree, label)

        assert candidates == []

    @pytest.mark.asyncio
    async def test_custom_levels(self):
        card, label = _card("40GB")
        tree = TextTree(el("body", el("section", card), el("span", "R999")))

        candidates = await collect_nearby_prices(tree, label, max_levels=4)

        assert candidates == ["R999"]

    @pytest.mark.asyncio
    async def test_comma_grouped_candidates(self):
        card, label = _card("250↑250Mbps", "R1,039pm")
        tree = TextTree(el("body", card))
        assert await collect_nearby_prices(tree, label) == ["R1,039pm"]

    @pytest.mark.asyncio
    async def test_start_above_max_rejected(self):
        card, label = _card("40GB", "R199")
        tree = TextTree(el("body", card))
        with pytest.raises(ValueError, match="cannot exceed"):
            await collect_nearby_prices(tree, label, start_levels=4, max_levels=3)

    @pytest.mark.asyncio
    async def test_query_failure_returns_no_candidates(self, caplog):
        card, label = _card("40GB", "R199")
        tree = TextTree(el("body", card))

        async def broken_find_pattern(pattern, within=None):
            raise ContentQueryError("detached node")

        tree.find_pattern = broken_find_pattern

        candidates = await collect_nearby_prices(tree, label)

        assert candidates == []
        assert "Could not collect nearby prices" in caplog.text
