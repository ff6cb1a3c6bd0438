"""
Price matcher.

Prices are compared as the literal text the page advertises, never as
numbers. An expected price is searched for as written, then with the
per-month suffix, then with a thousands separator inserted:

    >>> price_variants("R1039pm")
    ['R1039pm', 'R1039pmpm', 'R1 039pm']
    >>> price_variants("R199")
    ['R199', 'R199pm']

Any other rendering ("R1,039pm", "R1 039.00") is reported as not found even
though the amount is the same. When no rewrite is found, the prices rendered
near the package are collected for the failure message.
"""

import logging
import re

from isp_pricing_verifier.config.constants import PER_MONTH_SUFFIX
from isp_pricing_verifier.content.proximity import collect_nearby_prices
from isp_pricing_verifier.content.source import ContentSource, Occurrence
from isp_pricing_verifier.exceptions import ContentQueryError

from .models import DualPriceCheck, PriceCheck
from .observer import NullObserver

logger = logging.getLogger(__name__)

THOUSANDS_RE = re.compile(r"(\d{1,3})(\d{3})")


def price_variants(expected: str) -> list[str]:
    """Renderings of `expected` that count as a match, in search order."""
    variants = []
    for variant in (
        expected,
        expected + PER_MONTH_SUFFIX,
        THOUSANDS_RE.sub(r"\1 \2", expected, count=1),
    ):
        if variant not in variants:
            variants.append(variant)
    return variants


async def verify(
    anchor: Occurrence | None,
    expected: str,
    source: ContentSource,
    observer: NullObserver | None = None,
    role: str = "price",
) -> PriceCheck:
    """
    Look up one expected price.

    The search is page-wide. The anchor (the package occurrence) is only
    used to collect nearby candidates when the price is missing.

    Args:
        anchor: Occurrence of the package the price belongs to
        expected: Price string from the pricing sheet
        source: Content source of the plan page
        observer: Diagnostic hooks (default: none)
        role: Label passed to the observer ("price", "deal", "original")

    Returns:
        PriceCheck with the matched rewrite, or with nearby candidates
    """
    observer = observer or NullObserver()

    for variant in price_variants(expected):
        occurrences = await source.find_text(variant)
        if occurrences:
            check = PriceCheck(
                expected=expected,
                found=True,
                matched_text=variant,
                occurrences=occurrences,
            )
            observer.on_price_checked(role, check)
            return check

    candidates = []
    if anchor is not None:
        candidates = await collect_nearby_prices(source, anchor)

    check = PriceCheck(expected=expected, found=False, candidates=candidates)
    observer.on_price_checked(role, check)
    return check


async def has_strikethrough(source: ContentSource, occurrences: list[Occurrence]) -> bool:
    """
    True if any occurrence renders struck through.

    Stops at the first struck occurrence. Style inspection failures count as
    "not struck"; the check is diagnostic only.
    """
    for node in occurrences:
        try:
            if await source.is_struck_through(node):
                return True
        except ContentQueryError as e:
            logger.warning(f"Strikethrough inspection failed: {e}")
    return False


async def verify_dual(
    anchor: Occurrence | None,
    deal: str,
    original: str,
    source: ContentSource,
    observer: NullObserver | None = None,
) -> DualPriceCheck:
    """
    Look up the deal and original price of a promotional display.

    Both prices are resolved independently with verify(). When both are
    found, every occurrence of the matched original price is inspected for
    a strikethrough treatment. Only the deal price decides pass or fail.
    """
    observer = observer or NullObserver()

    deal_check = await verify(anchor, deal, source, observer, role="deal")
    original_check = await verify(anchor, original, source, observer, role="original")

    result = DualPriceCheck(deal=deal_check, original=original_check)
    if deal_check.found and original_check.found:
        result.strikethrough_confirmed = await has_strikethrough(
            source, original_check.occurrences
        )
        observer.on_strikethrough(original, result.strikethrough_confirmed)

    return result
