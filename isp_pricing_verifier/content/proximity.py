"""
Breadth-limited ancestor search over a content source.

When a price cannot be found anywhere on the page, the prices rendered near
the package are collected for the failure message. "Near" means inside the
container reached by climbing a fixed number of levels from the package
occurrence, widening one level at a time while nothing turns up.
"""

import logging
import re

from isp_pricing_verifier.config.constants import (
    PRICE_CANDIDATE_PATTERN,
    PROXIMITY_MAX_LEVELS,
    PROXIMITY_START_LEVELS,
)

from .source import ContentSource, Occurrence

logger = logging.getLogger(__name__)


async def ascend(source: ContentSource, node: Occurrence, levels: int) -> Occurrence:
    """Climb `levels` containment levels from `node` (stops at the root)."""
    if levels < 0:
        raise ValueError(f"levels must be non-negative, got: {levels}")
    for _ in range(levels):
        node = await source.parent(node)
    return node


async def texts_within(
    source: ContentSource, scope: Occurrence, pattern: str | re.Pattern[str]
) -> list[str]:
    """Stripped, non-empty texts of the nodes under `scope` matching `pattern`."""
    texts = []
    for node in await source.find_pattern(pattern, within=scope):
        text = (await source.text_content(node)).strip()
        if text:
            texts.append(text)
    return texts


async def collect_nearby_prices(
    source: ContentSource,
    anchor: Occurrence,
    pattern: str | re.Pattern[str] = PRICE_CANDIDATE_PATTERN,
    start_levels: int = PROXIMITY_START_LEVELS,
    max_levels: int = PROXIMITY_MAX_LEVELS,
) -> list[str]:
    """
    Collect price texts rendered near a package occurrence.

    Climbs `start_levels` levels from the anchor and collects every text
    matching `pattern` in that subtree. While the result is empty and
    `max_levels` is not reached, climbs one more level and searches again.

    The result is diagnostic only. A query failure during the search is
    logged and reported as "no candidates" instead of propagating.

    Args:
        source: Content source the anchor belongs to
        anchor: Package occurrence to search around
        pattern: Regex of a price-looking text
        start_levels: Levels to climb before the first search
        max_levels: Highest level searched

    Returns:
        Candidate price texts in document order (possibly empty)

    Example:
        >>> await collect_nearby_prices(tree, package_node)
        ['R249', 'R299pm']
    """
    if start_levels > max_levels:
        raise ValueError(
            f"start_levels ({start_levels}) cannot exceed max_levels ({max_levels})"
        )

    try:
        levels = start_levels
        scope = await ascend(source, anchor, levels)
        candidates = await texts_within(source, scope, pattern)
        while not candidates and levels < max_levels:
            levels += 1
            scope = await source.parent(scope)
            candidates = await texts_within(source, scope, pattern)
    except Exception as e:
        logger.warning(f"Could not collect nearby prices: {e}", exc_info=True)
        return []

    logger.debug(f"Found {len(candidates)} candidate price(s) at level {levels}")
    return candidates
