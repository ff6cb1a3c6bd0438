"""
Package matcher.

Resolves an expected package label to the page nodes that render it by
folding over PACKAGE_STRATEGIES: every strategy proposes search terms, the
terms are searched in order and the first term with at least one occurrence
wins. A term proposed by two strategies is only searched once.
"""

import logging

from isp_pricing_verifier.content.source import ContentSource

from .models import PackageMatch
from .observer import NullObserver
from .strategies import PACKAGE_STRATEGIES

logger = logging.getLogger(__name__)


async def locate(
    label: str, source: ContentSource, observer: NullObserver | None = None
) -> PackageMatch:
    """
    Locate a package label on the page.

    Args:
        label: Expected package label ("40GB", "20↑20Mbps", "1Gbps")
        source: Content source of the plan page
        observer: Diagnostic hooks (default: none)

    Returns:
        PackageMatch; `found` is False when no strategy located the label,
        which callers treat as a soft failure.

    Example:
        >>> match = await locate("250↑250Mbps", source)
        >>> match.strategy, match.search_term
        (<MatchStrategy.SPEED_ONLY: 'speed_only'>, '250Mbps')
    """
    observer = observer or NullObserver()
    attempted: list[str] = []

    for strategy, propose in PACKAGE_STRATEGIES:
        for term in propose(label):
            if term in attempted:
                continue
            attempted.append(term)
            observer.on_strategy_attempt(label, strategy, term)

            occurrences = await source.find_text(term)
            if occurrences:
                match = PackageMatch(
                    label=label,
                    strategy=strategy,
                    search_term=term,
                    occurrences=occurrences,
                    attempted_terms=attempted,
                )
                observer.on_package_located(match)
                return match

    logger.debug(f"No strategy located {label!r} (tried: {', '.join(attempted)})")
    match = PackageMatch(label=label, attempted_terms=attempted)
    observer.on_package_missing(match)
    return match
