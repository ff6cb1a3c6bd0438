"""
Content verification engine.

Runs the expected entries of one scenario against a content source, one at
a time and in declaration order: each price lookup is anchored on the
package occurrence found just before it, so entries are never reordered or
checked concurrently.

Example:
    >>> report = VerificationReport(len(scenario.expected))
    >>> summary = await verify_entries(scenario.expected, source, report)
    >>> report.raise_for_soft_failures()
"""

import logging
from typing import TYPE_CHECKING

from isp_pricing_verifier.config.constants import (
    PACKAGE_INVENTORY_LIMIT,
    PACKAGE_INVENTORY_PATTERN,
    PRICE_CANDIDATE_PATTERN,
    PRICE_INVENTORY_LIMIT,
)
from isp_pricing_verifier.content.source import ContentSource

from .models import SessionSummary, VerificationOutcome
from .observer import NullObserver
from .package_matcher import locate
from .price_matcher import verify, verify_dual
from .report import VerificationReport

if TYPE_CHECKING:
    from isp_pricing_verifier.config.schema import ExpectedEntry

logger = logging.getLogger(__name__)


async def verify_entry(
    entry: "ExpectedEntry",
    source: ContentSource,
    observer: NullObserver | None = None,
) -> VerificationOutcome:
    """Verify one entry: locate its package, then look up its price(s)."""
    observer = observer or NullObserver()

    match = await locate(entry.package, source, observer)
    if not match.found:
        return VerificationOutcome(package_found=False, price_found=False)

    if entry.is_dual:
        dual = await verify_dual(
            match.anchor, entry.price.deal, entry.price.original, source, observer
        )
        if not dual.original.found:
            logger.info(
                f"Original price {entry.price.original} for {entry.package} not found"
            )
        return VerificationOutcome(
            package_found=True,
            price_found=dual.deal.found,
            strikethrough_confirmed=dual.strikethrough_confirmed,
            candidate_prices=dual.deal.candidates,
            strategy=match.strategy,
            search_term=match.search_term,
            matched_price=dual.deal.matched_text,
            original_price_found=dual.original.found,
        )

    check = await verify(match.anchor, entry.price, source, observer)
    return VerificationOutcome(
        package_found=True,
        price_found=check.found,
        candidate_prices=check.candidates,
        strategy=match.strategy,
        search_term=match.search_term,
        matched_price=check.matched_text,
    )


async def verify_entries(
    entries: "list[ExpectedEntry]",
    source: ContentSource,
    report: VerificationReport | None = None,
    observer: NullObserver | None = None,
) -> SessionSummary:
    """
    Verify entries in declaration order and record each outcome.

    Missing packages are recorded as soft failures and verification goes
    on. A missing price stops verification: report.record() raises
    PriceNotFoundError, which propagates to the caller. Soft failures are
    not raised here; call report.raise_for_soft_failures() once the summary
    has been consumed.

    A ContentQueryError is a BrowserError, so the runner retries the attempt
    and reports an exhausted one as "error" rather than "failed".

    Args:
        entries: Expected entries of the scenario
        source: Content source of the plan page
        report: Report to record into (default: a new one for `entries`)
        observer: Diagnostic hooks (default: none)

    Returns:
        SessionSummary of the recorded outcomes

    Raises:
        PriceNotFoundError: A located package is missing its price
        ContentQueryError: A package or price search failed
    """
    observer = observer or NullObserver()
    if report is None:
        report = VerificationReport(len(entries), observer)

    for entry in entries:
        observer.on_entry_start(entry)
        outcome = await verify_entry(entry, source, observer)
        observer.on_entry_done(entry, outcome)
        report.record(entry, outcome)

    summary = report.summarize()
    observer.on_summary(summary)
    return summary


async def collect_inventory(
    source: ContentSource, observer: NullObserver | None = None
) -> dict[str, list[str]]:
    """
    Collect package-like and price-like texts of the page.

    Purely diagnostic: shows what the page rendered before any matching,
    so a failed scenario can be triaged from its log alone.

    Returns:
        {"packages": [...], "prices": [...]}, each capped at its limit
    """
    observer = observer or NullObserver()
    inventory = {}
    for kind, pattern, limit in (
        ("packages", PACKAGE_INVENTORY_PATTERN, PACKAGE_INVENTORY_LIMIT),
        ("prices", PRICE_CANDIDATE_PATTERN, PRICE_INVENTORY_LIMIT),
    ):
        nodes = await source.find_pattern(pattern)
        texts = []
        for node in nodes[:limit]:
            text = (await source.text_content(node)).strip()
            if text:
                texts.append(text)
        inventory[kind] = texts
        observer.on_inventory(kind, texts)
    return inventory
