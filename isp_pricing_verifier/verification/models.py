"""
Data classes produced by the verification engine.

These are run-scoped: nothing here outlives the scenario that produced it
except through the JSON written by the storage layer. Occurrence handles are
kept on the match objects for the following price lookup but are never
serialized.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MatchStrategy(str, Enum):
    """Package search strategies, in the order they are tried."""

    EXACT_LABEL = "exact_label"
    SPEED_ONLY = "speed_only"
    NUMERIC_ONLY = "numeric_only"
    UNIT_VARIANT = "unit_variant"


@dataclass
class PackageMatch:
    """
    Result of locating one package label.

    Attributes:
        label: Expected package label
        strategy: Strategy that produced the match (None when not found)
        search_term: Text that was found on the page (None when not found)
        occurrences: Matching nodes; the first one anchors the price lookup
        attempted_terms: Every search term tried, in order
    """

    label: str
    strategy: MatchStrategy | None = None
    search_term: str | None = None
    occurrences: list[Any] = field(default_factory=list, repr=False)
    attempted_terms: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.occurrences)

    @property
    def anchor(self) -> Any | None:
        return self.occurrences[0] if self.occurrences else None


@dataclass
class PriceCheck:
    """
    Result of looking up one expected price.

    Attributes:
        expected: Price string from the pricing sheet
        found: True if one of the rewrites of `expected` appears on the page
        matched_text: The rewrite that was found ("R1 039pm")
        candidates: Prices near the package, collected only when not found
        occurrences: Nodes of the matched rewrite
    """

    expected: str
    found: bool
    matched_text: str | None = None
    candidates: list[str] = field(default_factory=list)
    occurrences: list[Any] = field(default_factory=list, repr=False)


@dataclass
class DualPriceCheck:
    """
    Deal and original price of a promotional display.

    strikethrough_confirmed is None unless both prices were found.
    """

    deal: PriceCheck
    original: PriceCheck
    strikethrough_confirmed: bool | None = None


@dataclass
class VerificationOutcome:
    """
    Outcome of verifying one expected entry.

    Attributes:
        package_found: Package label located by some strategy
        price_found: Expected (or deal) price located
        strikethrough_confirmed: Dual prices only; None when not applicable
        candidate_prices: Nearby prices, for diagnostics
        strategy: Strategy that located the package
        search_term: Text that located the package
        matched_price: Price rewrite that was found
        original_price_found: Dual prices only; None when not applicable
    """

    package_found: bool
    price_found: bool
    strikethrough_confirmed: bool | None = None
    candidate_prices: list[str] = field(default_factory=list)
    strategy: MatchStrategy | None = None
    search_term: str | None = None
    matched_price: str | None = None
    original_price_found: bool | None = None

    def to_dict(self) -> dict:
        return {
            "package_found": self.package_found,
            "price_found": self.price_found,
            "strikethrough_confirmed": self.strikethrough_confirmed,
            "candidate_prices": list(self.candidate_prices),
            "strategy": self.strategy.value if self.strategy else None,
            "search_term": self.search_term,
            "matched_price": self.matched_price,
            "original_price_found": self.original_price_found,
        }


@dataclass
class SessionSummary:
    """
    Aggregate of one scenario.

    Attributes:
        found_count: Entries whose package was located
        total_count: Entries declared by the scenario
        hard_failures: Price failures (at most one, it ends the scenario)
        soft_failures: Missing packages, in declaration order
    """

    found_count: int
    total_count: int
    hard_failures: list[str] = field(default_factory=list)
    soft_failures: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.hard_failures and not self.soft_failures

    def to_dict(self) -> dict:
        return {
            "found_count": self.found_count,
            "total_count": self.total_count,
            "hard_failures": list(self.hard_failures),
            "soft_failures": list(self.soft_failures),
            "passed": self.passed,
        }
