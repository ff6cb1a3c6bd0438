"""
Verification report builder.

Failure policy:
    - Missing package: soft failure. Recorded, verification continues, and
      raise_for_soft_failures() surfaces all of them together at the end.
    - Missing price (the deal price for dual prices) of a found package:
      hard failure. Recorded, then PriceNotFoundError is raised at once.
"""

import logging
from typing import TYPE_CHECKING

from isp_pricing_verifier.exceptions import PriceNotFoundError, SoftFailuresError

from .models import SessionSummary, VerificationOutcome
from .observer import NullObserver

if TYPE_CHECKING:
    from isp_pricing_verifier.config.schema import ExpectedEntry

logger = logging.getLogger(__name__)


def package_failure_message(entry: "ExpectedEntry") -> str:
    return f"Expected package {entry.package} to be found"


def price_failure_message(entry: "ExpectedEntry", candidates: list[str]) -> str:
    """
    Message of a hard failure, with every nearby price for triage.

    Examples:
        "Expected price R199 for 40GB, but found: R249, R299"
        "Expected deal price R559pm for 20↑20Mbps, but no prices found"
    """
    kind = "deal price" if entry.is_dual else "price"
    head = f"Expected {kind} {entry.primary_price} for {entry.package}"
    if candidates:
        return f"{head}, but found: {', '.join(candidates)}"
    return f"{head}, but no prices found"


class VerificationReport:
    """
    Aggregates entry outcomes of one scenario.

    Args:
        total_count: Number of entries the scenario declares
        observer: Receives soft/hard failure events

    Attributes:
        found_count: Entries whose package was located
        hard_failures: Hard failure messages
        soft_failures: Soft failure messages, in declaration order
        outcomes: (entry, outcome) pairs in the order they were recorded
    """

    def __init__(self, total_count: int, observer: NullObserver | None = None):
        self.total_count = total_count
        self.observer = observer or NullObserver()
        self.found_count = 0
        self.hard_failures: list[str] = []
        self.soft_failures: list[str] = []
        self.outcomes: list[tuple["ExpectedEntry", VerificationOutcome]] = []

    def record(self, entry: "ExpectedEntry", outcome: VerificationOutcome) -> None:
        """
        Record one outcome and apply the failure policy.

        Raises:
            PriceNotFoundError: The package was found but its price was not
        """
        self.outcomes.append((entry, outcome))

        if not outcome.package_found:
            message = package_failure_message(entry)
            self.soft_failures.append(message)
            self.observer.on_soft_failure(message)
            return

        self.found_count += 1

        if not outcome.price_found:
            message = price_failure_message(entry, outcome.candidate_prices)
            self.hard_failures.append(message)
            self.observer.on_hard_failure(message)
            raise PriceNotFoundError(
                message,
                package_label=entry.package,
                expected_price=entry.primary_price,
                candidates=outcome.candidate_prices,
            )

    def summarize(self) -> SessionSummary:
        return SessionSummary(
            found_count=self.found_count,
            total_count=self.total_count,
            hard_failures=list(self.hard_failures),
            soft_failures=list(self.soft_failures),
        )

    def raise_for_soft_failures(self) -> None:
        """
        Raises:
            SoftFailuresError: One or more packages were not found
        """
        if self.soft_failures:
            logger.debug(f"{len(self.soft_failures)} soft failure(s) recorded")
            raise SoftFailuresError(self.soft_failures)
