"""
Content verification engine for isp-pricing-verifier.

Public API:
    - locate: Package matcher (strategy cascade)
    - verify, verify_dual: Price matcher
    - VerificationReport: Soft/hard failure policy and session summary
    - verify_entries: Run a scenario's expected entries in order
    - NullObserver, LoggingObserver, ConsoleObserver, CompositeObserver:
      Diagnostic hooks
"""

from .engine import collect_inventory, verify_entries, verify_entry
from .models import (
    DualPriceCheck,
    MatchStrategy,
    PackageMatch,
    PriceCheck,
    SessionSummary,
    VerificationOutcome,
)
from .observer import CompositeObserver, ConsoleObserver, LoggingObserver, NullObserver
from .package_matcher import locate
from .price_matcher import price_variants, verify, verify_dual
from .report import VerificationReport

__all__ = [
    "CompositeObserver",
    "ConsoleObserver",
    "DualPriceCheck",
    "LoggingObserver",
    "MatchStrategy",
    "NullObserver",
    "PackageMatch",
    "PriceCheck",
    "SessionSummary",
    "VerificationOutcome",
    "VerificationReport",
    "collect_inventory",
    "locate",
    "price_variants",
    "verify",
    "verify_dual",
    "verify_entries",
    "verify_entry",
]
