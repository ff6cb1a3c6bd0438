"""
Diagnostic hooks of the verification engine.

The matchers never print or log directly. They report what they try and
what they find to an observer, and the observer decides where that goes.
Matching decisions never depend on the observer.

Observers:
    NullObserver: Ignores every event (base class of the others)
    LoggingObserver: Structured log records via log_with_context
    ConsoleObserver: Per-entry narration on the Rich console
    CompositeObserver: Fans events out to several observers
"""

import logging
from typing import TYPE_CHECKING

from isp_pricing_verifier.utils.console import console, output_mode
from isp_pricing_verifier.utils.logging import log_with_context

from .models import (
    MatchStrategy,
    PackageMatch,
    PriceCheck,
    SessionSummary,
    VerificationOutcome,
)

if TYPE_CHECKING:
    from isp_pricing_verifier.config.schema import ExpectedEntry

logger = logging.getLogger(__name__)


class NullObserver:
    """Observer that ignores every event. Subclass and override what you need."""

    def on_inventory(self, kind: str, texts: list[str]) -> None:
        pass

    def on_entry_start(self, entry: "ExpectedEntry") -> None:
        pass

    def on_strategy_attempt(
        self, label: str, strategy: MatchStrategy, term: str
    ) -> None:
        pass

    def on_package_located(self, match: PackageMatch) -> None:
        pass

    def on_package_missing(self, match: PackageMatch) -> None:
        pass

    def on_price_checked(self, role: str, check: PriceCheck) -> None:
        """role is "price" for single prices, "deal" or "original" for dual ones."""
        pass

    def on_strikethrough(self, original_price: str, confirmed: bool) -> None:
        pass

    def on_entry_done(
        self, entry: "ExpectedEntry", outcome: VerificationOutcome
    ) -> None:
        pass

    def on_soft_failure(self, message: str) -> None:
        pass

    def on_hard_failure(self, message: str) -> None:
        pass

    def on_summary(self, summary: SessionSummary) -> None:
        pass


class LoggingObserver(NullObserver):
    """Emit every event as a structured log record tagged with the scenario id."""

    def __init__(self, scenario_id: str | None = None, run_id: str | None = None):
        self.scenario_id = scenario_id
        self.run_id = run_id

    def _log(self, level: int, message: str, context: dict | None = None) -> None:
        log_with_context(
            logger,
            level,
            message,
            context=context,
            run_id=self.run_id,
            scenario_id=self.scenario_id,
        )

    def on_inventory(self, kind, texts):
        self._log(
            logging.INFO,
            f"Page inventory ({kind}): {len(texts)} text(s)",
            context={"kind": kind, "texts": texts},
        )

    def on_entry_start(self, entry):
        self._log(logging.DEBUG, f"Checking package {entry.package}")

    def on_strategy_attempt(self, label, strategy, term):
        self._log(
            logging.DEBUG,
            f"Searching for {label!r} as {term!r}",
            context={"label": label, "strategy": strategy.value, "term": term},
        )

    def on_package_located(self, match):
        self._log(
            logging.INFO,
            f"Found package {match.label} ({len(match.occurrences)} occurrence(s))",
            context={
                "label": match.label,
                "strategy": match.strategy.value if match.strategy else None,
                "search_term": match.search_term,
            },
        )

    def on_package_missing(self, match):
        self._log(
            logging.WARNING,
            f"Package {match.label} not found",
            context={"label": match.label, "attempted_terms": match.attempted_terms},
        )

    def on_price_checked(self, role, check):
        if check.found:
            self._log(
                logging.INFO,
                f"Found {role} {check.expected} as {check.matched_text!r}",
            )
        else:
            self._log(
                logging.WARNING,
                f"Missing {role} {check.expected}",
                context={"expected": check.expected, "candidates": check.candidates},
            )

    def on_strikethrough(self, original_price, confirmed):
        level = logging.INFO if confirmed else logging.WARNING
        state = "is" if confirmed else "is not"
        self._log(level, f"Original price {original_price} {state} struck through")

    def on_soft_failure(self, message):
        self._log(logging.WARNING, message)

    def on_hard_failure(self, message):
        self._log(logging.ERROR, message)

    def on_summary(self, summary):
        self._log(
            logging.INFO,
            f"Found {summary.found_count}/{summary.total_count} packages on pricing page",
            context=summary.to_dict(),
        )


class ConsoleObserver(NullObserver):
    """
    Narrate verification on the Rich console (human mode only).

    Lines are prefixed with the scenario id since concurrent scenarios share
    one console.
    """

    def __init__(self, scenario_id: str):
        self.prefix = f"[dim]{scenario_id}[/dim]"

    def _print(self, message: str) -> None:
        if output_mode.is_human() and not output_mode.quiet:
            console.print(f"{self.prefix} {message}")

    def on_inventory(self, kind, texts):
        shown = ", ".join(texts) if texts else "none"
        self._print(f"📋 {kind}: {shown}")

    def on_entry_start(self, entry):
        self._print(f"📦 Checking package [bold]{entry.package}[/bold]")

    def on_package_located(self, match):
        how = ""
        if match.strategy is not MatchStrategy.EXACT_LABEL:
            how = f" [dim](as {match.search_term})[/dim]"
        self._print(f"  [green]✓[/green] Found package {match.label}{how}")

    def on_package_missing(self, match):
        self._print(f"  [red]✗[/red] Package {match.label} not found")

    def on_price_checked(self, role, check):
        if check.found:
            self._print(f"  [green]✓[/green] {role.capitalize()} {check.expected}")
        else:
            nearby = ", ".join(check.candidates) if check.candidates else "none"
            self._print(
                f"  [red]✗[/red] {role.capitalize()} {check.expected} missing "
                f"[dim](nearby: {nearby})[/dim]"
            )

    def on_strikethrough(self, original_price, confirmed):
        mark = "[green]✓[/green]" if confirmed else "[yellow]⚠[/yellow]"
        self._print(f"  {mark} Original price {original_price} struck through: {confirmed}")

    def on_summary(self, summary):
        self._print(
            f"📊 Found {summary.found_count}/{summary.total_count} packages on pricing page"
        )


class CompositeObserver(NullObserver):
    """Forward every event to each child observer in order."""

    def __init__(self, *observers: NullObserver):
        self.observers = list(observers)

    def on_inventory(self, kind, texts):
        for observer in self.observers:
            observer.on_inventory(kind, texts)

    def on_entry_start(self, entry):
        for observer in self.observers:
            observer.on_entry_start(entry)

    def on_strategy_attempt(self, label, strategy, term):
        for observer in self.observers:
            observer.on_strategy_attempt(label, strategy, term)

    def on_package_located(self, match):
        for observer in self.observers:
            observer.on_package_located(match)

    def on_package_missing(self, match):
        for observer in self.observers:
            observer.on_package_missing(match)

    def on_price_checked(self, role, check):
        for observer in self.observers:
            observer.on_price_checked(role, check)

    def on_strikethrough(self, original_price, confirmed):
        for observer in self.observers:
            observer.on_strikethrough(original_price, confirmed)

    def on_entry_done(self, entry, outcome):
        for observer in self.observers:
            observer.on_entry_done(entry, outcome)

    def on_soft_failure(self, message):
        for observer in self.observers:
            observer.on_soft_failure(message)

    def on_hard_failure(self, message):
        for observer in self.observers:
            observer.on_hard_failure(message)

    def on_summary(self, summary):
        for observer in self.observers:
            observer.on_summary(summary)
