"""
Scenario orchestration for isp-pricing-verifier.

This module:
- Launches one browser per run and one isolated context per scenario attempt
- Drives each scenario to its plan page and runs the verification engine
- Retries scenarios that fail on browser/navigation errors (never on pricing
  mismatches) with tenacity
- Runs scenarios concurrently under a semaphore
- Writes per-scenario JSON, snapshots and run_meta.json

Scenario statuses:
    passed: every package and price found
    failed: the page loaded but pricing did not match (soft or hard failure)
    error:  the browser or the page could not be driven to a stable state

Example:
    >>> config = load_config("examples/pricing.config.yaml")
    >>> summary = await run_all(config)
    >>> summary["passed"], summary["total_scenarios"]
    (3, 3)
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from playwright.async_api import Browser, async_playwright
from playwright.async_api import Error as PlaywrightError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from isp_pricing_verifier.config.schema import PricingConfig, RunSettings, Scenario
from isp_pricing_verifier.content.playwright_source import PlaywrightContentSource
from isp_pricing_verifier.content.source import ContentSource
from isp_pricing_verifier.exceptions import BrowserError, VerificationError
from isp_pricing_verifier.navigation.brands import BrandProfile, BrandRegistry
from isp_pricing_verifier.navigation.sequencer import NavigationSequencer
from isp_pricing_verifier.navigation.smoke import run_homepage_checks
from isp_pricing_verifier.storage.writer import (
    create_run_directory,
    screenshot_path,
    write_run_meta,
    write_scenario_result,
    write_smoke_result,
)
from isp_pricing_verifier.utils.time import (
    run_id_from_timestamp,
    utc_timestamp,
)
from isp_pricing_verifier.verification.engine import collect_inventory, verify_entries
from isp_pricing_verifier.verification.models import SessionSummary
from isp_pricing_verifier.verification.observer import (
    CompositeObserver,
    ConsoleObserver,
    LoggingObserver,
    NullObserver,
)
from isp_pricing_verifier.verification.report import VerificationReport

logger = logging.getLogger(__name__)

# Backoff between scenario attempts (seconds)
RETRY_MIN_WAIT_SECONDS = 2
RETRY_MAX_WAIT_SECONDS = 30


@dataclass
class ScenarioResult:
    """
    Result of one scenario, as written to scenario_{id}.json.

    Attributes:
        scenario_id: Scenario identifier
        provider: Network provider of the scenario
        status: "passed", "failed" or "error"
        summary: Session summary (None when the page never loaded)
        entries: One dict per recorded entry (expected values and outcome)
        inventory: Package and price texts seen on the page
        suggestion: Address suggestion that was clicked
        screenshot: Path of the snapshot, if one was taken
        error: Failure message when not passed
        error_type: Exception class name when not passed
        attempts: Attempts used (retries + 1 at most)
        duration_seconds: Wall time of the last attempt
    """

    scenario_id: str
    provider: str
    status: str
    summary: SessionSummary | None = None
    entries: list[dict] = field(default_factory=list)
    inventory: dict[str, list[str]] = field(default_factory=dict)
    suggestion: str | None = None
    screenshot: str | None = None
    error: str | None = None
    error_type: str | None = None
    attempts: int = 1
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    def to_dict(self) -> dict:
        return {
            "scenario_id": self.scenario_id,
            "provider": self.provider,
            "status": self.status,
            "summary": self.summary.to_dict() if self.summary else None,
            "entries": self.entries,
            "inventory": self.inventory,
            "suggestion": self.suggestion,
            "screenshot": self.screenshot,
            "error": self.error,
            "error_type": self.error_type,
            "attempts": self.attempts,
            "duration_seconds": round(self.duration_seconds, 3),
            "timestamp_utc": utc_timestamp(),
        }

    def to_row(self) -> dict:
        """Row for the console summary table."""
        return {
            "scenario_id": self.scenario_id,
            "provider": self.provider,
            "found_count": self.summary.found_count if self.summary else 0,
            "total_count": self.summary.total_count if self.summary else 0,
            "status": self.status,
            "error": self.error,
        }


def resolve_base_url(settings: RunSettings, profile: BrandProfile) -> str:
    """The base_url override if set, else the brand URL of the environment."""
    if settings.base_url:
        return settings.base_url
    return profile.base_url(settings.environment)


def _entry_records(report: VerificationReport) -> list[dict]:
    records = []
    for entry, outcome in report.outcomes:
        record = {
            "package": entry.package,
            "description": entry.description,
        }
        if entry.is_dual:
            record["deal_price"] = entry.price.deal
            record["original_price"] = entry.price.original
        else:
            record["price"] = entry.price
        record.update(outcome.to_dict())
        records.append(record)
    return records


async def execute_scenario(
    scenario: Scenario,
    sequencer: NavigationSequencer,
    source: ContentSource,
    observer: NullObserver | None = None,
    snapshot_path=None,
) -> ScenarioResult:
    """
    Run one scenario attempt on an already opened page.

    Pricing mismatches are returned as a "failed" result. Browser and
    navigation errors propagate so the caller can retry the attempt.

    Args:
        scenario: Scenario to verify
        sequencer: Navigation steps bound to the scenario's page
        source: Content source over the same page
        observer: Diagnostic hooks
        snapshot_path: Where to save the full-page snapshot (None: skip)

    Raises:
        BrowserError: Navigation or content queries failed
    """
    observer = observer or NullObserver()
    started = time.monotonic()

    suggestion = await sequencer.reach_pricing_page(scenario)

    screenshot = None
    if snapshot_path is not None:
        screenshot = str(await sequencer.capture_snapshot(snapshot_path))

    inventory = await collect_inventory(source, observer)

    report = VerificationReport(len(scenario.expected), observer)
    failure: VerificationError | None = None
    try:
        await verify_entries(scenario.expected, source, report, observer)
        report.raise_for_soft_failures()
    except VerificationError as e:
        failure = e

    return ScenarioResult(
        scenario_id=scenario.id,
        provider=scenario.provider,
        status="passed" if failure is None else "failed",
        summary=report.summarize(),
        entries=_entry_records(report),
        inventory=inventory,
        suggestion=suggestion,
        screenshot=screenshot,
        error=str(failure) if failure else None,
        error_type=type(failure).__name__ if failure else None,
        duration_seconds=time.monotonic() - started,
    )


async def run_scenario(
    browser: Browser,
    scenario: Scenario,
    settings: RunSettings,
    run_dir: str | None = None,
    run_id: str | None = None,
) -> ScenarioResult:
    """
    Run a scenario with retries, each attempt in a fresh browser context.

    Never raises for scenario problems: exhausted retries become an "error"
    result.
    """
    profile = BrandRegistry.get_profile(scenario.brand)
    base_url = resolve_base_url(settings, profile)
    timeouts = settings.timeouts
    observer = CompositeObserver(
        LoggingObserver(scenario.id, run_id), ConsoleObserver(scenario.id)
    )
    snapshot = (
        screenshot_path(run_dir, scenario.id)
        if run_dir and settings.take_screenshots
        else None
    )
    attempts = 0

    async def _attempt() -> ScenarioResult:
        try:
            context = await browser.new_context(
                base_url=base_url,
                viewport={
                    "width": settings.viewport.width,
                    "height": settings.viewport.height,
                },
            )
        except PlaywrightError as e:
            raise BrowserError(f"Could not open a browser context: {e}") from e

        try:
            context.set_default_timeout(timeouts.action_ms)
            context.set_default_navigation_timeout(timeouts.navigation_ms)
            page = await context.new_page()
            sequencer = NavigationSequencer(
                page, profile, base_url, timeouts, scenario_id=scenario.id
            )
            source = PlaywrightContentSource(page, timeout_ms=timeouts.element_visible_ms)
            return await execute_scenario(scenario, sequencer, source, observer, snapshot)
        except PlaywrightError as e:
            raise BrowserError(f"Browser failed during scenario: {e}") from e
        finally:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.warning(f"Failed to close browser context of {scenario.id}: {e}")

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(settings.retries + 1),
            wait=wait_exponential(
                multiplier=1, min=RETRY_MIN_WAIT_SECONDS, max=RETRY_MAX_WAIT_SECONDS
            ),
            retry=retry_if_exception_type(BrowserError),
            reraise=True,
        ):
            with attempt:
                attempts += 1
                if attempts > 1:
                    logger.warning(f"Retrying scenario {scenario.id} (attempt {attempts})")
                result = await _attempt()
    except BrowserError as e:
        logger.error(f"Scenario {scenario.id} errored after {attempts} attempt(s): {e}")
        return ScenarioResult(
            scenario_id=scenario.id,
            provider=scenario.provider,
            status="error",
            error=str(e),
            error_type=type(e).__name__,
            attempts=attempts,
        )

    result.attempts = attempts
    return result


async def run_all(
    config: PricingConfig,
    scenarios: list[Scenario] | None = None,
    progress_callback: Callable[[], None] | None = None,
) -> dict:
    """
    Run scenarios concurrently and write the run artifacts.

    Args:
        config: Validated configuration
        scenarios: Subset to run (default: every scenario, in config order)
        progress_callback: Called once per finished scenario

    Returns:
        Summary dictionary:
        {
            "run_id": "2025-06-12T08-00-00Z",
            "timestamp_utc": "2025-06-12T08:00:00Z",
            "output_dir": "./output/2025-06-12T08-00-00Z",
            "environment": "prod",
            "total_scenarios": 3,
            "passed": 2,
            "failed": 1,
            "errors": 0,
            "results": [ScenarioResult, ...],
        }

    Raises:
        BrowserError: The browser could not be launched
        OSError: If the run directory cannot be created
    """
    settings = config.run_settings
    scenarios = list(scenarios) if scenarios is not None else list(config.scenarios)

    run_id = run_id_from_timestamp()
    timestamp_utc = utc_timestamp()
    run_dir = create_run_directory(settings.output_dir, run_id)

    logger.info(
        f"Starting run {run_id}: {len(scenarios)} scenario(s), "
        f"environment={settings.environment}, browser={settings.browser}"
    )

    semaphore = asyncio.Semaphore(settings.max_concurrent_scenarios)

    async with async_playwright() as playwright:
        try:
            browser = await getattr(playwright, settings.browser).launch(
                headless=settings.headless
            )
        except PlaywrightError as e:
            raise BrowserError(f"Could not launch {settings.browser}: {e}") from e

        async def _run_with_semaphore(scenario: Scenario) -> ScenarioResult:
            async with semaphore:
                logger.info(f"Processing scenario {scenario.id} ({scenario.provider})")
                result = await run_scenario(browser, scenario, settings, run_dir, run_id)
                write_scenario_result(run_dir, scenario.id, result.to_dict())
                if progress_callback:
                    progress_callback()
                return result

        try:
            gathered = await asyncio.gather(
                *(_run_with_semaphore(scenario) for scenario in scenarios),
                return_exceptions=True,
            )
        finally:
            await browser.close()

    results: list[ScenarioResult] = []
    for scenario, outcome in zip(scenarios, gathered):
        if isinstance(outcome, Exception):
            logger.error(
                f"Scenario {scenario.id} crashed: {outcome}", exc_info=outcome
            )
            outcome = ScenarioResult(
                scenario_id=scenario.id,
                provider=scenario.provider,
                status="error",
                error=str(outcome),
                error_type=type(outcome).__name__,
            )
            write_scenario_result(run_dir, scenario.id, outcome.to_dict())
        results.append(outcome)

    passed = sum(1 for r in results if r.status == "passed")
    failed = sum(1 for r in results if r.status == "failed")
    errors = sum(1 for r in results if r.status == "error")

    run_meta = {
        "run_id": run_id,
        "timestamp_utc": timestamp_utc,
        "output_dir": run_dir,
        "environment": settings.environment,
        "base_url": settings.base_url,
        "browser": settings.browser,
        "total_scenarios": len(results),
        "passed": passed,
        "failed": failed,
        "errors": errors,
        "scenarios": [r.to_row() for r in results],
    }
    write_run_meta(run_dir, run_meta)

    logger.info(
        f"Run {run_id} complete: {passed}/{len(results)} passed, "
        f"{failed} failed, {errors} errored"
    )

    return {
        "run_id": run_id,
        "timestamp_utc": timestamp_utc,
        "output_dir": run_dir,
        "environment": settings.environment,
        "total_scenarios": len(results),
        "passed": passed,
        "failed": failed,
        "errors": errors,
        "results": results,
    }


async def run_smoke(config: PricingConfig, brand_ids: list[str]) -> dict:
    """
    Run homepage smoke checks for brands, one browser context per brand.

    Returns:
        {"run_id", "output_dir", "brands": {brand_id: [check dicts]},
         "passed": bool}

    Raises:
        BrowserError: The browser could not be launched
    """
    settings = config.run_settings
    run_id = run_id_from_timestamp()
    run_dir = create_run_directory(settings.output_dir, run_id)
    brands: dict[str, list[dict]] = {}

    async with async_playwright() as playwright:
        try:
            browser = await getattr(playwright, settings.browser).launch(
                headless=settings.headless
            )
        except PlaywrightError as e:
            raise BrowserError(f"Could not launch {settings.browser}: {e}") from e

        try:
            for brand_id in brand_ids:
                profile = BrandRegistry.get_profile(brand_id)
                base_url = resolve_base_url(settings, profile)
                try:
                    context = await browser.new_context(
                        viewport={
                            "width": settings.viewport.width,
                            "height": settings.viewport.height,
                        }
                    )
                except PlaywrightError as e:
                    raise BrowserError(f"Could not open a browser context: {e}") from e
                try:
                    page = await context.new_page()
                    checks = await run_homepage_checks(
                        page, profile, base_url, settings.timeouts
                    )
                finally:
                    await context.close()

                brands[brand_id] = [check.to_dict() for check in checks]
                write_smoke_result(
                    run_dir, brand_id, {"base_url": base_url, "checks": brands[brand_id]}
                )
        finally:
            await browser.close()

    return {
        "run_id": run_id,
        "output_dir": run_dir,
        "brands": brands,
        "passed": all(check["passed"] for checks in brands.values() for check in checks),
    }
