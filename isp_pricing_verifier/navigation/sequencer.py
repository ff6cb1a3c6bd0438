"""
Navigation sequencer.

Drives a Playwright page from a brand's product landing page to a stable
plan-selection page:

    1. open the product line landing page
    2. type the address and pick the suggestion matching both location filters
    3. wait for the redirect to the generated plan page
    4. wait until priced content renders
    5. optionally open a product tab ("SIM + ROUTER")

Each step turns Playwright failures into NavigationError, the error class the
runner is allowed to retry.
"""

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from urllib.parse import urljoin

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from isp_pricing_verifier.config.schema import LocationFilters, Scenario, Timeouts
from isp_pricing_verifier.exceptions import NavigationError
from isp_pricing_verifier.utils.logging import log_with_context

from .brands import BrandProfile

logger = logging.getLogger(__name__)


class NavigationSequencer:
    """
    Navigation steps of one scenario on one page.

    Args:
        page: Page of the scenario's own browser context
        brand: Profile of the storefront being verified
        base_url: Storefront base URL for the selected environment
        timeouts: Step timeouts
        scenario_id: Tag for log records

    Example:
        >>> sequencer = NavigationSequencer(page, profile, "https://mweb.co.za/", timeouts)
        >>> await sequencer.reach_pricing_page(scenario)
        >>> await sequencer.capture_snapshot(Path("output/run/scenario_x.png"))
    """

    def __init__(
        self,
        page: Page,
        brand: BrandProfile,
        base_url: str,
        timeouts: Timeouts,
        scenario_id: str | None = None,
    ):
        self.page = page
        self.brand = brand
        self.base_url = base_url
        self.timeouts = timeouts
        self.scenario_id = scenario_id

    def _log(self, message: str, level: int = logging.INFO) -> None:
        log_with_context(logger, level, message, scenario_id=self.scenario_id)

    @contextmanager
    def _step(self, description: str):
        try:
            yield
        except PlaywrightTimeoutError as e:
            raise NavigationError(f"Timed out {description}: {e}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Failed {description}: {e}") from e

    def url_for(self, path: str) -> str:
        """
        Resolve a path against the base URL.

        Example:
            >>> sequencer.url_for("/fibre")
            'https://mweb.co.za/fibre'
        """
        return urljoin(self.base_url, path.lstrip("/"))

    async def open_product_page(self, product_line: str) -> str:
        """Open the landing page of a product line and return its URL."""
        url = self.url_for(self.brand.product_line(product_line).path)
        with self._step(f"loading {url}"):
            await self.page.goto(url, timeout=self.timeouts.navigation_ms)
        self._log(f"Loaded {product_line} page: {url}")
        return url

    async def enter_address(self, address: str, filters: LocationFilters) -> str:
        """
        Type an address and click the suggestion matching both filters.

        Returns:
            Text of the clicked suggestion
        """
        address_input = self.page.locator(self.brand.address_input)
        with self._step("waiting for the address input"):
            await address_input.wait_for(
                state="visible", timeout=self.timeouts.element_visible_ms
            )

        with self._step("typing the address"):
            await address_input.focus()
            await address_input.press_sequentially(
                address, delay=self.timeouts.typing_delay_ms
            )
        self._log(f"Typed address: {address}")

        # Suggestions are fetched while typing; give them time to settle
        await self.page.wait_for_timeout(self.timeouts.input_delay_ms)

        suggestion = (
            self.page.locator(self.brand.address_suggestion)
            .filter(has_text=filters.primary)
            .filter(has_text=filters.secondary)
            .first
        )
        with self._step(
            f"waiting for a suggestion matching {filters.primary!r} and {filters.secondary!r}"
        ):
            await suggestion.wait_for(
                state="visible", timeout=self.timeouts.element_visible_ms
            )
            suggestion_text = (await suggestion.text_content() or "").strip()
            self._log(f"Clicking suggestion: {suggestion_text!r}")
            await suggestion.click(timeout=self.timeouts.action_ms)

        self._log(f"Selected {filters.secondary} address")
        return suggestion_text

    async def wait_for_plan_page(self, product_line: str) -> None:
        glob = self.brand.product_line(product_line).plan_url_glob
        with self._step(f"waiting for redirect to {glob}"):
            await self.page.wait_for_url(glob, timeout=self.timeouts.navigation_ms)
        self._log(f"Redirected to plan page: {self.page.url}")

    async def wait_for_pricing_content(self, timeout_ms: int | None = None) -> None:
        timeout_ms = timeout_ms or self.timeouts.content_load_ms
        pattern = self.brand.priced_content_pattern
        with self._step(f"waiting for pricing content /{pattern}/"):
            await self.page.get_by_text(re.compile(pattern)).first.wait_for(
                state="visible", timeout=timeout_ms
            )
        self._log("Pricing content loaded")

    async def select_tab(self, tab: str) -> bool:
        """
        Open a product tab using the brand's selector chain.

        The first selector that matches anything is clicked. A missing tab is
        not an error: the page may already show the tab's content.

        Returns:
            True if a tab was clicked
        """
        for selector in self.brand.tab_chain(tab):
            candidate = self.page.locator(selector)
            with self._step(f"opening tab {tab!r}"):
                if await candidate.count() == 0:
                    continue
                await candidate.first.click(timeout=self.timeouts.action_ms)
            self._log(f"Clicked {tab} tab ({selector})")
            await self.page.wait_for_timeout(self.timeouts.tab_settle_ms)
            return True

        self._log(f"{tab} tab not found, proceeding with current view", logging.WARNING)
        return False

    async def capture_snapshot(self, path: Path) -> Path:
        """Save a full-page screenshot with animations disabled."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._step(f"capturing snapshot {path.name}"):
            await self.page.screenshot(
                path=str(path), full_page=True, animations="disabled"
            )
        self._log(f"Saved snapshot: {path}", logging.DEBUG)
        return path

    async def reach_pricing_page(self, scenario: Scenario) -> str:
        """
        Run every step needed before the scenario's entries can be matched.

        Returns:
            Text of the address suggestion that was clicked
        """
        await self.open_product_page(scenario.product_line)
        suggestion = await self.enter_address(scenario.address, scenario.location_filters)
        await self.wait_for_plan_page(scenario.product_line)
        await self.wait_for_pricing_content(scenario.content_timeout(self.timeouts))
        if scenario.tab:
            await self.select_tab(scenario.tab)
        return suggestion
