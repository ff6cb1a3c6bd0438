"""
Homepage smoke checks.

Quick checks that a storefront is up before spending minutes on pricing
scenarios: the homepage loads with a title, the main navigation is visible,
and the page body renders on both a phone-sized and a desktop viewport.
"""

import logging
from dataclasses import asdict, dataclass

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from isp_pricing_verifier.config.schema import Timeouts
from isp_pricing_verifier.exceptions import NavigationError

from .brands import BrandProfile

logger = logging.getLogger(__name__)

RESPONSIVE_VIEWPORTS = (
    ("mobile", 375, 667),
    ("desktop", 1920, 1080),
)


@dataclass
class SmokeCheck:
    """Result of one smoke check."""

    name: str
    passed: bool
    detail: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


async def _check_visible(page: Page, selector: str, timeout_ms: int) -> tuple[bool, str]:
    try:
        await page.locator(selector).first.wait_for(state="visible", timeout=timeout_ms)
    except PlaywrightError as e:
        return False, f"{selector} not visible: {e}"
    return True, f"{selector} visible"


async def run_homepage_checks(
    page: Page, brand: BrandProfile, base_url: str, timeouts: Timeouts
) -> list[SmokeCheck]:
    """
    Run the homepage checks of one brand.

    A homepage that does not load at all raises NavigationError; every other
    problem is reported as a failed check.

    Returns:
        Checks in the order they ran
    """
    try:
        await page.goto(base_url, timeout=timeouts.navigation_ms)
    except PlaywrightError as e:
        raise NavigationError(f"Failed loading {base_url}: {e}") from e
    logger.info(f"Loaded {brand.display_name} homepage: {base_url}")

    checks = []

    try:
        title = await page.title()
        checks.append(SmokeCheck("title", True, title))
    except PlaywrightError as e:
        checks.append(SmokeCheck("title", False, str(e)))

    passed, detail = await _check_visible(
        page, brand.nav_selector, timeouts.element_visible_ms
    )
    checks.append(SmokeCheck("navigation", passed, detail))

    for name, width, height in RESPONSIVE_VIEWPORTS:
        try:
            await page.set_viewport_size({"width": width, "height": height})
        except PlaywrightError as e:
            checks.append(SmokeCheck(f"viewport_{name}", False, str(e)))
            continue
        passed, detail = await _check_visible(page, "body", timeouts.element_visible_ms)
        checks.append(SmokeCheck(f"viewport_{name}", passed, f"{width}x{height}: {detail}"))

    failed = [check.name for check in checks if not check.passed]
    if failed:
        logger.warning(f"{brand.brand_id} homepage checks failed: {', '.join(failed)}")
    return checks
