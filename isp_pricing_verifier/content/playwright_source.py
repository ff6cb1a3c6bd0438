"""
ContentSource backed by a live Playwright page.

Node handles are Playwright Locators. Literal search uses get_by_text, which
already matches case-insensitively on whitespace-normalized text and
resolves to the smallest element containing it. Every Playwright failure is
re-raised as ContentQueryError so callers deal with a single error type.
"""

import logging
import re

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from isp_pricing_verifier.exceptions import ContentQueryError

from .source import compile_pattern

logger = logging.getLogger(__name__)

STRIKETHROUGH_SCRIPT = """
el => {
    const style = window.getComputedStyle(el);
    return style.textDecoration.includes('line-through') ||
           style.textDecorationLine === 'line-through' ||
           el.style.textDecoration.includes('line-through') ||
           el.classList.contains('line-through');
}
"""


class PlaywrightContentSource:
    """
    Content source over a Playwright Page.

    Args:
        page: Page that has reached a stable pricing state
        timeout_ms: Timeout of per-node queries (text and style reads)
    """

    def __init__(self, page: Page, timeout_ms: int = 5_000):
        self.page = page
        self.timeout_ms = timeout_ms

    async def find_text(self, text: str) -> list[Locator]:
        try:
            return await self.page.get_by_text(text).all()
        except PlaywrightError as e:
            raise ContentQueryError(f"Text search for {text!r} failed: {e}") from e

    async def find_pattern(
        self, pattern: str | re.Pattern[str], within: Locator | None = None
    ) -> list[Locator]:
        regex = compile_pattern(pattern)
        scope = within if within is not None else self.page
        try:
            return await scope.get_by_text(regex).all()
        except PlaywrightError as e:
            raise ContentQueryError(
                f"Pattern search for /{regex.pattern}/ failed: {e}"
            ) from e

    async def parent(self, node: Locator) -> Locator:
        # xpath=.. of <html> resolves to nothing; clamp at the document element
        try:
            if await node.evaluate(
                "el => el.parentElement === null", timeout=self.timeout_ms
            ):
                return node
        except PlaywrightError as e:
            raise ContentQueryError(f"Parent lookup failed: {e}") from e
        return node.locator("xpath=..")

    async def text_content(self, node: Locator) -> str:
        try:
            return await node.text_content(timeout=self.timeout_ms) or ""
        except PlaywrightError as e:
            raise ContentQueryError(f"Reading text content failed: {e}") from e

    async def is_struck_through(self, node: Locator) -> bool:
        try:
            return bool(await node.evaluate(STRIKETHROUGH_SCRIPT, timeout=self.timeout_ms))
        except PlaywrightError as e:
            raise ContentQueryError(f"Style inspection failed: {e}") from e

