"""Headless-browser page fetch using Playwright.

Features:
- Chromium launched headless per fetch, closed in every case
- Navigation waits for DOMContentLoaded only
- Locator resolution by CSS selector, element id or XPath
- Failures surface as PageFetchError with the underlying message

ERROR LOGGING REQUIREMENTS:
- Log every fetch with URL, locator and timing
- Log navigation, selector and launch failures at ERROR
"""

import time
from typing import Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from content_checker.core.config import get_settings
from content_checker.core.logging import page_fetch_logger

LOCATOR_TYPES: tuple[str, ...] = ("css", "id", "xpath")


class PageFetchError(Exception):
    """Raised when the live page text cannot be fetched."""

    def __init__(self, message: str, url: str, locator: str | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.locator = locator


class PageFetcher(Protocol):
    """Capability: URL + locator + type -> rendered inner text."""

    async def fetch_page_text(
        self, url: str, locator: str, locator_type: str
    ) -> str: ...


def build_locator_selector(locator: str, locator_type: str) -> str:
    """Translate a locator and its type into a Playwright selector string.

    Raises:
        ValueError: If locator_type is not css, id or xpath
    """
    if locator_type == "css":
        return locator
    if locator_type == "id":
        return f"#{locator}"
    if locator_type == "xpath":
        return f"xpath={locator}"
    raise ValueError(
        f"Invalid locator type '{locator_type}'. Must be one of: {', '.join(LOCATOR_TYPES)}"
    )


class PlaywrightPageFetcher:
    """Fetches rendered element text with a fresh headless Chromium."""

    def __init__(self, timeout_ms: float | None = None, headless: bool = True) -> None:
        self._timeout_ms = timeout_ms or get_settings().browser_timeout_ms
        self._headless = headless

    async def fetch_page_text(self, url: str, locator: str, locator_type: str) -> str:
        """Return the inner text of the first element matching locator.

        Raises:
            PageFetchError: On launch, navigation or selector failure
        """
        selector = build_locator_selector(locator, locator_type)
        start_time = time.monotonic()
        page_fetch_logger.fetch_start(url, locator, locator_type)

        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(headless=self._headless)
                try:
                    page = await browser.new_page()
                    await page.goto(
                        url, wait_until="domcontentloaded", timeout=self._timeout_ms
                    )
                    text = await page.locator(selector).first.inner_text(
                        timeout=self._timeout_ms
                    )
                finally:
                    await browser.close()
        except PlaywrightError as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            page_fetch_logger.fetch_error(
                url, locator, duration_ms, str(e), type(e).__name__
            )
            raise PageFetchError(str(e), url=url, locator=locator) from e

        duration_ms = (time.monotonic() - start_time) * 1000
        page_fetch_logger.fetch_success(url, duration_ms, len(text))
        return text
