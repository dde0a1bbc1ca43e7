"""Browser-backed page extractor for client-rendered pages."""

import logging
from typing import Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeout

from siterag.core.config import settings
from siterag.core.errors import FatalInitError, FetchError
from siterag.ingestion.models import ContentItem
from siterag.ingestion.parse_html import parse_page

logger = logging.getLogger(__name__)

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


class PageExtractor:
    """Renders pages in a single headless Chromium page and extracts content.

    One instance owns one browser, one context and one page. Use it as a
    context manager so the browser is closed on every exit path.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        navigation_timeout_ms: Optional[int] = None,
        selector_timeout_ms: Optional[int] = None,
        detail_page_pattern: Optional[str] = None,
        detail_selectors: Optional[str] = None,
        headless: Optional[bool] = None,
    ):
        self.user_agent = user_agent or settings.user_agent
        self.navigation_timeout_ms = navigation_timeout_ms or settings.navigation_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms or settings.selector_timeout_ms
        self.detail_page_pattern = detail_page_pattern or settings.detail_page_pattern
        self.detail_selectors = detail_selectors or settings.detail_selectors
        self.headless = settings.headless if headless is None else headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    def start(self) -> "PageExtractor":
        """Launch the browser. Raises FatalInitError when it cannot be started."""
        if self._page is not None:
            return self
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless, args=BROWSER_ARGS)
            self._context = self._browser.new_context(user_agent=self.user_agent)
            self._page = self._context.new_page()
            self._page.set_default_navigation_timeout(self.navigation_timeout_ms)
        except PlaywrightError as e:
            self.close()
            raise FatalInitError(f"Could not launch browser: {e}", cause=e) from e
        logger.info("Browser launched")
        return self

    def close(self) -> None:
        """Close page, context, browser and the Playwright driver."""
        for closer in (self._context, self._browser):
            if closer is None:
                continue
            try:
                closer.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser resource: {e}")
        if self._playwright is not None:
            self._playwright.stop()
        self._playwright = self._browser = self._context = self._page = None

    def __enter__(self) -> "PageExtractor":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def is_detail_page(self, url: str) -> bool:
        return bool(self.detail_page_pattern) and self.detail_page_pattern in url

    def render(self, url: str) -> str:
        """Navigate to ``url`` and return the rendered DOM as HTML."""
        if self._page is None:
            raise RuntimeError("PageExtractor.start() must be called before render()")
        try:
            self._page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
        except PlaywrightTimeout as e:
            raise FetchError(url, f"navigation timed out after {self.navigation_timeout_ms}ms") from e
        except PlaywrightError as e:
            raise FetchError(url, str(e)) from e

        if self.is_detail_page(url):
            try:
                self._page.wait_for_selector(self.detail_selectors, timeout=self.selector_timeout_ms)
            except PlaywrightTimeout:
                # Partial content is better than none
                logger.warning(f"Timed out waiting for content on {url}; continuing with partial page")

        try:
            return self._page.content()
        except PlaywrightError as e:
            raise FetchError(url, str(e)) from e

    def extract(self, url: str) -> tuple[list[ContentItem], list[str]]:
        """Render ``url`` and return (items, outbound links). Raises FetchError."""
        html = self.render(url)
        return parse_page(html, url)
