"""Playwright browser management and rendered page contexts."""

import asyncio
import random
from dataclasses import dataclass
from typing import Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config.settings import ScrapingSettings
from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .extractor import PAGE_EXTRACTION_SCRIPT
from .types import ExtractionFailure, ExtractionRequest, RenderTimeout

logger = get_structured_logger(__name__)


class ManagedBrowser(AsyncContextManager):
    """Lazily launched headless Chromium shared by all render contexts."""

    def __init__(self, settings: ScrapingSettings):
        self.settings = settings
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._browser_lock = asyncio.Lock()

    async def setup(self) -> None:
        """Start Playwright and launch the browser."""
        if self.browser:
            return

        async with self._browser_lock:
            if self.browser:
                return

            logger.info("Launching Playwright browser")

            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.settings.headless,
                args=[
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-dev-shm-usage",
                    "--disable-gpu",
                    "--no-first-run",
                ],
            )

            logger.info("Playwright browser launched")

    async def cleanup(self) -> None:
        """Close the browser and stop Playwright."""
        async with self._browser_lock:
            if self.browser:
                await self.browser.close()
                self.browser = None

            if self.playwright:
                await self.playwright.stop()
                self.playwright = None

            logger.info("Playwright browser cleaned up")

    async def new_page(self) -> Page:
        """Open a page in a fresh browser context."""
        if not self.browser:
            await self.setup()

        context = await self.browser.new_context(
            viewport={"width": 1920, "height": 1080},
            user_agent=random.choice(self.settings.user_agents),
            java_script_enabled=True,
        )
        try:
            return await context.new_page()
        except BaseException:
            await context.close()
            raise


@dataclass
class RenderContext:
    """Handle on a rendered page.

    ``owned`` is True when the provider opened the page for a single check;
    the caller must then pass it to ``close``. Pages adopted from a
    long-lived session are never owned and stay open.
    """

    page: Page
    url: str
    owned: bool


class RenderContextProvider:
    """Opens, reuses and releases rendered pages for content extraction."""

    def __init__(self, browser: ManagedBrowser, settings: ScrapingSettings):
        self.browser = browser
        self.settings = settings
        self._adopted: dict[str, Page] = {}
        self.open_contexts = 0

    def adopt(self, url: str, page: Page) -> None:
        """Register a page that stays open outside of any single check."""
        self._adopted[url] = page

    def release(self, url: str) -> None:
        self._adopted.pop(url, None)

    async def open(self, url: str) -> RenderContext:
        """Return a context showing ``url``, reusing an adopted page when present."""
        page = self._adopted.get(url)
        if page is not None and not page.is_closed():
            logger.debug("Reusing open page", url=url)
            return RenderContext(page=page, url=url, owned=False)

        try:
            page = await self.browser.new_page()
        except PlaywrightError as e:
            raise ExtractionFailure(f"Could not open a page for {url}: {str(e)}") from e

        context = RenderContext(page=page, url=url, owned=True)
        self.open_contexts += 1

        try:
            page.set_default_timeout(self.settings.render_timeout)
            page.set_default_navigation_timeout(self.settings.render_timeout)
            await page.goto(url, wait_until="commit")
        except PlaywrightTimeoutError as e:
            await self.close(context)
            raise RenderTimeout(f"Navigation to {url} timed out") from e
        except PlaywrightError as e:
            await self.close(context)
            raise ExtractionFailure(f"Navigation to {url} failed: {str(e)}") from e
        except BaseException:
            # Cancelled while navigating
            await self.close(context)
            raise

        return context

    async def wait_for_load(self, context: RenderContext, timeout: int) -> None:
        """Wait for the load event, ``timeout`` in milliseconds."""
        try:
            await context.page.wait_for_load_state("load", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise RenderTimeout(
                f"Page {context.url} did not load within {timeout}ms"
            ) from e
        except PlaywrightError as e:
            raise ExtractionFailure(
                f"Page {context.url} failed while loading: {str(e)}"
            ) from e

    async def run_in_context(
        self, context: RenderContext, request: ExtractionRequest
    ) -> str:
        """Run the extraction routine inside the page and return its text."""
        try:
            result = await context.page.evaluate(
                PAGE_EXTRACTION_SCRIPT,
                {"selector": request.selector, "exclude": request.exclude_selectors},
            )
        except PlaywrightError as e:
            raise ExtractionFailure(
                f"Content extraction failed for {context.url}: {str(e)}"
            ) from e

        if not isinstance(result, str):
            raise ExtractionFailure(f"Content extraction returned no text for {context.url}")
        return result

    async def close(self, context: RenderContext) -> None:
        """Release an owned context; adopted pages are left alone."""
        if not context.owned:
            return

        self.open_contexts -= 1
        try:
            await context.page.context.close()
        except PlaywrightError as e:
            logger.warning("Failed to close render context", url=context.url, error=str(e))
