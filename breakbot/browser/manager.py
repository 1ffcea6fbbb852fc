"""Browser lifecycle — a lazily launched Chromium shared by every run of a process."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from breakbot.errors import EngineUnavailable, NavigationFailure
from breakbot.models.analysis import ViewportGeometry

logger = logging.getLogger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_MS = 30000
DEFAULT_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class BrowserManager:
    """Owns the Playwright driver and the shared Chromium instance.

    Created by the top-level orchestrator and passed to whatever needs a page.
    Each page gets its own context, so concurrent runs never share viewport
    state; only the browser process is shared.
    """

    def __init__(self, headless: bool = True, args: Optional[list[str]] = None):
        self.headless = headless
        self.args = list(DEFAULT_BROWSER_ARGS if args is None else args)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        # Concurrent runs share one browser; only one of them may launch it
        self._launch_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it on first use or after a crash."""
        if self.is_running:
            return self._browser

        async with self._launch_lock:
            # Another run may have relaunched while this one waited
            if self.is_running:
                return self._browser

            if self._browser is not None:
                logger.warning("Browser disconnected, relaunching")
                await self._close_browser()

            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                logger.debug("Launching Chromium (headless=%s)", self.headless)
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    args=self.args,
                )
            except PlaywrightError as e:
                await self.release_all()
                raise EngineUnavailable(f"Could not start Chromium: {e}") from e

            logger.info("Chromium %s started", self._browser.version)
            return self._browser

    async def new_page(self, viewport: ViewportGeometry | None = None) -> Page:
        """Open a page in a fresh 1x-density context."""
        browser = await self.acquire()
        context_kwargs: dict = {"device_scale_factor": 1}
        if viewport is not None:
            context_kwargs["viewport"] = {"width": viewport.width, "height": viewport.height}
        context: BrowserContext = await browser.new_context(**context_kwargs)
        return await context.new_page()

    async def close_page(self, page: Page) -> None:
        """Close a page together with the context it was opened in."""
        try:
            await page.context.close()
        except PlaywrightError as e:
            logger.debug("Page context already closed: %s", e)

    async def _close_browser(self) -> None:
        if self._browser is None:
            return
        try:
            await self._browser.close()
        except PlaywrightError as e:
            logger.debug("Browser close failed: %s", e)
        self._browser = None
        logger.debug("Browser closed")

    async def release_all(self) -> None:
        """Close the browser and stop the Playwright driver."""
        await self._close_browser()
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        # The next session may run on a different event loop
        self._launch_lock = asyncio.Lock()


async def navigate(
    page: Page,
    url: str,
    timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
    wait_until: str = "networkidle",
) -> None:
    """Load ``url`` and wait for the network to go quiet."""
    logger.debug("Navigating to %s (wait_until=%s, timeout=%dms)", url, wait_until, timeout_ms)
    try:
        response = await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise NavigationFailure(url, f"Timed out after {timeout_ms}ms waiting for {wait_until}") from e
    except PlaywrightError as e:
        raise NavigationFailure(url, e.message) from e

    if response is not None and response.status >= 400:
        logger.warning("%s responded with HTTP %d", url, response.status)
