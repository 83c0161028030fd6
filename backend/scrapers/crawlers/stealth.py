"""
Stealth renderer for the Studyportals sites.

Uses Playwright Chromium with a realistic fingerprint so listing pages
that sit behind bot detection still render. Each request gets its own
browser; listing and detail pages are loaded in separate pages of the
same browser context.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional
import logging

from bs4 import BeautifulSoup
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from ..base import NavigationFailure, ScraperError
from .renderer import RenderedPage, Renderer, RenderingContext

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) '
    'AppleWebKit/537.36 (KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36'
)

# Hides the most common automation indicators
STEALTH_INIT_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined
    });

    Object.defineProperty(navigator, 'plugins', {
        get: () => [1, 2, 3, 4, 5]
    });

    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en']
    });
"""

CLEANUP_TIMEOUT = 2.0  # Seconds per cleanup operation


class StealthPage(RenderingContext):
    """A Playwright page wrapped as a rendering context."""

    def __init__(self, page: Page, timeout: float):
        self.page = page
        self.timeout = timeout

    async def render(self, url: str) -> RenderedPage:
        """
        Load url and return the rendered DOM.

        Waits for Playwright's 'networkidle' state (no network activity
        for 500 ms) before reading the content.
        """
        try:
            response = await self.page.goto(
                url,
                wait_until='networkidle',
                timeout=int(self.timeout * 1000),
            )
        except PlaywrightTimeoutError as e:
            raise NavigationFailure(url, f"timed out after {self.timeout:g}s") from e
        except PlaywrightError as e:
            raise NavigationFailure(url, str(e)) from e

        if response is not None and response.status >= 400:
            logger.warning(f"HTTP {response.status} for {url}")

        content = await self.page.content()
        return RenderedPage(url=self.page.url, soup=BeautifulSoup(content, 'html.parser'))


class StealthRenderer(Renderer):
    """
    Playwright renderer with anti-bot settings.

    Usage:
        async with StealthRenderer(timeout=60.0) as renderer:
            async with renderer.open_context() as context:
                page = await context.render(url)
    """

    def __init__(
        self,
        headless: bool = True,
        timeout: float = 60.0,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the stealth renderer.

        Args:
            headless: Run browser in headless mode
            timeout: Navigation timeout in seconds, for every page
            user_agent: Browser user agent string
        """
        self.headless = headless
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def start(self):
        """Launch Chromium and create the browser context."""
        if self._context is not None:
            return

        try:
            self._playwright = await async_playwright().start()

            logger.debug("Launching Chromium browser...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--disable-blink-features=AutomationControlled',
                    '--disable-dev-shm-usage',
                    '--no-sandbox',
                    '--disable-setuid-sandbox',
                    '--disable-gpu',
                ],
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )

            self._context = await self._browser.new_context(
                viewport={'width': 1920, 'height': 1080},
                user_agent=self.user_agent,
                locale='en-US',
                extra_http_headers={
                    'Accept-Language': 'en-US,en;q=0.9',
                    'DNT': '1',
                    'Upgrade-Insecure-Requests': '1',
                },
            )
            await self._context.add_init_script(STEALTH_INIT_SCRIPT)
            logger.debug("Browser initialization successful")

        except Exception as e:
            logger.error(f"Failed to initialize browser: {e}")
            await self._cleanup()
            raise ScraperError(f"Failed to launch browser: {e}") from e

    @asynccontextmanager
    async def open_context(self):
        """Open a new page; it is closed on exit."""
        if self._context is None:
            raise ScraperError("Renderer is not started")

        page = await self._context.new_page()
        page.set_default_navigation_timeout(self.timeout * 1000)
        try:
            yield StealthPage(page, self.timeout)
        finally:
            try:
                await asyncio.wait_for(page.close(), timeout=CLEANUP_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Page close timed out, forcing cleanup")
            except PlaywrightError as e:
                logger.debug(f"Error closing page: {e}")

    async def _cleanup(self):
        """Clean up browser resources with timeouts to prevent hanging."""
        if self._context:
            try:
                await asyncio.wait_for(self._context.close(), timeout=CLEANUP_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Context close timed out, forcing cleanup")
            except PlaywrightError as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None

        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=CLEANUP_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=CLEANUP_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    async def close(self):
        """Close the browser and cleanup resources."""
        await self._cleanup()
