"""
Scoped Playwright browser sessions.

Every component that drives a real browser acquires it through
BrowserSession, an async context manager that guarantees teardown of
page, context, browser and the Playwright driver on every exit path.
"""

import asyncio
import logging
from typing import Optional, List

from playwright.async_api import async_playwright, Browser, BrowserContext, Page

logger = logging.getLogger(__name__)

# Hides the most common automation indicators
STEALTH_INIT_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined
    });
    Object.defineProperty(navigator, 'languages', {
        get: () => ['ar-SA', 'ar', 'en-US', 'en']
    });
"""


class BrowserSession:
    """
    One headless Chromium instance with a single browser context.

    Usage:
        async with BrowserSession(headless=True) as session:
            page = await session.new_page()
            await page.goto(url)
    """

    def __init__(
        self,
        headless: bool = True,
        user_agent: Optional[str] = None,
        navigation_timeout: float = 60.0,
        action_timeout: float = 30.0,
        locale: str = 'ar-SA',
    ):
        """
        Initialize the session.

        Args:
            headless: Run browser in headless mode
            user_agent: Browser user agent string
            navigation_timeout: Default page.goto timeout in seconds
            action_timeout: Default timeout for clicks/fills in seconds
            locale: Browser locale
        """
        self.headless = headless
        self.user_agent = user_agent
        self.navigation_timeout = navigation_timeout
        self.action_timeout = action_timeout
        self.locale = locale
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._pages: List[Page] = []

    @property
    def is_open(self) -> bool:
        return self._context is not None

    async def start(self):
        """Start Playwright and launch the browser."""
        if self.is_open:
            return
        try:
            self._playwright = await async_playwright().start()
            logger.debug(f"Launching Chromium (headless={self.headless})...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--disable-blink-features=AutomationControlled',
                    '--disable-dev-shm-usage',
                    '--no-sandbox',
                    '--disable-gpu',
                ],
            )
            context_kwargs = {
                'viewport': {'width': 1920, 'height': 1080},
                'locale': self.locale,
            }
            if self.user_agent:
                context_kwargs['user_agent'] = self.user_agent
            self._context = await self._browser.new_context(**context_kwargs)
            self._context.set_default_timeout(self.action_timeout * 1000)
            self._context.set_default_navigation_timeout(self.navigation_timeout * 1000)
            await self._context.add_init_script(STEALTH_INIT_SCRIPT)
        except Exception as e:
            logger.error(f"Failed to initialize browser: {e}")
            # Clean up partial initialization
            await self.close()
            raise

    async def new_page(self) -> Page:
        """Open a new page in the session's context."""
        if not self.is_open:
            await self.start()
        page = await self._context.new_page()
        self._pages.append(page)
        return page

    async def close(self):
        """Clean up browser resources with timeouts to prevent hanging."""
        cleanup_timeout = 2.0  # per cleanup operation

        for page in self._pages:
            try:
                await asyncio.wait_for(page.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Page close timed out, forcing cleanup")
            except Exception as e:
                logger.debug(f"Error closing page: {e}")
        self._pages = []

        if self._context:
            try:
                await asyncio.wait_for(self._context.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Context close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None

        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
