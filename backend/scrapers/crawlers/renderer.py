"""
Page renderer for JavaScript-driven listing pages.

Loads a URL in a headless browser, waits for listing content, then
keeps scrolling (and clicking "load more" when present) until the
document stops growing or the iteration budget runs out.
"""

import asyncio
import logging
from typing import Callable, Optional

from playwright.async_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from ..base import RenderTimeout
from ..config import SiteConfig
from .browser import BrowserSession

logger = logging.getLogger(__name__)

HEIGHT_SCRIPT = "document.body.scrollHeight"
SCROLL_SCRIPT = "window.scrollTo(0, document.body.scrollHeight)"


class PageRenderer:
    """
    Renders listing pages to their final markup.

    Each render() call owns one browser session for its whole duration;
    the session is torn down on success and on failure.
    """

    def __init__(
        self,
        config: SiteConfig,
        session_factory: Optional[Callable[[], BrowserSession]] = None,
    ):
        self.config = config
        self.timeouts = config.timeouts
        self._session_factory = session_factory or self._default_session

    def _default_session(self) -> BrowserSession:
        return BrowserSession(
            headless=self.config.headless,
            user_agent=self.config.user_agent,
            navigation_timeout=self.timeouts.navigation,
        )

    async def render(self, url: str, wait_selector: Optional[str] = None) -> str:
        """
        Render url and return the fully scrolled markup.

        Args:
            url: Page to load
            wait_selector: Element that signals listing content (defaults
                to the fragment selector)

        Raises:
            RenderTimeout: If wait_selector never appears
        """
        wait_selector = wait_selector or self.config.rules.fragment
        logger.info(f"Rendering dynamic content of {url}")

        async with self._session_factory() as session:
            page = await session.new_page()
            await page.goto(url, wait_until='domcontentloaded')

            try:
                await page.wait_for_selector(
                    wait_selector,
                    state='attached',
                    timeout=self.timeouts.render_wait * 1000,
                )
            except PlaywrightTimeout as e:
                raise RenderTimeout(
                    f"'{wait_selector}' did not appear on {url} within {self.timeouts.render_wait:g}s"
                ) from e

            iterations = await self.scroll_until_exhausted(page)
            logger.info(f"Scrolling finished after {iterations} iteration(s) on {url}")
            return await page.content()

    async def scroll_until_exhausted(self, page: Page) -> int:
        """
        Scroll to the bottom until the document height stops changing.

        Returns:
            Number of scroll iterations performed
        """
        last_height = await self._page_height(page)
        iterations = 0

        while iterations < self.timeouts.max_scroll_iterations:
            await page.evaluate(SCROLL_SCRIPT)
            await asyncio.sleep(self.timeouts.scroll_pause)
            new_height = await self._page_height(page)
            await self._click_load_more(page)
            iterations += 1

            if new_height == last_height:
                break
            last_height = new_height
        else:
            logger.warning(f"Scroll budget of {self.timeouts.max_scroll_iterations} iterations exhausted")

        return iterations

    async def _page_height(self, page: Page) -> int:
        return int(await page.evaluate(HEIGHT_SCRIPT) or 0)

    async def _click_load_more(self, page: Page) -> bool:
        """Click the "load more" control if the page has one."""
        button = page.locator(self.config.rules.load_more)
        if await button.count() == 0:
            return False
        try:
            await button.first.click()
        except PlaywrightError as e:
            logger.debug(f"Load-more click failed: {e}")
            return False
        await asyncio.sleep(self.timeouts.scroll_pause)
        return True
