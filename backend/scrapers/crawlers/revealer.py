"""
Authenticated contact revealer.

Haraj hides the seller's phone number behind a "reveal contact" button
that only works for logged-in users. This module drives a browser
through the login modal and the reveal interaction:

    OpenHome -> ClickLogin -> AwaitLoginModal -> FillUsername -> ClickNext
    -> FillPassword -> ClickSubmit -> AwaitModalDismissed
    -> NavigateToListing -> ClickReveal -> AwaitRevealedValue
    -> ExtractPhone -> Validate

Every transition waits for its target element with the reveal timeout.
Any failure aborts the whole sequence, tears the session down and yields
the "undefined" sentinel; partial progress is never returned.

With session reuse enabled the login steps run once per session and
later reveals start at NavigateToListing.
"""

import asyncio
import logging
from typing import Callable, Optional

from playwright.async_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from ..base import (
    AuthFailure,
    ElementNotFound,
    PHONE_UNDEFINED,
    RevealStep,
    SessionState,
)
from ..config import SiteConfig
from ..utils.normalizers import clean_text, normalize_phone, phone_from_tel_href
from .browser import BrowserSession

logger = logging.getLogger(__name__)


class AuthenticatedRevealer:
    """
    Reveals phone numbers hidden behind the site's login wall.

    Usage:
        async with AuthenticatedRevealer(config) as revealer:
            phone = await revealer.reveal(listing_url)
    """

    def __init__(
        self,
        config: SiteConfig,
        session_factory: Optional[Callable[[], BrowserSession]] = None,
    ):
        self.config = config
        self.rules = config.rules
        self.timeouts = config.timeouts
        self.credentials = config.credentials
        self.reuse_session = config.reuse_session
        self.state = SessionState()
        self._session_factory = session_factory or self._default_session
        self._session: Optional[BrowserSession] = None
        self._page: Optional[Page] = None

    def _default_session(self) -> BrowserSession:
        return BrowserSession(
            headless=self.config.reveal_headless,
            user_agent=self.config.user_agent,
            navigation_timeout=self.timeouts.navigation,
            action_timeout=self.timeouts.reveal_wait,
        )

    @property
    def enabled(self) -> bool:
        return self.credentials.is_complete

    @property
    def _wait_ms(self) -> float:
        return self.timeouts.reveal_wait * 1000

    async def reveal(self, listing_url: str) -> str:
        """
        Run the login/reveal sequence for one listing.

        Returns:
            The phone number, or "undefined" when it could not be revealed
        """
        if not self.enabled:
            logger.warning(f"No login credentials configured, phone left undefined for {listing_url}")
            return PHONE_UNDEFINED

        try:
            page = await self._run(self._acquire_page)
            if not self.state.authenticated:
                await self._run(self._login, page)
            raw_phone = await self._run(self._reveal_contact, page, listing_url)

            self._enter(RevealStep.VALIDATE, "validating revealed value")
            phone = normalize_phone(raw_phone, self.rules.reveal_placeholder)
            self.state.reveals += 1
            logger.info(f"Phone number retrieved for {listing_url}: {phone}")
            return phone

        except AuthFailure as e:
            logger.error(f"Authenticated phone reveal failed for {listing_url}: {e}")
            await self._discard_session()
            return PHONE_UNDEFINED

        except Exception as e:
            logger.error(f"Unexpected error revealing phone for {listing_url}: {e}", exc_info=True)
            await self._discard_session()
            return PHONE_UNDEFINED

        finally:
            if not self.reuse_session:
                await self._discard_session()

    async def _run(self, sequence, *args):
        """Run part of the sequence, turning any browser error into AuthFailure."""
        try:
            return await sequence(*args)
        except AuthFailure:
            raise
        except (ElementNotFound, PlaywrightError) as e:
            raise AuthFailure(self.state.step or RevealStep.OPEN_HOME, str(e)) from e

    # ------------------------------------------------------------
    # Sequence
    # ------------------------------------------------------------

    async def _login(self, page: Page):
        rules = self.rules

        self._enter(RevealStep.OPEN_HOME, f"opening home page {self.config.base_url}")
        await page.goto(self.config.base_url, wait_until='domcontentloaded')

        self._enter(RevealStep.CLICK_LOGIN, "clicking login button")
        await self._click(page, rules.login_button)

        self._enter(RevealStep.AWAIT_LOGIN_MODAL, "waiting for login modal")
        await self._wait(page, rules.login_modal)

        self._enter(RevealStep.FILL_USERNAME, "filling username")
        await self._fill(page, rules.username_input, self.credentials.username)

        self._enter(RevealStep.CLICK_NEXT, "clicking next")
        await self._click(page, rules.next_button)

        self._enter(RevealStep.FILL_PASSWORD, "filling password")
        await self._fill(page, rules.password_input, self.credentials.password)

        self._enter(RevealStep.CLICK_SUBMIT, "submitting login form")
        await self._click(page, rules.submit_button)

        self._enter(RevealStep.AWAIT_MODAL_DISMISSED, "waiting for login modal to close")
        await self._wait(page, rules.modal_root, state='hidden')

        self.state.authenticated = True
        logger.info("Login modal dismissed, session authenticated")

    async def _reveal_contact(self, page: Page, listing_url: str) -> str:
        rules = self.rules

        self._enter(RevealStep.NAVIGATE_TO_LISTING, f"opening listing {listing_url}")
        await page.goto(listing_url, wait_until='domcontentloaded')

        self._enter(RevealStep.CLICK_REVEAL, "clicking reveal-contact button")
        await self._click(page, rules.reveal_button)

        self._enter(RevealStep.AWAIT_REVEALED_VALUE, "waiting for revealed contact")
        await self._wait(page, rules.revealed_value)
        text = await self._await_text_change(page)

        self._enter(RevealStep.EXTRACT_PHONE, "extracting phone number")
        if not text:
            text = await self._read_tel_link(page)
        return text

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _enter(self, step: RevealStep, message: str):
        self.state.step = step
        logger.info(f"Step {step.number}: {message}")

    async def _wait(self, page: Page, selector: str, state: str = 'visible'):
        try:
            await page.wait_for_selector(selector, state=state, timeout=self._wait_ms)
        except PlaywrightTimeout as e:
            raise ElementNotFound(
                f"'{selector}' not {state} within {self.timeouts.reveal_wait:g}s"
            ) from e

    async def _click(self, page: Page, selector: str):
        await self._wait(page, selector)
        await page.locator(selector).first.click()

    async def _fill(self, page: Page, selector: str, value: str):
        await self._wait(page, selector)
        field = page.locator(selector).first
        await field.fill("")
        await field.fill(value)

    async def _await_text_change(self, page: Page) -> str:
        """Poll the revealed node until it no longer shows the placeholder."""
        node = page.locator(self.rules.revealed_value).first
        placeholder = self.rules.reveal_placeholder.casefold()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeouts.reveal_wait

        while True:
            text = clean_text(await node.inner_text())
            if text.casefold() != placeholder:
                return text
            if loop.time() >= deadline:
                raise AuthFailure(RevealStep.AWAIT_REVEALED_VALUE, "contact still shows the reveal placeholder")
            await asyncio.sleep(self.timeouts.reveal_poll_interval)

    async def _read_tel_link(self, page: Page) -> str:
        """Fallback: read the number from a tel: href on the revealed node or its link."""
        for selector in (self.rules.revealed_value, self.rules.revealed_link):
            locator = page.locator(selector)
            if await locator.count() == 0:
                continue
            phone = phone_from_tel_href(await locator.first.get_attribute('href'))
            if phone:
                return phone
        return ""

    # ------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------

    async def _acquire_page(self) -> Page:
        if self._page is None:
            self.state = SessionState()
            self._session = self._session_factory()
            await self._session.start()
            self._page = await self._session.new_page()
        return self._page

    async def _discard_session(self):
        session, self._session, self._page = self._session, None, None
        self.state.authenticated = False
        if session is not None:
            await session.close()

    async def close(self):
        await self._discard_session()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
