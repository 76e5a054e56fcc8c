"""
Pytest configuration and fixtures for the Haraj scraper tests.

Browser pages are replaced by small in-memory fakes that implement the
part of the Playwright Page/Locator API the crawlers use.
"""

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from playwright.async_api import TimeoutError as PlaywrightTimeout

from api.main import app
from api.scraper import get_orchestrator
from scrapers.base import HttpFailure, ScrapeResult
from scrapers.config import Credentials, Timeouts, resolve_site_config


BASE_URL = "https://haraj.com.sa"

LISTING_PAGE = """
<html><body>
<div class="posts">
  <div class="card">
    <a href="/11150001/toyota_camry"><h3>Toyota Camry 2020</h3></a>
    <div class="mb-8 flex w-full justify-end px-2"><strong>55000 SAR</strong></div>
    <span class="city">Riyadh</span>
    <button data-testid="post-contact">0555 123 456</button>
    <article data-testid="post-article">Clean car, single owner</article>
    <a data-testid="post-author">Abu Fahad</a>
  </div>
  <div class="card">
    <a href="/11150002/iphone"><h3>iPhone 15 Pro</h3></a>
    <span class="city">Jeddah</span>
    <button data-testid="post-contact">تواصل</button>
  </div>
  <div class="card">
    <a href="https://haraj.com.sa/11150003/sofa"><h3>Sofa set</h3></a>
    <div class="mb-8 flex w-full justify-end px-2"><strong>900 SAR</strong></div>
    <span class="city">Dammam</span>
    <article data-testid="post-article">Barely used</article>
    <a data-testid="post-author">Umm Salem</a>
  </div>
</div>
</body></html>
"""

DETAIL_PAGE = """
<html><body>
<div class="mb-8 flex w-full justify-end px-2"><strong>4200 SAR</strong></div>
<span class="city">Makkah</span>
<article data-testid="post-article">Full description from the detail page</article>
<a data-testid="post-author">Detail Seller</a>
<a href="tel:+966500000000"></a>
</body></html>
"""

HOMEPAGE = """
<html><body>
<div class="custom-scroll flex max-w-full flex-nowrap overflow-x-auto items-center">
  <a href="/tags/cars">Cars</a>
  <a href="https://haraj.com.sa/tags/realestate">Real estate</a>
  <a>Broken</a>
  <a href="/tags/cars">Cars again</a>
</div>
</body></html>
"""


def make_listing_page(count: int, prefix: str = "item") -> str:
    """Listing page with `count` fully populated cards."""
    cards = "".join(
        f"""
        <div class="card">
          <a href="/{prefix}/{i}"><h3>{prefix} {i}</h3></a>
          <div class="mb-8 flex w-full justify-end px-2"><strong>{i} SAR</strong></div>
          <span class="city">Riyadh</span>
          <button data-testid="post-contact">05000000{i:02d}</button>
          <article data-testid="post-article">desc {i}</article>
          <a data-testid="post-author">seller {i}</a>
        </div>"""
        for i in range(count)
    )
    return f"<html><body>{cards}</body></html>"


# ============================================================
# Playwright fakes
# ============================================================

class FakeLocator:
    def __init__(self, page: 'FakePage', selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self):
        return self

    async def count(self) -> int:
        return 0 if self.selector in self.page.missing else 1

    async def click(self):
        self.page.clicks.append(self.selector)

    async def fill(self, value: str):
        self.page.fills.append((self.selector, value))

    async def inner_text(self) -> str:
        texts = self.page.texts.get(self.selector, [""])
        return texts.pop(0) if len(texts) > 1 else texts[0]

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.page.attributes.get(self.selector, {}).get(name)


class FakePage:
    """
    Scriptable stand-in for a Playwright page.

    Args:
        markup: Returned by content()
        heights: Successive document.body.scrollHeight values (last one repeats)
        missing: Selectors that never appear (wait_for_selector times out)
        texts: Successive inner_text values per selector
        attributes: Attribute dicts per selector
    """

    def __init__(
        self,
        markup: str = "",
        heights: Optional[List[int]] = None,
        missing: Optional[set] = None,
        texts: Optional[Dict[str, List[str]]] = None,
        attributes: Optional[Dict[str, Dict[str, str]]] = None,
    ):
        self.markup = markup
        self.heights = list(heights or [1000])
        self.missing = set(missing or ())
        self.texts = texts or {}
        self.attributes = attributes or {}
        self.visits: List[str] = []
        self.waits: List[tuple] = []
        self.clicks: List[str] = []
        self.fills: List[tuple] = []
        self.scrolls = 0

    async def goto(self, url: str, wait_until: str = 'load'):
        self.visits.append(url)

    async def wait_for_selector(self, selector: str, state: str = 'visible', timeout: float = 0):
        self.waits.append((selector, state))
        if selector in self.missing:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def evaluate(self, script: str):
        if script.startswith("window.scrollTo"):
            self.scrolls += 1
            return None
        return self.heights.pop(0) if len(self.heights) > 1 else self.heights[0]

    async def content(self) -> str:
        return self.markup

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def close(self):
        pass


class FakeSession:
    """Stand-in for BrowserSession handing out one FakePage."""

    def __init__(self, page: FakePage, fail_on_start: bool = False):
        self.page = page
        self.fail_on_start = fail_on_start
        self.started = False
        self.closed = False

    async def start(self):
        if self.fail_on_start:
            raise PlaywrightTimeout("browser launch timed out")
        self.started = True

    async def new_page(self) -> FakePage:
        return self.page

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class SessionFactory:
    """Records every session it creates; pages are built by page_builder."""

    def __init__(self, page_builder, fail_on_start: bool = False):
        self.page_builder = page_builder
        self.fail_on_start = fail_on_start
        self.sessions: List[FakeSession] = []

    def __call__(self) -> FakeSession:
        session = FakeSession(self.page_builder(), fail_on_start=self.fail_on_start)
        self.sessions.append(session)
        return session


# ============================================================
# Pipeline fakes
# ============================================================

class FakeRenderer:
    """Maps URLs to markup; exceptions in the map are raised."""

    def __init__(self, pages: Dict[str, object]):
        self.pages = pages
        self.rendered: List[str] = []

    async def render(self, url: str, wait_selector: Optional[str] = None) -> str:
        self.rendered.append(url)
        value = self.pages.get(url, "<html></html>")
        if isinstance(value, Exception):
            raise value
        return value


class FakeFetcher:
    def __init__(self, pages: Optional[Dict[str, str]] = None):
        self.pages = pages or {}
        self.fetched: List[str] = []
        self.closed = False

    async def fetch(self, url: str) -> str:
        self.fetched.append(url)
        if url not in self.pages:
            raise HttpFailure(url, "404 Not Found", attempts=3)
        return self.pages[url]

    async def close(self):
        self.closed = True


class FakeRevealer:
    def __init__(self, phone: str = "0599 999 999", enabled: bool = True):
        self.phone = phone
        self.enabled = enabled
        self.revealed: List[str] = []
        self.closed = False

    async def reveal(self, url: str) -> str:
        self.revealed.append(url)
        return self.phone

    async def close(self):
        self.closed = True


class FakeOrchestrator:
    """Returns a canned ScrapeResult and records the calls made."""

    def __init__(self, result: ScrapeResult):
        self.result = result
        self.calls: List[tuple] = []

    async def collect_one(self, url):
        self.calls.append(('one', url))
        return self.result

    async def collect_many(self, urls):
        self.calls.append(('many', urls))
        return self.result

    async def collect_all(self, homepage_url):
        self.calls.append(('all', homepage_url))
        return self.result


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def site_config():
    """Haraj config with every wait shrunk so tests never sleep."""
    return resolve_site_config(
        'haraj',
        timeouts=Timeouts(
            render_wait=0.05,
            scroll_pause=0,
            max_scroll_iterations=5,
            reveal_wait=0.05,
            reveal_poll_interval=0,
            http_timeout=1,
            detail_retries=3,
            detail_retry_delay=0,
        ),
    )


@pytest.fixture
def auth_config(site_config):
    return site_config.with_overrides(
        credentials=Credentials(username="user@example.com", password="not-a-real-password"),
    )


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def fake_revealer():
    return FakeRevealer()


@pytest.fixture
def orchestrator_override():
    """Install a FakeOrchestrator for the API; call with the result to return."""
    installed = {}

    def install(result: ScrapeResult) -> FakeOrchestrator:
        fake = FakeOrchestrator(result)
        app.dependency_overrides[get_orchestrator] = lambda: fake
        installed['fake'] = fake
        return fake

    yield install
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client():
    """Create a test client."""
    # Use TestClient directly without context manager for compatibility
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
