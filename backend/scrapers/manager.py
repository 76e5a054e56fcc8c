"""
Scrape orchestrator - top-level control of the extraction pipeline.

Provides three entry points: a single listing page, an explicit list of
section pages, and every section discoverable from a homepage. All of
them honor the site's global result cap.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from .assembler import ListingAssembler
from .base import (
    Colors,
    EXTRACTED_FIELDS,
    EmptyResult,
    ListingRecord,
    PageResult,
    PageStatus,
    ScrapeResult,
)
from .config import SiteConfig, get_site_config
from .crawlers.renderer import PageRenderer
from .crawlers.revealer import AuthenticatedRevealer
from .crawlers.static import StaticFetcher
from .sections import discover_sections
from .utils.extractors import parse_document, find_fragments
from .utils.normalizers import clean_text

logger = logging.getLogger(__name__)


class ScrapeOrchestrator:
    """
    Runs the pipeline for one site.

    Usage:
        orchestrator = ScrapeOrchestrator(config)

        # Plain capped lists
        listings = await orchestrator.scrape_one(url)
        listings = await orchestrator.scrape_many([url_a, url_b])
        listings = await orchestrator.scrape_all(homepage_url)

        # Same calls with per-page outcomes
        result = await orchestrator.collect_many([url_a, url_b])
        result.pages  # PageResult for every page visited

    Pages are processed sequentially in the order given; listings keep
    document order within a page. Errors never propagate: a failing page
    is recorded as FAILED and whatever was already collected is returned.
    """

    def __init__(
        self,
        config: SiteConfig,
        renderer: Optional[PageRenderer] = None,
        fetcher: Optional[StaticFetcher] = None,
        revealer: Optional[AuthenticatedRevealer] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Site configuration (selectors, timeouts, cap, credentials)
            renderer: Page renderer (defaults to a Playwright renderer)
            fetcher: Detail page fetcher (defaults to an httpx fetcher)
            revealer: Phone revealer (defaults to one when credentials are set)
        """
        self.config = config
        self.max_results = config.max_results
        self.renderer = renderer or PageRenderer(config)
        self.fetcher = fetcher or StaticFetcher(
            base_url=config.base_url,
            timeout=config.timeouts.http_timeout,
            max_retries=config.timeouts.detail_retries,
            retry_delay=config.timeouts.detail_retry_delay,
            user_agent=config.user_agent,
        )
        if revealer is None and config.credentials.is_complete:
            revealer = AuthenticatedRevealer(config)
        self.revealer = revealer
        self.assembler = ListingAssembler(config, self.fetcher, self.revealer)
        self._scope_depth = 0

    # ------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------

    async def scrape_one(self, url: str) -> List[ListingRecord]:
        return (await self.collect_one(url)).listings

    async def scrape_many(self, urls: List[str]) -> List[ListingRecord]:
        return (await self.collect_many(urls)).listings

    async def scrape_all(self, homepage_url: str) -> List[ListingRecord]:
        return (await self.collect_all(homepage_url)).listings

    async def collect_one(self, url: str) -> ScrapeResult:
        result = ScrapeResult()
        async with self._run_scope():
            await self._scrape_page(url, result, self.max_results)
        return result.finish()

    async def collect_many(self, urls: List[str]) -> ScrapeResult:
        result = ScrapeResult()
        async with self._run_scope():
            await self._scrape_pages(urls, result)
        logger.info(f"Multi-section extraction finished. Total: {result.total}")
        return result.finish()

    async def collect_all(self, homepage_url: str) -> ScrapeResult:
        result = ScrapeResult()
        async with self._run_scope():
            logger.info(f"Extracting section links from homepage {homepage_url}")
            try:
                markup = await self.renderer.render(homepage_url, wait_selector=self.config.rules.section_links)
                section_urls = discover_sections(markup, self.config)
            except Exception as e:
                logger.error(f"Error while scraping the homepage {homepage_url}: {e}", exc_info=True)
                result.pages.append(PageResult(
                    url=homepage_url,
                    status=PageStatus.FAILED,
                    error=f"{type(e).__name__}: {e}",
                ))
                return result.finish()

            await self._scrape_pages(section_urls, result)
        logger.info(f"Total listings extracted from all sections: {result.total}")
        return result.finish()

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    @asynccontextmanager
    async def _run_scope(self):
        """Share the HTTP client and authenticated session for one run."""
        self._scope_depth += 1
        try:
            yield
        finally:
            self._scope_depth -= 1
            if self._scope_depth == 0:
                await self.fetcher.close()
                if self.revealer is not None:
                    await self.revealer.close()

    async def _scrape_pages(self, urls: List[str], result: ScrapeResult):
        for url in urls:
            remaining = self.max_results - result.total
            if remaining <= 0:
                logger.info(f"Result cap of {self.max_results} reached, skipping remaining sections")
                break
            logger.info(f"Scraping section: {url}")
            await self._scrape_page(url, result, remaining)
        del result.listings[self.max_results:]

    async def _scrape_page(self, url: str, result: ScrapeResult, limit: int) -> PageResult:
        """Scrape one listing page, appending at most `limit` records to result."""
        page = PageResult(url=url)
        result.pages.append(page)

        try:
            markup = await self.renderer.render(url)
            fragments = find_fragments(parse_document(markup), self.config.rules)
            logger.info(f"Listings found: {len(fragments)}")
            if not fragments:
                raise EmptyResult(f"No listing fragments on {url}")
        except EmptyResult as e:
            logger.info(str(e))
            page.status = PageStatus.EMPTY
            return page
        except Exception as e:
            logger.error(f"Error while scraping {url}: {e}", exc_info=True)
            page.status = PageStatus.FAILED
            page.error = f"{type(e).__name__}: {e}"
            return page

        for fragment in fragments:
            if page.count >= limit:
                break
            try:
                record = await self.assembler.assemble(fragment)
            except Exception as e:
                logger.error(f"   {Colors.red('[ERR]')} Failed to assemble listing on {url}: {e}", exc_info=True)
                page.listing_errors.append({
                    'title': clean_text(fragment.get_text())[:120],
                    'error': f"{type(e).__name__}: {e}",
                })
                continue
            result.listings.append(record)
            page.count += 1
            missing = record.missing_fields(EXTRACTED_FIELDS)
            fields = [Colors.gray(f) if f in missing else Colors.green(f) for f in EXTRACTED_FIELDS]
            logger.info(f"   [{page.count}] {record.title}: {', '.join(fields)}")

        if page.listing_errors:
            page.status = PageStatus.PARTIAL
        logger.info(f"Extraction finished. {Colors.green(f'{page.count} listings')} collected from {url}")
        return page


# Convenience functions for standalone usage

async def scrape_one(url: str, config: Optional[SiteConfig] = None) -> List[ListingRecord]:
    orchestrator = ScrapeOrchestrator(config or get_site_config('haraj'))
    return await orchestrator.scrape_one(url)


async def scrape_many(urls: List[str], config: Optional[SiteConfig] = None) -> List[ListingRecord]:
    orchestrator = ScrapeOrchestrator(config or get_site_config('haraj'))
    return await orchestrator.scrape_many(urls)


async def scrape_all(homepage_url: str, config: Optional[SiteConfig] = None) -> List[ListingRecord]:
    orchestrator = ScrapeOrchestrator(config or get_site_config('haraj'))
    return await orchestrator.scrape_all(homepage_url)
