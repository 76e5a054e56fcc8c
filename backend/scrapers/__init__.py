"""
Listing extraction pipeline for the Haraj classifieds marketplace.

This package provides:
- JavaScript rendering with incremental scroll pagination (Playwright)
- Detail page fallback over plain HTTP (httpx + BeautifulSoup)
- Authenticated phone reveal behind the site's login wall
- Orchestration over one page, many sections, or a whole homepage
"""

from .base import (
    ListingRecord,
    DetailFieldSet,
    PageResult,
    PageStatus,
    ScrapeResult,
    ScraperError,
    RenderTimeout,
    ElementNotFound,
    HttpFailure,
    AuthFailure,
    EmptyResult,
    NOT_AVAILABLE,
    PHONE_UNDEFINED,
)
from .config import SITES, SiteConfig, ExtractionRules, Timeouts, Credentials, get_site_config
from .manager import ScrapeOrchestrator

__all__ = [
    'ListingRecord',
    'DetailFieldSet',
    'PageResult',
    'PageStatus',
    'ScrapeResult',
    'ScraperError',
    'RenderTimeout',
    'ElementNotFound',
    'HttpFailure',
    'AuthFailure',
    'EmptyResult',
    'NOT_AVAILABLE',
    'PHONE_UNDEFINED',
    'SITES',
    'SiteConfig',
    'ExtractionRules',
    'Timeouts',
    'Credentials',
    'get_site_config',
    'ScrapeOrchestrator',
]
