"""
Listing assembly.

A record is populated in three passes:
1. listing page: fields read from the fragment's card
2. detail page: plain HTTP fetch, fills only fields still at their sentinel
3. authenticated reveal: phone only, when still undefined
"""

import logging
from dataclasses import replace
from typing import Optional

from bs4 import Tag

from .base import ListingRecord, HttpFailure, PHONE_UNDEFINED
from .config import SiteConfig
from .crawlers.revealer import AuthenticatedRevealer
from .crawlers.static import StaticFetcher
from .utils.extractors import extract_listing_fields, extract_detail_fields
from .utils.normalizers import normalize_phone

logger = logging.getLogger(__name__)


class ListingAssembler:
    """Turns listing fragments into complete ListingRecords."""

    def __init__(
        self,
        config: SiteConfig,
        fetcher: StaticFetcher,
        revealer: Optional[AuthenticatedRevealer] = None,
    ):
        self.config = config
        self.rules = config.rules
        self.fetcher = fetcher
        self.revealer = revealer

    def read_fragment(self, fragment: Tag) -> ListingRecord:
        """First pass: listing-page fields, with the phone gate applied."""
        record = extract_listing_fields(fragment, self.rules, self.config.base_url)
        record.phone = normalize_phone(record.phone, self.rules.reveal_placeholder)
        return record

    async def assemble(self, fragment: Tag) -> ListingRecord:
        record = self.read_fragment(fragment)
        record = await self.resolve_gaps(record)
        return await self.resolve_phone(record)

    async def resolve_gaps(self, record: ListingRecord) -> ListingRecord:
        """
        Fill fields still at their sentinel from the detail page.

        Already-resolved fields are never overwritten. The detail page is
        not fetched when there is no URL, nothing is missing, or the phone
        is the only missing field (the revealer handles that).
        """
        if not record.has_url:
            return record
        missing = record.missing_fields()
        if not missing or missing == ['phone']:
            return record

        logger.debug(f"Fetching detail page for {record.url}, missing: {', '.join(missing)}")
        try:
            markup = await self.fetcher.fetch(record.url)
            detail = extract_detail_fields(markup, self.rules)
        except HttpFailure as e:
            logger.warning(f"Detail page unavailable, keeping defaults: {e}")
            return record
        except Exception as e:
            logger.error(f"Error extracting details from {record.url}: {e}", exc_info=True)
            return record

        updates = {}
        for name, value in detail.resolved().items():
            if not record.is_default(name):
                continue
            if name == 'phone':
                value = normalize_phone(value, self.rules.reveal_placeholder)
                if value == PHONE_UNDEFINED:
                    continue
            updates[name] = value
        return replace(record, **updates) if updates else record

    async def resolve_phone(self, record: ListingRecord) -> ListingRecord:
        """Third pass: reveal the phone through an authenticated session."""
        if not record.is_default('phone') or not record.has_url:
            return record
        if self.revealer is None or not self.revealer.enabled:
            return record

        logger.info(f"Revealing phone for listing: {record.url}")
        try:
            phone = await self.revealer.reveal(record.url)
        except Exception as e:
            logger.error(f"Phone reveal crashed for {record.url}: {e}", exc_info=True)
            return record
        return replace(record, phone=normalize_phone(phone, self.rules.reveal_placeholder))
