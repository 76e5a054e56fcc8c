"""Section discovery from the homepage's category navigation."""

import logging
from typing import List

from .config import SiteConfig
from .utils.extractors import parse_document
from .utils.normalizers import resolve_url

logger = logging.getLogger(__name__)


def discover_sections(homepage_markup: str, config: SiteConfig) -> List[str]:
    """
    Extract section URLs from rendered homepage markup.

    Anchors without an href are skipped. Document order is preserved and
    duplicates are kept; callers dedupe if they need to.

    Returns:
        Absolute section URLs
    """
    document = parse_document(homepage_markup)
    anchors = document.select(config.rules.section_links)
    logger.info(f"Section links found: {len(anchors)}")

    urls = []
    for anchor in anchors:
        href = (anchor.get('href') or '').strip()
        if href:
            urls.append(resolve_url(href, config.base_url))
    return urls
