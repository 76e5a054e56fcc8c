"""Shared utilities for scrapers."""

from .normalizers import (
    clean_text,
    resolve_url,
    normalize_phone,
    is_reveal_placeholder,
    phone_from_tel_href,
)
from .extractors import (
    parse_document,
    select_first_text,
    extract_fields,
    find_fragments,
    find_enclosing_anchor,
    extract_listing_fields,
    extract_detail_fields,
)

__all__ = [
    'clean_text',
    'resolve_url',
    'normalize_phone',
    'is_reveal_placeholder',
    'phone_from_tel_href',
    'parse_document',
    'select_first_text',
    'extract_fields',
    'find_fragments',
    'find_enclosing_anchor',
    'extract_listing_fields',
    'extract_detail_fields',
]
