"""
Data normalization utilities for scrapers.

These functions standardize scraped text into consistent formats.
"""

import re
from typing import Optional
from urllib.parse import urljoin

from ..base import NOT_AVAILABLE, PHONE_UNDEFINED

_DIGIT = re.compile(r'\d')


def clean_text(text: Optional[str]) -> str:
    """
    Collapse whitespace runs and trim.

    Examples:
        "  5000   SAR \\n" -> "5000 SAR"
        None -> ""
    """
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()


def resolve_url(href: Optional[str], base_url: str) -> str:
    """
    Resolve a link against the site origin.

    Absolute links are kept as-is; relative ones are joined to base_url.
    Empty hrefs resolve to the N/A sentinel.

    Examples:
        "/11150000/car" -> "https://haraj.com.sa/11150000/car"
        "https://haraj.com.sa/x" -> "https://haraj.com.sa/x"
    """
    href = (href or '').strip()
    if not href:
        return NOT_AVAILABLE
    if href.startswith(('http://', 'https://')):
        return href
    return urljoin(base_url.rstrip('/') + '/', href)


def is_reveal_placeholder(text: Optional[str], placeholder: str) -> bool:
    """True when text is the site's "click to reveal" label."""
    return clean_text(text).casefold() == placeholder.casefold()


def normalize_phone(value: Optional[str], placeholder: str) -> str:
    """
    Force a phone value to digits-or-sentinel.

    The reveal placeholder and anything without a digit become
    "undefined"; everything else is returned trimmed.

    Examples:
        "0555 123 456" -> "0555 123 456"
        "تواصل" -> "undefined"
        "N/A" -> "undefined"
    """
    phone = clean_text(value)
    if not phone or is_reveal_placeholder(phone, placeholder) or not _DIGIT.search(phone):
        return PHONE_UNDEFINED
    return phone


def phone_from_tel_href(href: Optional[str]) -> str:
    """
    Extract the number from a tel: link.

    Examples:
        "tel:+966555123456" -> "+966555123456"
        "https://..." -> ""
    """
    href = (href or '').strip()
    if href.lower().startswith('tel:'):
        return href[len('tel:'):].strip()
    return ""
