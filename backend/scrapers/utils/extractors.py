"""
DOM extraction utilities for scrapers.

Listing pages and detail pages are read with the same selector-chain
helper: every field has an ordered tuple of selectors and the first
one yielding non-empty text wins.
"""

from typing import Dict, List, Mapping, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from ..base import ListingRecord, DetailFieldSet, NOT_AVAILABLE, EXTRACTED_FIELDS
from ..config import ExtractionRules
from .normalizers import clean_text, resolve_url, phone_from_tel_href, is_reveal_placeholder


def parse_document(markup: str) -> BeautifulSoup:
    """Parse rendered or fetched markup into a traversable document."""
    return BeautifulSoup(markup or '', 'html.parser')


def element_text(element: Optional[Tag]) -> str:
    """
    Visible text of an element, whitespace-collapsed.

    A tel: anchor without text falls back to the number in its href.
    """
    if element is None:
        return ""
    text = clean_text(element.get_text(' ', strip=True))
    if not text and element.name == 'a':
        text = phone_from_tel_href(element.get('href'))
    return text


def select_first_text(
    root: Optional[Tag],
    selectors: Sequence[str],
    placeholder: Optional[str] = None,
) -> Optional[str]:
    """
    Apply a selector chain to root.

    Args:
        root: Element or document to search under
        selectors: Ordered candidates, most specific first
        placeholder: Text that counts as empty (the reveal label), so a
            later candidate such as a tel: link still gets its turn

    Returns:
        Text of the first candidate that matches with non-empty text, or None
    """
    if root is None:
        return None
    for selector in selectors:
        text = element_text(root.select_one(selector))
        if not text or (placeholder and is_reveal_placeholder(text, placeholder)):
            continue
        return text
    return None


def extract_fields(
    root: Optional[Tag],
    chains: Mapping[str, Sequence[str]],
    placeholder: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    """Run every field's chain against root; unmatched fields map to None."""
    return {name: select_first_text(root, selectors, placeholder) for name, selectors in chains.items()}


def find_fragments(document: BeautifulSoup, rules: ExtractionRules) -> List[Tag]:
    """Listing fragments in document order."""
    return document.select(rules.fragment)


def find_enclosing_anchor(fragment: Tag) -> Optional[Tag]:
    """
    Walk from fragment up through its ancestors to the first <a>.

    Returns None when the document root is reached without one.
    """
    node = fragment
    while node is not None and not isinstance(node, BeautifulSoup):
        if node.name == 'a':
            return node
        node = node.parent
    return None


def extract_listing_fields(fragment: Tag, rules: ExtractionRules, base_url: str) -> ListingRecord:
    """
    Build a partial record from one listing fragment.

    The fields are read from the anchor's parent element, which holds the
    whole card on listing pages. Without an anchor there is no container,
    so everything except the title stays at its sentinel.
    """
    record = ListingRecord()
    record.title = element_text(fragment) or NOT_AVAILABLE

    anchor = find_enclosing_anchor(fragment)
    if anchor is None:
        return record

    record.url = resolve_url(anchor.get('href'), base_url)
    container = anchor.parent if isinstance(anchor.parent, Tag) else None

    for name, value in extract_fields(container, rules.listing_fields, rules.reveal_placeholder).items():
        if value and name in EXTRACTED_FIELDS:
            setattr(record, name, value)
    return record


def extract_detail_fields(markup: str, rules: ExtractionRules) -> DetailFieldSet:
    """Read a standalone detail page with the detail-page chains."""
    document = parse_document(markup)
    fields = DetailFieldSet()
    for name, value in extract_fields(document, rules.detail_fields, rules.reveal_placeholder).items():
        if value and hasattr(fields, name):
            setattr(fields, name, value)
    return fields
