"""
Site configuration for the Haraj marketplace.

Each site has a SiteConfig that defines:
- Base URL used to resolve relative links
- The extraction rules table (every CSS/XPath selector the pipeline uses)
- Timeouts, retry policy and the global result cap
- Login credentials for the contact-reveal flow (never hardcoded here)
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple


@dataclass
class Timeouts:
    """Waits and retry policy, in seconds unless noted."""
    render_wait: float = 20.0           # Listing element must appear within this
    scroll_pause: float = 8.0           # Pause after each scroll / load-more click
    max_scroll_iterations: int = 150    # Safety valve for the scroll loop
    navigation: float = 60.0
    reveal_wait: float = 30.0           # Every wait in the login/reveal sequence
    reveal_poll_interval: float = 0.5
    http_timeout: float = 30.0
    detail_retries: int = 3
    detail_retry_delay: float = 2.0


@dataclass
class Credentials:
    """Login identity for the contact-reveal flow."""
    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.password)


@dataclass
class ExtractionRules:
    """
    All selectors coupled to the site's markup.

    Field chains are ordered: the first selector yielding non-empty
    text wins. Listing-page chains run against the fragment's container,
    detail-page chains against the whole detail document.
    """
    fragment: str = "a h3"
    listing_fields: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: {
        'price': ("div.mb-8.flex.w-full.justify-end.px-2 > strong",),
        'location': ("span.city",),
        'phone': ("button[data-testid='post-contact']", "a[href^='tel:']"),
        'description': ("article[data-testid='post-article']",),
        'author_name': ("a[data-testid='post-author']",),
    })
    detail_fields: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: {
        'price': ("div.mb-8.flex.w-full.justify-end.px-2 > strong", ".price", ".item-price"),
        'location': ("span.city",),
        'phone': ("button[data-testid='post-contact']", "a[href^='tel:']"),
        'description': ("article[data-testid='post-article']", "article", "p"),
        'author_name': ("a[data-testid='post-author']",),
    })
    section_links: str = "div.custom-scroll.flex.max-w-full.flex-nowrap.overflow-x-auto.items-center a"
    load_more: str = "button.load-more"

    # Label shown instead of the phone number until contact is revealed
    reveal_placeholder: str = "تواصل"

    # Login / reveal sequence (Playwright selector syntax)
    login_button: str = "xpath=//span[contains(text(),'دخــــول')]"
    login_modal: str = "#modal-test > div > div > div"
    username_input: str = "#username"
    next_button: str = "#modal-test > div > div > div > form > button > span"
    password_input: str = "#password"
    submit_button: str = "#modal-test > div > div > div > form > button"
    modal_root: str = "#modal-test"
    reveal_button: str = "xpath=//button[contains(normalize-space(.), 'تواصل')]"
    revealed_value: str = "#modal-test > div > div > div > a:nth-child(3) > div:nth-child(2)"
    revealed_link: str = "#modal-test > div > div > div > a:nth-child(3)"


@dataclass
class SiteConfig:
    """Configuration for a scraping target."""
    name: str                           # Full display name
    short_name: str                     # Identifier used in logs
    base_url: str                       # Origin for resolving relative hrefs
    rules: ExtractionRules = field(default_factory=ExtractionRules)
    timeouts: Timeouts = field(default_factory=Timeouts)
    credentials: Credentials = field(default_factory=Credentials)
    max_results: int = 1000             # Global cap for every orchestration mode
    headless: bool = True
    reveal_headless: bool = True
    reuse_session: bool = True          # One login per orchestration run
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
    )

    def with_overrides(self, **changes) -> 'SiteConfig':
        """Copy of this config with top-level fields replaced."""
        return replace(self, **changes)


# ============================================================
# SITE CONFIGURATIONS
# ============================================================

SITES = {
    'haraj': SiteConfig(
        name='Haraj',
        short_name='HARAJ',
        base_url='https://haraj.com.sa',
    ),
}


def get_site_config(site_key: str) -> SiteConfig:
    """
    Get configuration for a site by its key.

    Raises:
        ValueError: If site_key is not found
    """
    if site_key not in SITES:
        valid_keys = ', '.join(sorted(SITES.keys()))
        raise ValueError(f"Unknown site: '{site_key}'. Valid sites: {valid_keys}")
    return SITES[site_key]


def list_sites() -> list:
    """List all site keys."""
    return list(SITES.keys())


def resolve_site_config(
    site_key: str = 'haraj',
    base_url: Optional[str] = None,
    **overrides,
) -> SiteConfig:
    """Site config with overrides applied; the registry entry is left untouched."""
    config = get_site_config(site_key)
    if base_url:
        overrides['base_url'] = base_url.rstrip('/')
    return config.with_overrides(**overrides) if overrides else config
