"""
Core data structures for the listing extraction pipeline.

This module defines the records produced by the pipeline, the outcome
types returned by the orchestrator, and the error taxonomy shared by
the crawlers, the assembler and the revealer.
"""

from typing import List, Dict, Optional, Any
from dataclasses import dataclass, field, asdict
from enum import Enum
from datetime import datetime, timezone

# Sentinels used instead of missing values
NOT_AVAILABLE = "N/A"
PHONE_UNDEFINED = "undefined"

# Fields resolved through selector chains (title and url come from the fragment)
EXTRACTED_FIELDS = ('price', 'location', 'phone', 'description', 'author_name')

# A detail page is fetched when one of these is still at its sentinel
GAP_FIELDS = ('price', 'description', 'phone', 'author_name')


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    GRAY = '\033[90m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def gray(text):
        return f"{Colors.GRAY}{text}{Colors.RESET}"


def sentinel_for(field_name: str) -> str:
    """Return the sentinel a field holds while unresolved."""
    return PHONE_UNDEFINED if field_name == 'phone' else NOT_AVAILABLE


# ============================================================
# ERRORS
# ============================================================

class ScraperError(Exception):
    """Base class for all pipeline errors."""


class RenderTimeout(ScraperError):
    """The listing-bearing element never appeared on a rendered page."""


class ElementNotFound(ScraperError):
    """A required interactive element is missing from the page."""


class HttpFailure(ScraperError):
    """A plain HTTP fetch failed after all retries."""

    def __init__(self, url: str, message: str, attempts: int = 1):
        super().__init__(f"{message} ({url}, {attempts} attempt(s))")
        self.url = url
        self.attempts = attempts


class AuthFailure(ScraperError):
    """The login or reveal sequence aborted."""

    def __init__(self, step: 'RevealStep', message: str):
        super().__init__(f"{step.value}: {message}")
        self.step = step


class EmptyResult(ScraperError):
    """A page rendered fine but contained no listing fragments."""


# ============================================================
# RECORDS
# ============================================================

@dataclass
class ListingRecord:
    """One classified ad discovered on a listing page."""
    title: str = NOT_AVAILABLE
    url: str = NOT_AVAILABLE
    price: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE
    phone: str = PHONE_UNDEFINED
    description: str = NOT_AVAILABLE
    author_name: str = NOT_AVAILABLE

    @property
    def has_url(self) -> bool:
        return self.url != NOT_AVAILABLE

    def is_default(self, field_name: str) -> bool:
        return getattr(self, field_name) == sentinel_for(field_name)

    def missing_fields(self, fields=GAP_FIELDS) -> List[str]:
        """Names of the given fields still at their sentinel."""
        return [f for f in fields if self.is_default(f)]

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class DetailFieldSet:
    """Fields read from a detail page; everything starts at N/A."""
    price: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE
    phone: str = NOT_AVAILABLE
    description: str = NOT_AVAILABLE
    author_name: str = NOT_AVAILABLE

    def resolved(self) -> Dict[str, str]:
        """Only the fields the detail page actually provided."""
        return {k: v for k, v in asdict(self).items() if v != NOT_AVAILABLE}


# ============================================================
# REVEAL STATE MACHINE
# ============================================================

class RevealStep(Enum):
    """States of the login / reveal-contact sequence, in order."""
    OPEN_HOME = "open_home"
    CLICK_LOGIN = "click_login"
    AWAIT_LOGIN_MODAL = "await_login_modal"
    FILL_USERNAME = "fill_username"
    CLICK_NEXT = "click_next"
    FILL_PASSWORD = "fill_password"
    CLICK_SUBMIT = "click_submit"
    AWAIT_MODAL_DISMISSED = "await_modal_dismissed"
    NAVIGATE_TO_LISTING = "navigate_to_listing"
    CLICK_REVEAL = "click_reveal"
    AWAIT_REVEALED_VALUE = "await_revealed_value"
    EXTRACT_PHONE = "extract_phone"
    VALIDATE = "validate"

    @property
    def number(self) -> int:
        return list(RevealStep).index(self) + 1


@dataclass
class SessionState:
    """Transient state of one authenticated browser session."""
    authenticated: bool = False
    step: Optional[RevealStep] = None
    reveals: int = 0


# ============================================================
# OUTCOMES
# ============================================================

class PageStatus(Enum):
    """How processing of a single page ended."""
    OK = "ok"
    PARTIAL = "partial"     # some listings failed, the rest were kept
    EMPTY = "empty"         # rendered fine, nothing to extract
    FAILED = "failed"       # render/discovery error, nothing extracted


@dataclass
class PageResult:
    """Outcome of scraping one page."""
    url: str
    status: PageStatus = PageStatus.OK
    count: int = 0
    error: Optional[str] = None
    listing_errors: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'status': self.status.value,
            'count': self.count,
            'error': self.error,
            'listing_errors': self.listing_errors[:10],  # Limit error details
        }


@dataclass
class ScrapeResult:
    """Result of an orchestration call."""
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    listings: List[ListingRecord] = field(default_factory=list)
    pages: List[PageResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.listings)

    @property
    def errors(self) -> int:
        return sum(1 for p in self.pages if p.status in (PageStatus.FAILED, PageStatus.PARTIAL))

    @property
    def success(self) -> bool:
        return self.errors == 0

    @property
    def has_errors(self) -> bool:
        return not self.success

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def finish(self) -> 'ScrapeResult':
        self.completed_at = datetime.now(timezone.utc)
        return self

    def to_dict(self) -> Dict:
        return {
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'duration_seconds': self.duration_seconds,
            'total': self.total,
            'errors': self.errors,
            'success': self.success,
            'pages': [p.to_dict() for p in self.pages],
            'listings': [listing.to_dict() for listing in self.listings],
        }
