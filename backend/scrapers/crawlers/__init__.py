"""Browser and HTTP crawlers used by the extraction pipeline."""

from .browser import BrowserSession
from .renderer import PageRenderer
from .revealer import AuthenticatedRevealer
from .static import StaticFetcher

__all__ = ['BrowserSession', 'PageRenderer', 'AuthenticatedRevealer', 'StaticFetcher']
