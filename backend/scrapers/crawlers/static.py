"""
Static HTML fetcher for listing detail pages.

Detail pages carry their fields in server-rendered markup, so a plain
GET with browser-like headers is enough. It's much cheaper than
starting a browser and is used whenever only structural fields are missing.
"""

import asyncio
from typing import Optional, Dict
import httpx
import logging

from ..base import HttpFailure

logger = logging.getLogger(__name__)


class StaticFetcher:
    """
    Wrapper for fetching static HTML pages.

    Uses httpx for async HTTP requests with a reusable pooled client.
    Failed requests are retried with a fixed delay before HttpFailure
    is raised.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        user_agent: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            base_url: Site origin, sent as Referer
            timeout: Request timeout in seconds
            max_retries: Total attempts per URL
            retry_delay: Fixed seconds to wait between attempts
            user_agent: Browser user agent string
            headers: Custom HTTP headers (replace the defaults)
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.headers = headers or {
            'User-Agent': user_agent or 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36',
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Connection': 'keep-alive',
            'Referer': base_url,
        }
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client with connection pooling."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
                limits=httpx.Limits(
                    max_keepalive_connections=5,
                    max_connections=10,
                    keepalive_expiry=30.0
                )
            )
        return self._client

    async def close(self):
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> str:
        """
        Fetch a URL and return HTML content.

        Raises:
            HttpFailure: When every attempt failed
        """
        logger.debug(f"StaticFetcher fetching: {url}")
        client = await self._get_client()
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                response = await client.get(url)
                response.raise_for_status()
                return response.text

            except httpx.HTTPError as e:
                last_error = e
                logger.warning(f"Attempt {attempt + 1}/{self.max_retries} failed for {url}: {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay)

        raise HttpFailure(url, str(last_error), attempts=self.max_retries)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
