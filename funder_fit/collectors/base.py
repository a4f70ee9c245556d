"""
Base interface for async upstream collectors.

Collectors own (or borrow) one httpx.AsyncClient and expose raw page fetches
as FetchResult values; callers decide whether a failed fetch is fatal.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from funder_fit.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from funder_fit.utils.logger import PipelineLogger

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; FunderFit/1.0; +https://projects.propublica.org/nonprofits)",
    "Accept": "application/json,text/html,application/xml;q=0.9,*/*;q=0.8",
}


@dataclass
class FetchResult:
    """Result of one HTTP fetch: raw text plus status."""

    success: bool
    raw_data: Optional[str]  # JSON, HTML, XML or RSS text
    content_type: str  # "json", "html", "xml", "rss" - informational only
    error: Optional[str] = None
    status_code: Optional[int] = None
    final_url: Optional[str] = None


class AsyncCollector(ABC):
    """
    Base class for collectors sharing an httpx.AsyncClient.

    Pass `client` to share a connection pool (and to inject an
    httpx.MockTransport in tests); otherwise one is created lazily and closed
    by `aclose()` / the async context manager.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[PipelineLogger] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ):
        self.logger = logger
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Canonical source name (e.g., 'propublica', 'google_news')."""
        ...

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=DEFAULT_HEADERS,
                follow_redirects=True,
                timeout=httpx.Timeout(self.timeout, connect=10.0),
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    async def fetch_text(self, url: str, content_type: str, timeout: Optional[float] = None, **params) -> FetchResult:
        """
        GET a URL without raising.

        Timeouts and transport errors become an unsuccessful FetchResult.
        """
        try:
            response = await self.client.get(
                url,
                params=params or None,
                timeout=timeout if timeout is not None else self.timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException:
            return FetchResult(success=False, raw_data=None, content_type=content_type, error="Timeout")
        except httpx.HTTPError as e:
            return FetchResult(success=False, raw_data=None, content_type=content_type, error=str(e))

        if response.status_code != 200:
            return FetchResult(
                success=False,
                raw_data=None,
                content_type=content_type,
                error=f"HTTP {response.status_code}",
                status_code=response.status_code,
                final_url=str(response.url),
            )

        return FetchResult(
            success=True,
            raw_data=response.text,
            content_type=content_type,
            status_code=response.status_code,
            final_url=str(response.url),
        )
