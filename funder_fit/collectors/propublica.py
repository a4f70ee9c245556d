"""
ProPublica Nonprofit Explorer client.

Fetches organization metadata and filing summaries from the API, scrapes the
organization page for e-file XML object ids, and downloads the XML itself.

API Docs: https://projects.propublica.org/nonprofits/api

Data flow for one organization:
1. GET /organizations/{ein}.json -> Organization + filings_with_data
2. GET the HTML organization page -> download-xml?object_id=... links
3. GET /download-xml?object_id=... (302 to S3) -> raw 990 XML

All lookups go through an optional LookupCache with per-class TTLs.
"""

import re
from typing import Any, List, Optional, TypeVar

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel, ValidationError

from funder_fit.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, XML_DOWNLOAD_TIMEOUT_SECONDS
from funder_fit.exceptions import OrganizationNotFoundError, UpstreamError
from funder_fit.schemas.organization import OrganizationProfile, SearchResult
from funder_fit.utils.ein_utils import require_ein_digits
from funder_fit.utils.logger import PipelineLogger
from funder_fit.utils.lookup_cache import CacheKeyClass, LookupCache

from .base import AsyncCollector

XML_LINK_PATTERN = re.compile(r"download-xml\?object_id=(\d+)")

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProPublicaClient(AsyncCollector):
    """
    Async client for ProPublica Nonprofit Explorer.

    Raises:
        InvalidEinError: Malformed EIN (before any request)
        OrganizationNotFoundError: 404 from the organization endpoint
        UpstreamError: Any other HTTP, transport or decoding failure
    """

    BASE_URL = "https://projects.propublica.org/nonprofits"
    API_URL = f"{BASE_URL}/api/v2"

    def __init__(
        self,
        cache: Optional[LookupCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[PipelineLogger] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        xml_timeout: float = XML_DOWNLOAD_TIMEOUT_SECONDS,
    ):
        """
        Args:
            cache: Lookup cache (None disables caching)
            client: Shared httpx client (created lazily when omitted)
            logger: Logger instance
            timeout: Timeout in seconds for API and page requests
            xml_timeout: Timeout in seconds for XML downloads (990-PF files are large)
        """
        super().__init__(client=client, logger=logger, timeout=timeout)
        self.cache = cache
        self.xml_timeout = xml_timeout

    @property
    def source_name(self) -> str:
        return "propublica"

    def _cached(self, key_class: CacheKeyClass, key: str) -> Optional[Any]:
        if self.cache is None:
            return None
        return self.cache.get_or_none(key_class, key)

    def _store(self, key_class: CacheKeyClass, key: str, value: Any) -> None:
        if self.cache is not None:
            self.cache.set(key_class, key, value)

    async def _get(self, url: str, timeout: Optional[float] = None, **params) -> httpx.Response:
        try:
            return await self.client.get(
                url,
                params=params or None,
                timeout=timeout if timeout is not None else self.timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            raise UpstreamError(f"ProPublica request timed out: {url}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"ProPublica request failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"ProPublica returned invalid JSON from {response.url}", response.status_code) from e

    @classmethod
    def _validate(cls, model: type[ModelT], response: httpx.Response) -> ModelT:
        """Parse a JSON body into a model; an unexpected shape is an upstream failure."""
        try:
            return model.model_validate(cls._json(response))
        except ValidationError as e:
            raise UpstreamError(
                f"ProPublica returned an unexpected {model.__name__} payload from {response.url}",
                response.status_code,
            ) from e

    async def search_organizations(self, query: str, page: int = 0) -> SearchResult:
        """Full-text organization search (25 results per page)."""
        cache_key = f"{query}:{page}"
        cached = self._cached(CacheKeyClass.SEARCH, cache_key)
        if cached is not None:
            return cached

        response = await self._get(f"{self.API_URL}/search.json", q=query, page=page)
        if response.status_code == 404:
            # ProPublica answers 404 when a query matches nothing
            result = SearchResult()
        elif response.status_code != 200:
            raise UpstreamError(f"ProPublica search failed: HTTP {response.status_code}", response.status_code)
        else:
            result = self._validate(SearchResult, response)

        self._store(CacheKeyClass.SEARCH, cache_key, result)
        return result

    async def get_organization(self, ein: str) -> OrganizationProfile:
        """Organization metadata with its filings, most recent first."""
        ein_clean = require_ein_digits(ein)
        cached = self._cached(CacheKeyClass.ORGANIZATION, ein_clean)
        if cached is not None:
            return cached

        response = await self._get(f"{self.API_URL}/organizations/{ein_clean}.json")
        if response.status_code == 404:
            raise OrganizationNotFoundError(ein_clean)
        if response.status_code != 200:
            raise UpstreamError(f"ProPublica org lookup failed: HTTP {response.status_code}", response.status_code)

        profile = self._validate(OrganizationProfile, response)
        if self.logger:
            self.logger.log_upstream_fetch(self.source_name, ein_clean, success=True)
        self._store(CacheKeyClass.ORGANIZATION, ein_clean, profile)
        return profile

    async def get_xml_object_ids(self, ein: str) -> List[str]:
        """
        E-file XML object ids from the organization page, most recent first.

        Returns an empty list when the page cannot be fetched; many
        organizations have no e-filed XML at all.
        """
        ein_clean = require_ein_digits(ein)
        cached = self._cached(CacheKeyClass.XML_INDEX, ein_clean)
        if cached is not None:
            return cached

        result = await self.fetch_text(f"{self.BASE_URL}/organizations/{ein_clean}", content_type="html")
        if not result.success:
            if self.logger:
                self.logger.log_upstream_fetch("propublica_page", ein_clean, success=False, error=result.error)
            return []

        object_ids = extract_xml_object_ids(result.raw_data)
        if self.logger:
            self.logger.debug(f"Found {len(object_ids)} XML filing(s)", ein=ein_clean)
        self._store(CacheKeyClass.XML_INDEX, ein_clean, object_ids)
        return object_ids

    async def fetch_xml_content(self, object_id: str) -> str:
        """
        Download one filing's XML (ProPublica redirects to S3).

        Raises:
            UpstreamError: On any non-200 response or transport failure
        """
        cached = self._cached(CacheKeyClass.XML_DOCUMENT, object_id)
        if cached is not None:
            return cached

        response = await self._get(f"{self.BASE_URL}/download-xml", timeout=self.xml_timeout, object_id=object_id)
        if response.status_code != 200:
            raise UpstreamError(f"XML fetch failed: HTTP {response.status_code}", response.status_code)

        xml = response.text
        self._store(CacheKeyClass.XML_DOCUMENT, object_id, xml)
        return xml


def extract_xml_object_ids(html: str) -> List[str]:
    """De-duplicated object ids from download-xml links, in page order."""
    soup = BeautifulSoup(html, "html.parser")
    object_ids: List[str] = []
    for link in soup.find_all("a", href=XML_LINK_PATTERN):
        match = XML_LINK_PATTERN.search(link.get("href", ""))
        if match and match.group(1) not in object_ids:
            object_ids.append(match.group(1))
    return object_ids
