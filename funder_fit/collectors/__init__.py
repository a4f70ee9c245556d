"""
Async upstream collectors.

- ProPublicaClient: organization metadata, filings and e-file XML
- NewsSearchCollector: Google News press coverage for the leadership signal
"""

from .base import AsyncCollector, FetchResult
from .news_search import NewsSearchCollector
from .propublica import ProPublicaClient

__all__ = ["AsyncCollector", "FetchResult", "NewsSearchCollector", "ProPublicaClient"]
