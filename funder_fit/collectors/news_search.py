"""
Google News collector for the Leadership & Public Signals dimension.

Searches the Google News RSS feed for a foundation name combined with
alignment topics, then fetches the first few publisher pages to pull
keyword-bearing quotes out of the article body.

Every failure here is soft: a missing feed or unreachable article only
lowers the signal, it never fails an analysis.
"""

import asyncio
import logging
import re
import xml.etree.ElementTree as ET
from email.utils import parsedate_to_datetime
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

import httpx
from bs4 import BeautifulSoup

from funder_fit.constants import (
    NEWS_ARTICLE_TIMEOUT_SECONDS,
    NEWS_MAX_ARTICLES_FETCHED,
    NEWS_MAX_RSS_ITEMS,
    NEWS_RSS_TIMEOUT_SECONDS,
)
from funder_fit.schemas.scoring import LeadershipSignal, NewsArticle
from funder_fit.scorers.leadership_signals import build_leadership_signal
from funder_fit.utils.logger import PipelineLogger

from .base import AsyncCollector

logger = logging.getLogger(__name__)

RSS_SEARCH_URL = "https://news.google.com/rss/search"
SEARCH_TERMS = ["workforce", "education", "AI", "economic mobility", "skills training"]

# Elements that never hold article prose
BOILERPLATE_TAGS = ["script", "style", "nav", "header", "footer", "aside"]
MIN_PARAGRAPH_CHARS = 20

_TAG = re.compile(r"<[^>]*>")


def build_news_query(foundation_name: str) -> str:
    return f'"{foundation_name}" ({" OR ".join(SEARCH_TERMS)})'


def decode_google_news_url(url: str) -> str:
    """
    Unwrap a Google News redirect to the publisher URL where possible.

    /rss/articles/ links are opaque and returned unchanged.
    """
    if "news.google.com/rss/articles/" in url:
        return url
    try:
        query = parse_qs(urlparse(url).query)
    except ValueError:
        return url
    for param in ("url", "u"):
        if query.get(param):
            return query[param][0]
    return url


def format_pub_date(pub_date: str) -> str:
    """RFC 822 pubDate -> 'Mon D, YYYY'; '' when unparseable."""
    if not pub_date:
        return ""
    try:
        parsed = parsedate_to_datetime(pub_date)
    except (TypeError, ValueError):
        return ""
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def _child_text(item: ET.Element, tag: str) -> str:
    child = item.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def parse_rss_items(rss_xml: str, limit: int = NEWS_MAX_RSS_ITEMS) -> List[NewsArticle]:
    """Articles from an RSS document (first `limit` items); [] on malformed XML."""
    try:
        root = ET.fromstring(rss_xml)
    except ET.ParseError as e:
        logger.warning(f"Malformed news RSS: {e}")
        return []

    articles = []
    for item in root.findall("./channel/item")[:limit]:
        description = _child_text(item, "description")
        articles.append(
            NewsArticle(
                title=_child_text(item, "title"),
                url=decode_google_news_url(_child_text(item, "link")),
                published_date=format_pub_date(_child_text(item, "pubDate")),
                source=_child_text(item, "source"),
                snippet=_TAG.sub("", description).strip(),
            )
        )
    return articles


def extract_article_text(html: str) -> str:
    """
    Paragraph text of a publisher page.

    Prefers <article>, then <main>, then the whole document; paragraphs of
    20 characters or fewer are dropped. Paragraphs are joined with '. '.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(BOILERPLATE_TAGS):
        tag.decompose()

    content = soup.find("article") or soup.find("main") or soup
    paragraphs = []
    for p in content.find_all("p"):
        text = p.get_text().strip()
        if len(text) > MIN_PARAGRAPH_CHARS:
            paragraphs.append(text)
    return ". ".join(paragraphs)


class NewsSearchCollector(AsyncCollector):
    """
    Collects press coverage for a foundation and scores it.

    Example:
        async with NewsSearchCollector() as news:
            signal = await news.search_foundation_news("Gates Foundation")
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[PipelineLogger] = None,
        rss_timeout: float = NEWS_RSS_TIMEOUT_SECONDS,
        article_timeout: float = NEWS_ARTICLE_TIMEOUT_SECONDS,
        max_articles_fetched: int = NEWS_MAX_ARTICLES_FETCHED,
    ):
        super().__init__(client=client, logger=logger, timeout=rss_timeout)
        self.article_timeout = article_timeout
        self.max_articles_fetched = max_articles_fetched

    @property
    def source_name(self) -> str:
        return "google_news"

    async def fetch_articles(self, foundation_name: str) -> List[NewsArticle]:
        result = await self.fetch_text(
            RSS_SEARCH_URL,
            content_type="rss",
            q=build_news_query(foundation_name),
            when="6m",
            ceid="US:en",
            hl="en-US",
            gl="US",
        )
        if not result.success:
            logger.warning(f"News RSS fetch failed for {foundation_name}: {result.error}")
            return []
        return parse_rss_items(result.raw_data)

    async def _fetch_article_text(self, article: NewsArticle) -> Optional[str]:
        result = await self.fetch_text(article.url, content_type="html", timeout=self.article_timeout)
        if not result.success:
            logger.debug(f"Skipping article {article.url}: {result.error}")
            return None
        return extract_article_text(result.raw_data)

    async def fetch_article_texts(self, articles: List[NewsArticle]) -> List[str]:
        """Body text of the first few articles with direct publisher URLs, fetched concurrently."""
        candidates = [
            a for a in articles[: self.max_articles_fetched] if a.url and "news.google.com" not in a.url
        ]
        texts = await asyncio.gather(*(self._fetch_article_text(a) for a in candidates))
        return [t for t in texts if t]

    async def search_foundation_news(self, foundation_name: str) -> LeadershipSignal:
        """
        Press signal for a foundation. Never raises; an unreachable feed
        yields an empty signal with score 0.
        """
        articles = await self.fetch_articles(foundation_name)
        article_texts = await self.fetch_article_texts(articles)
        signal = build_leadership_signal(articles, article_texts)

        if self.logger:
            self.logger.info(
                "News signal collected",
                foundation=foundation_name,
                articles=len(articles),
                quotes=len(signal.relevant_quotes),
                score=signal.score,
            )
        return signal
