"""Tests for the Google News collector (RSS parsing, article text, soft failures)."""

import httpx
import pytest

from funder_fit.collectors.news_search import (
    NewsSearchCollector,
    build_news_query,
    decode_google_news_url,
    extract_article_text,
    format_pub_date,
    parse_rss_items,
)
from funder_fit.schemas.scoring import NewsArticle

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Google News</title>
    <item>
      <title>Lakeshore Foundation commits $5M to workforce training</title>
      <link>https://news.google.com/url?url=https://example.com/lakeshore-workforce</link>
      <pubDate>Tue, 05 Mar 2024 14:00:00 GMT</pubDate>
      <description>&lt;a href="https://example.com"&gt;Lakeshore&lt;/a&gt; expands upskilling grants</description>
      <source url="https://example.com">Example Times</source>
    </item>
    <item>
      <title>Foundation annual gala</title>
      <link>https://news.google.com/rss/articles/CBMiopaque</link>
      <pubDate>not a date</pubDate>
    </item>
  </channel>
</rss>
"""

ARTICLE_HTML = """
<html>
  <head><script>var tracking = "workforce development workforce development";</script></head>
  <body>
    <nav><p>Home | Workforce | Economic mobility | Subscribe today</p></nav>
    <article>
      <p>The Lakeshore Foundation announced a new workforce development initiative on Tuesday</p>
      <p>Too short</p>
      <p>Its president said reskilling displaced workers is central to economic mobility</p>
    </article>
    <footer><p>Copyright Example Times, all rights reserved worldwide</p></footer>
  </body>
</html>
"""


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ─── Pure helpers ─────────────────────────────────────────────────────────────


class TestHelpers:
    def test_query(self):
        assert build_news_query("Lakeshore Foundation") == (
            '"Lakeshore Foundation" (workforce OR education OR AI OR economic mobility OR skills training)'
        )

    def test_decode_url_param(self):
        url = "https://news.google.com/url?url=https://example.com/story"
        assert decode_google_news_url(url) == "https://example.com/story"

    def test_decode_u_param(self):
        assert decode_google_news_url("https://news.google.com/x?u=https://a.org/b") == "https://a.org/b"

    def test_opaque_article_links_unchanged(self):
        url = "https://news.google.com/rss/articles/CBMiopaque"
        assert decode_google_news_url(url) == url

    def test_pub_date(self):
        assert format_pub_date("Tue, 05 Mar 2024 14:00:00 GMT") == "Mar 5, 2024"
        assert format_pub_date("not a date") == ""
        assert format_pub_date("") == ""


class TestParseRss:
    def test_items(self):
        articles = parse_rss_items(RSS)
        assert len(articles) == 2
        first = articles[0]
        assert first.url == "https://example.com/lakeshore-workforce"
        assert first.published_date == "Mar 5, 2024"
        assert first.source == "Example Times"
        # HTML tags stripped from the description
        assert first.snippet == "Lakeshore expands upskilling grants"
        assert articles[1].published_date == ""

    def test_limit(self):
        assert len(parse_rss_items(RSS, limit=1)) == 1

    def test_malformed(self):
        assert parse_rss_items("<rss><channel>") == []


class TestExtractArticleText:
    def test_article_paragraphs_only(self):
        """Boilerplate elements and short paragraphs are dropped."""
        text = extract_article_text(ARTICLE_HTML)
        assert text == (
            "The Lakeshore Foundation announced a new workforce development initiative on Tuesday. "
            "Its president said reskilling displaced workers is central to economic mobility"
        )

    def test_falls_back_to_main_then_document(self):
        main_html = "<main><p>Paragraph inside the main element here</p></main><p>Outside paragraph text here</p>"
        assert extract_article_text(main_html) == "Paragraph inside the main element here"
        doc_html = "<div><p>Paragraph in a plain document body</p></div>"
        assert extract_article_text(doc_html) == "Paragraph in a plain document body"


# ─── Collector ────────────────────────────────────────────────────────────────


class TestNewsSearchCollector:
    @pytest.mark.asyncio
    async def test_full_signal(self):
        def routes(request):
            if request.url.host == "news.google.com":
                assert request.url.path == "/rss/search"
                assert request.url.params["when"] == "6m"
                assert request.url.params["q"].startswith('"Lakeshore Foundation"')
                return httpx.Response(200, text=RSS)
            assert str(request.url) == "https://example.com/lakeshore-workforce"
            return httpx.Response(200, text=ARTICLE_HTML)

        async with NewsSearchCollector(client=_client(routes)) as news:
            signal = await news.search_foundation_news("Lakeshore Foundation")

        assert len(signal.articles) == 2
        assert len(signal.relevant_quotes) == 2
        assert "reskilling" in signal.keywords_found
        assert "upskilling" in signal.keywords_found
        # 15 (2 articles) + 20 (2 quotes) + 25 (5+ keywords)
        assert signal.score == 60

    @pytest.mark.asyncio
    async def test_feed_failure_is_empty_signal(self):
        news = NewsSearchCollector(client=_client(lambda request: httpx.Response(503)))
        signal = await news.search_foundation_news("Anyone")
        assert signal.score == 0
        assert signal.articles == []

    @pytest.mark.asyncio
    async def test_feed_timeout_is_empty_signal(self):
        def routes(request):
            raise httpx.ReadTimeout("slow", request=request)

        signal = await NewsSearchCollector(client=_client(routes)).search_foundation_news("Anyone")
        assert signal.score == 0

    @pytest.mark.asyncio
    async def test_article_failures_skipped(self):
        def routes(request):
            if request.url.host == "news.google.com":
                return httpx.Response(200, text=RSS)
            return httpx.Response(404)

        signal = await NewsSearchCollector(client=_client(routes)).search_foundation_news("Lakeshore Foundation")
        assert len(signal.articles) == 2
        assert signal.relevant_quotes == []

    @pytest.mark.asyncio
    async def test_only_first_articles_fetched(self):
        """Only the first three direct publisher URLs are fetched."""
        fetched = []

        def routes(request):
            fetched.append(str(request.url))
            return httpx.Response(200, text="<p>Nothing relevant in this paragraph at all</p>")

        articles = [NewsArticle(url=f"https://pub{i}.example/story") for i in range(5)]
        articles.insert(1, NewsArticle(url="https://news.google.com/rss/articles/x"))
        texts = await NewsSearchCollector(client=_client(routes)).fetch_article_texts(articles)

        assert sorted(fetched) == ["https://pub0.example/story", "https://pub1.example/story"]
        assert len(texts) == 2
