"""
Press-signal scoring for the Leadership & Public Signals dimension.

Given the articles found for a foundation and the paragraph text of the
ones that could be fetched, collect alignment keywords and quotable
sentences and turn them into a 0-100 score:

- Article volume (up to 40): 5+ -> 40, 3+ -> 30, 1+ -> 15
- Quote depth (up to 35): 3+ -> 35, 1+ -> 20, none -> 5
- Keyword diversity (up to 25): 5+ -> 25, 3+ -> 18, 1+ -> 10

No articles means a score of 0.
"""

import re
from typing import Dict, List, Sequence

from funder_fit.constants import NEWS_MAX_ARTICLES_RETURNED, NEWS_MAX_QUOTES
from funder_fit.schemas.scoring import LeadershipSignal, NewsArticle

ALIGNMENT_KEYWORDS = [
    "workforce development",
    "workforce",
    "job training",
    "career pathways",
    "upward mobility",
    "economic mobility",
    "upskilling",
    "reskilling",
    "skills training",
    "adult education",
    "artificial intelligence",
    "AI training",
    "AI workforce",
    "digital skills",
    "tech training",
    "coding bootcamp",
    "American Dream",
    "income mobility",
    "economic opportunity",
    "merit america",
]

# Sentence length bounds (exclusive) before and after whitespace cleanup
MIN_SENTENCE_CHARS = 30
MAX_SENTENCE_CHARS = 500
MIN_QUOTE_CHARS = 40

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WHITESPACE = re.compile(r"\s+")


def calculate_news_score(article_count: int, quote_count: int, keyword_count: int) -> int:
    if article_count == 0:
        return 0

    score = 0

    if article_count >= 5:
        score += 40
    elif article_count >= 3:
        score += 30
    elif article_count >= 1:
        score += 15

    if quote_count >= 3:
        score += 35
    elif quote_count >= 1:
        score += 20
    else:
        score += 5  # articles exist but no deep quotes

    if keyword_count >= 5:
        score += 25
    elif keyword_count >= 3:
        score += 18
    elif keyword_count >= 1:
        score += 10

    return min(100, score)


def find_keywords(text: str) -> List[str]:
    """Alignment keywords contained in text (case-insensitive), in table order."""
    lower = text.lower()
    return [kw for kw in ALIGNMENT_KEYWORDS if kw.lower() in lower]


def split_sentences(text: str) -> List[str]:
    """Sentences of quotable length."""
    sentences = (s.strip() for s in _SENTENCE_SPLIT.split(text))
    return [s for s in sentences if MIN_SENTENCE_CHARS < len(s) < MAX_SENTENCE_CHARS]


def _scan_text(text: str, keywords_found: Dict[str, None], quotes: List[str], limit: int) -> None:
    for sentence in split_sentences(text):
        matched = find_keywords(sentence)
        if not matched:
            continue
        keywords_found.update(dict.fromkeys(matched))
        cleaned = _WHITESPACE.sub(" ", sentence).strip()
        if len(quotes) < limit and len(cleaned) > MIN_QUOTE_CHARS and cleaned not in quotes:
            quotes.append(cleaned)


def extract_relevant_quotes(text: str, limit: int = NEWS_MAX_QUOTES) -> List[str]:
    """Keyword-bearing sentences from article text, de-duplicated, at most limit."""
    quotes: List[str] = []
    _scan_text(text, {}, quotes, limit)
    return quotes


def build_leadership_signal(articles: Sequence[NewsArticle], article_texts: Sequence[str]) -> LeadershipSignal:
    """
    Assemble the press signal.

    Args:
        articles: All articles found (score uses the full count)
        article_texts: Paragraph text of the articles that were fetched

    Returns:
        LeadershipSignal with at most 8 articles and 5 quotes
    """
    keywords_found: Dict[str, None] = {}
    quotes: List[str] = []

    for text in article_texts:
        _scan_text(text, keywords_found, quotes, NEWS_MAX_QUOTES)

    for article in articles:
        keywords_found.update(dict.fromkeys(find_keywords(f"{article.title} {article.snippet}")))

    score = calculate_news_score(len(articles), len(quotes), len(keywords_found))

    return LeadershipSignal(
        articles=list(articles[:NEWS_MAX_ARTICLES_RETURNED]),
        relevant_quotes=quotes,
        keywords_found=list(keywords_found),
        score=score,
    )
