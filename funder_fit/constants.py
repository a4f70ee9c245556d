"""
Global constants for funder fit analysis.

Centralizes magic numbers and configuration defaults used throughout
the package for easier maintenance and tuning.
"""

# Lookup cache TTLs (seconds) per key class
SEARCH_CACHE_TTL_SECONDS = 5 * 60  # Search results change as new orgs are indexed
ORGANIZATION_CACHE_TTL_SECONDS = 60 * 60  # Org metadata + filing list
XML_INDEX_CACHE_TTL_SECONDS = 60 * 60  # object_id list scraped from the org page
XML_DOCUMENT_CACHE_TTL_SECONDS = 24 * 60 * 60  # Filed 990 XML never changes

# Network and Timeouts
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
XML_DOWNLOAD_TIMEOUT_SECONDS = 60.0  # Large 990-PF files
NEWS_RSS_TIMEOUT_SECONDS = 10.0
NEWS_ARTICLE_TIMEOUT_SECONDS = 8.0

# News search limits
NEWS_MAX_RSS_ITEMS = 10
NEWS_MAX_ARTICLES_FETCHED = 3
NEWS_MAX_ARTICLES_RETURNED = 8
NEWS_MAX_QUOTES = 5

# Reporting
TOP_RECIPIENTS_LIMIT = 20

# Classification fallbacks
UNKNOWN_RECIPIENT = "Unknown Recipient"
FALLBACK_RELEVANCE = 0.05

# Scoring
NEUTRAL_RECIPIENT_TYPE_SCORE = 75  # "any" recipient type preference
WEIGHT_SUM_TOLERANCE = 1e-9
