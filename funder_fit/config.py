"""
Central configuration for funder fit analysis.

Settings come from environment variables (optionally via a .env file):
  - FUNDER_FIT_HTTP_TIMEOUT (default: 30 seconds)
  - FUNDER_FIT_NEWS_TIMEOUT (default: 10 seconds)
  - FUNDER_FIT_SEARCH_TTL / FUNDER_FIT_ORG_TTL / FUNDER_FIT_XML_TTL (seconds)
  - FUNDER_FIT_LOG_LEVEL (default: INFO)
  - FUNDER_FIT_PROFILES_PATH (default: config/funder_profiles.yaml)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from funder_fit.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    NEWS_RSS_TIMEOUT_SECONDS,
    ORGANIZATION_CACHE_TTL_SECONDS,
    SEARCH_CACHE_TTL_SECONDS,
    XML_DOCUMENT_CACHE_TTL_SECONDS,
    XML_INDEX_CACHE_TTL_SECONDS,
)

load_dotenv()


def get_project_root() -> Path:
    """Get the repository root (parent of the funder_fit package)."""
    return Path(__file__).parent.parent


def get_profiles_path() -> Path:
    """
    Get the funder profiles YAML path.

    Uses FUNDER_FIT_PROFILES_PATH if set, otherwise config/funder_profiles.yaml
    at the repository root.
    """
    env_path = os.environ.get("FUNDER_FIT_PROFILES_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return get_project_root() / "config" / "funder_profiles.yaml"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Runtime settings for collectors, cache and logging.

    Attributes:
        http_timeout: Timeout in seconds for ProPublica API calls
        news_timeout: Timeout in seconds for the news RSS request
        search_ttl: Lookup cache TTL for search results (seconds)
        organization_ttl: Lookup cache TTL for org metadata (seconds)
        xml_index_ttl: Lookup cache TTL for the scraped XML object_id list (seconds)
        xml_ttl: Lookup cache TTL for raw XML documents (seconds)
        log_level: Logging level name
        profiles_path: Funder profiles YAML file
    """

    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    news_timeout: float = NEWS_RSS_TIMEOUT_SECONDS
    search_ttl: float = SEARCH_CACHE_TTL_SECONDS
    organization_ttl: float = ORGANIZATION_CACHE_TTL_SECONDS
    xml_index_ttl: float = XML_INDEX_CACHE_TTL_SECONDS
    xml_ttl: float = XML_DOCUMENT_CACHE_TTL_SECONDS
    log_level: str = "INFO"
    profiles_path: Optional[Path] = None

    def __post_init__(self):
        if self.profiles_path is None:
            self.profiles_path = get_profiles_path()

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        return cls(
            http_timeout=_env_float("FUNDER_FIT_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_SECONDS),
            news_timeout=_env_float("FUNDER_FIT_NEWS_TIMEOUT", NEWS_RSS_TIMEOUT_SECONDS),
            search_ttl=_env_float("FUNDER_FIT_SEARCH_TTL", SEARCH_CACHE_TTL_SECONDS),
            organization_ttl=_env_float("FUNDER_FIT_ORG_TTL", ORGANIZATION_CACHE_TTL_SECONDS),
            xml_index_ttl=_env_float("FUNDER_FIT_ORG_TTL", XML_INDEX_CACHE_TTL_SECONDS),
            xml_ttl=_env_float("FUNDER_FIT_XML_TTL", XML_DOCUMENT_CACHE_TTL_SECONDS),
            log_level=os.environ.get("FUNDER_FIT_LOG_LEVEL", "INFO"),
            profiles_path=get_profiles_path(),
        )
