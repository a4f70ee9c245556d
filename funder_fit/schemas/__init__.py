"""Pydantic models for grants, funder preferences and analysis results."""

from funder_fit.schemas.analysis import AnalysisResult, FilingSummary
from funder_fit.schemas.grants import (
    CauseArea,
    ClassifiedGrant,
    FormType,
    Grant,
    NteeClassification,
)
from funder_fit.schemas.organization import (
    Filing,
    Organization,
    OrganizationProfile,
    SearchHit,
    SearchResult,
)
from funder_fit.schemas.scoring import (
    DEFAULT_PREFERENCES,
    CauseAreaBreakdown,
    FitScoreDimension,
    FitScoreResult,
    GeographicFocus,
    LeadershipSignal,
    NewsArticle,
    RecipientType,
    UserPreferences,
)

__all__ = [
    # Grants
    "CauseArea",
    "FormType",
    "Grant",
    "ClassifiedGrant",
    "NteeClassification",
    # Upstream registry
    "Organization",
    "Filing",
    "OrganizationProfile",
    "SearchHit",
    "SearchResult",
    # Scoring
    "DEFAULT_PREFERENCES",
    "RecipientType",
    "UserPreferences",
    "FitScoreDimension",
    "FitScoreResult",
    "GeographicFocus",
    "CauseAreaBreakdown",
    "NewsArticle",
    "LeadershipSignal",
    # Analysis
    "FilingSummary",
    "AnalysisResult",
]
