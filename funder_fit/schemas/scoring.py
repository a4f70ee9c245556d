"""
Pydantic models for funder preferences and fit-score outputs.

All results are computed fresh per analysis and never persisted.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from funder_fit.schemas.grants import CauseArea

DEFAULT_CAUSE_AREAS = frozenset(
    {
        CauseArea.WORKFORCE_DEVELOPMENT,
        CauseArea.AI_TECHNOLOGY,
        CauseArea.ECONOMIC_MOBILITY,
        CauseArea.ADULT_EDUCATION,
        CauseArea.RACIAL_EQUITY,
    }
)


class RecipientType(str, Enum):
    """Kind of grantee the funder prefers."""

    NONPROFIT = "nonprofit"
    UNIVERSITY = "university"
    GOVERNMENT = "government"
    ANY = "any"

    @property
    def plural_label(self) -> str:
        return {
            "nonprofit": "nonprofits",
            "university": "universities",
            "government": "government entities",
            "any": "any recipient type",
        }[self.value]


class UserPreferences(BaseModel):
    """Funder profile: grant-size sweet spot, priority causes, recipient type."""

    model_config = ConfigDict(frozen=True)

    grant_size_min: int = Field(default=100_000, gt=0)
    grant_size_max: int = Field(default=5_000_000, gt=0)
    cause_areas: frozenset[CauseArea] = DEFAULT_CAUSE_AREAS
    recipient_type: RecipientType = RecipientType.NONPROFIT

    @field_validator("cause_areas", mode="before")
    @classmethod
    def parse_cause_areas(cls, v):
        """Accept display labels and taxonomy aliases as well as enum members."""
        if v is None:
            return DEFAULT_CAUSE_AREAS
        return frozenset(a if isinstance(a, CauseArea) else CauseArea.from_label(str(a)) for a in v)

    @model_validator(mode="after")
    def check_sweet_spot(self) -> "UserPreferences":
        if self.grant_size_max < self.grant_size_min:
            raise ValueError("grant_size_max must be >= grant_size_min")
        return self


DEFAULT_PREFERENCES = UserPreferences()


class FitScoreDimension(BaseModel):
    """One weighted dimension of the fit score."""

    model_config = ConfigDict(frozen=True)

    name: str
    score: int = Field(..., ge=0, le=100)
    weight: float = Field(..., ge=0.0, le=1.0)
    explanation: str


class FitScoreResult(BaseModel):
    """Weighted composite fit score."""

    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(..., ge=0, le=100)
    dimensions: list[FitScoreDimension]
    grant_count: int = Field(..., ge=0)
    total_grant_dollars: int = Field(..., ge=0)

    def dimension(self, name: str) -> FitScoreDimension:
        """Look up a dimension by name."""
        for d in self.dimensions:
            if d.name == name:
                return d
        raise KeyError(f"Dimension '{name}' not found in {[d.name for d in self.dimensions]}")


class GeographicFocus(BaseModel):
    """National vs regional giving footprint."""

    model_config = ConfigDict(frozen=True)

    type: Literal["National", "Regional"]
    states: list[str] = Field(default_factory=list)
    label: str


class CauseAreaBreakdown(BaseModel):
    """Per-cause-area rollup of classified grants."""

    model_config = ConfigDict(frozen=True)

    cause_area: CauseArea
    total_dollars: int = Field(..., ge=0)
    grant_count: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)
    relevance_score: float = Field(..., ge=0.0, le=1.0)


class NewsArticle(BaseModel):
    """Press article found by the news collector."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    url: str = ""
    published_date: str = ""
    source: str = ""
    snippet: str = ""


class LeadershipSignal(BaseModel):
    """Pre-scored press signal (articles, quotes, keywords)."""

    model_config = ConfigDict(frozen=True)

    articles: list[NewsArticle] = Field(default_factory=list)
    relevant_quotes: list[str] = Field(default_factory=list)
    keywords_found: list[str] = Field(default_factory=list)
    score: int = Field(default=0, ge=0, le=100)

    @classmethod
    def empty(cls) -> "LeadershipSignal":
        return cls()
