"""
Pydantic models for grants extracted from Form 990 / 990-PF XML.

A Grant is created once per filing-parse pass and is immutable. A
ClassifiedGrant adds the cause area and relevance score assigned by the
keyword classifier.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from funder_fit.constants import UNKNOWN_RECIPIENT


class CauseArea(str, Enum):
    """Cause-area taxonomy for grant purposes (distinct from NTEE)."""

    WORKFORCE_DEVELOPMENT = "Workforce Development"
    ADULT_EDUCATION = "Adult Education"
    AI_TECHNOLOGY = "AI & Technology"
    ECONOMIC_MOBILITY = "Economic Mobility"
    RACIAL_EQUITY = "Racial Equity & Inclusion"
    YOUTH_DEVELOPMENT = "Youth Development"
    K12_EDUCATION = "K-12 Education"
    HIGHER_EDUCATION = "Higher Education"
    HEALTH = "Health"
    HUMAN_SERVICES = "Human Services"
    ARTS_CULTURE = "Arts & Culture"
    ENVIRONMENT = "Environment"
    COMMUNITY_DEVELOPMENT = "Community Development"
    PHILANTHROPY = "Philanthropy & Intermediary"
    INTERNATIONAL = "International"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: str) -> "CauseArea":
        """Resolve a display label, enum name, or taxonomy alias to a CauseArea.

        Raises:
            ValueError: If the label matches no cause area
        """
        cleaned = label.strip()
        alias = CAUSE_AREA_ALIASES.get(cleaned.lower())
        if alias is not None:
            return alias
        for member in cls:
            if cleaned.lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown cause area: {label!r}")


# Alternate taxonomy variant labels
CAUSE_AREA_ALIASES = {
    "technology & stem": CauseArea.AI_TECHNOLOGY,
    "tech & stem": CauseArea.AI_TECHNOLOGY,
}


class FormType(int, Enum):
    """ProPublica `formtype` discriminator for a filing."""

    FORM_990 = 0
    FORM_990EZ = 1
    FORM_990PF = 2

    @property
    def display_name(self) -> str:
        return {0: "990", 1: "990-EZ", 2: "990-PF"}[self.value]


class Grant(BaseModel):
    """Individual grant record extracted from a filing."""

    model_config = ConfigDict(frozen=True)

    recipient_name: str = UNKNOWN_RECIPIENT
    recipient_ein: Optional[str] = None  # digits only
    amount: int = Field(..., ge=0)
    purpose_text: str = ""
    recipient_state: Optional[str] = None
    recipient_city: Optional[str] = None


class ClassifiedGrant(Grant):
    """Grant with its cause area and relevance score."""

    cause_area: CauseArea
    relevance_score: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def from_grant(cls, grant: Grant, cause_area: CauseArea, relevance_score: float) -> "ClassifiedGrant":
        return cls(**grant.model_dump(), cause_area=cause_area, relevance_score=relevance_score)


class NteeClassification(BaseModel):
    """Organization-level cause area derived from its NTEE code."""

    model_config = ConfigDict(frozen=True)

    cause_area: CauseArea
    relevance: float = Field(..., ge=0.0, le=1.0)
