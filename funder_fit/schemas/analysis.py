"""
Pydantic models for the combined analysis output.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from funder_fit.schemas.grants import ClassifiedGrant, NteeClassification
from funder_fit.schemas.organization import Filing, Organization
from funder_fit.schemas.scoring import (
    CauseAreaBreakdown,
    FitScoreResult,
    GeographicFocus,
    LeadershipSignal,
)


class FilingSummary(BaseModel):
    """Aggregate financials read from the filing XML itself."""

    model_config = ConfigDict(frozen=True)

    tax_year: Optional[int] = None
    filer_name: Optional[str] = None
    total_grants_paid: Optional[float] = None
    total_revenue: Optional[float] = None
    total_expenses: Optional[float] = None


class AnalysisResult(BaseModel):
    """
    Full analysis of one organization against a funder profile.

    When has_grant_data is False the filing carried no itemized grants;
    consumers should show a limited-data notice and rely on the filing-level
    aggregate financials only.
    """

    model_config = ConfigDict(frozen=True)

    organization: Organization
    filing: Filing
    tax_year: Optional[int] = None
    form_type_name: str
    ntee_classification: NteeClassification
    ntee_description: str = "Unknown"
    filing_summary: Optional[FilingSummary] = None
    grants: list[ClassifiedGrant] = Field(default_factory=list)
    cause_area_breakdown: list[CauseAreaBreakdown] = Field(default_factory=list)
    top_recipients: list[ClassifiedGrant] = Field(default_factory=list)
    fit_score: FitScoreResult
    geographic_focus: GeographicFocus
    leadership_signals: Optional[LeadershipSignal] = None
    has_grant_data: bool = False
