"""
End-to-end funder fit analysis for one organization.

Flow:
1. Validate the EIN and look up the organization (ProPublica API)
2. In parallel: load the most recent e-file XML, and search press coverage
3. Parse -> classify -> score -> aggregate (pure, no I/O)

Missing XML is not an error: the result carries has_grant_data=False and
consumers fall back to the filing-level financials.

Usage:
    async with ProPublicaClient(cache=LookupCache()) as propublica:
        analyzer = FoundationAnalyzer(propublica, news=NewsSearchCollector())
        result = await analyzer.analyze("842108762")
"""

import asyncio
from typing import Optional, Union

from funder_fit.collectors.news_search import NewsSearchCollector
from funder_fit.collectors.propublica import ProPublicaClient
from funder_fit.exceptions import (
    AnalysisFailedError,
    InvalidEinError,
    OrganizationNotFoundError,
    UpstreamError,
)
from funder_fit.parsers.grant_parser import parse_filing_summary, parse_xml_grants
from funder_fit.schemas.analysis import AnalysisResult
from funder_fit.schemas.grants import FormType
from funder_fit.schemas.organization import Filing, Organization
from funder_fit.schemas.scoring import LeadershipSignal, UserPreferences
from funder_fit.scorers.cause_breakdown import aggregate_cause_areas, top_recipients
from funder_fit.scorers.cause_classifier import classify_grants
from funder_fit.scorers.fit_scorer import FitScorer
from funder_fit.scorers.geographic_focus import calculate_geographic_focus
from funder_fit.scorers.profile_registry import FunderProfile, get_funder_profile
from funder_fit.utils.ein_utils import require_ein_digits
from funder_fit.utils.formatting import get_form_type_name
from funder_fit.utils.logger import PipelineLogger
from funder_fit.utils.ntee_mapper import classify_by_ntee_code, get_ntee_description


class FoundationAnalyzer:
    """
    Orchestrates lookups and scoring for one funder profile.

    The analyzer holds no per-request state; concurrent analyze() calls
    share only the collectors (and through them the lookup cache).
    """

    def __init__(
        self,
        propublica: ProPublicaClient,
        news: Optional[NewsSearchCollector] = None,
        profile: Optional[FunderProfile] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        """
        Args:
            propublica: ProPublica client (carries the lookup cache)
            news: Press collector; None disables the leadership dimension input
            profile: Funder profile (default profile from funder_profiles.yaml when None)
            logger: Logger instance
        """
        self.propublica = propublica
        self.news = news
        self.profile = profile or get_funder_profile()
        self.logger = logger or PipelineLogger(name="analysis_service")

    def _scorer(self, preferences: Optional[UserPreferences]) -> FitScorer:
        return self.profile.build_scorer(preferences)

    async def analyze(
        self,
        ein: str,
        preferences: Optional[UserPreferences] = None,
        include_leadership: bool = True,
    ) -> AnalysisResult:
        """
        Analyze an organization's most recent filing.

        Args:
            ein: EIN with or without the dash
            preferences: Overrides the profile's preferences
            include_leadership: Search press coverage (requires a news collector)

        Raises:
            InvalidEinError: Malformed EIN
            OrganizationNotFoundError: Unknown EIN, or no filings with data
            AnalysisFailedError: Any other upstream failure (detail is logged)
        """
        ein_clean = require_ein_digits(ein)
        try:
            with self.logger.time_operation("analysis", ein=ein_clean, profile=self.profile.name):
                return await self._analyze(ein_clean, preferences, include_leadership)
        except (InvalidEinError, OrganizationNotFoundError):
            raise
        except UpstreamError as e:
            raise AnalysisFailedError(ein_clean, cause=e) from e

    async def _analyze(
        self,
        ein: str,
        preferences: Optional[UserPreferences],
        include_leadership: bool,
    ) -> AnalysisResult:
        profile = await self.propublica.get_organization(ein)
        filing = profile.latest_filing
        if filing is None:
            raise OrganizationNotFoundError(ein, "No filings found for this organization")

        organization = profile.organization
        xml_content, leadership = await asyncio.gather(
            self._load_grant_xml(ein),
            self._load_leadership(organization.name, include_leadership),
        )

        return self.build_result(
            organization=organization,
            filing=filing,
            xml_content=xml_content,
            preferences=preferences,
            leadership=leadership,
        )

    async def _load_grant_xml(self, ein: str) -> Optional[str]:
        """Most recent filing's XML, or None when unavailable."""
        try:
            object_ids = await self.propublica.get_xml_object_ids(ein)
            if not object_ids:
                self.logger.info("No e-filed XML available", ein=ein)
                return None
            return await self.propublica.fetch_xml_content(object_ids[0])
        except UpstreamError as e:
            self.logger.warning("XML processing failed, continuing without grant data", ein=ein, error=str(e))
            return None

    async def _load_leadership(self, name: str, include_leadership: bool) -> Optional[LeadershipSignal]:
        if not include_leadership or self.news is None:
            return None
        if not self.profile.weights.includes_leadership:
            self.logger.debug("Profile has no leadership dimension, skipping news search", profile=self.profile.name)
            return None
        return await self.news.search_foundation_news(name)

    def build_result(
        self,
        organization: Organization,
        filing: Filing,
        xml_content: Optional[str],
        preferences: Optional[UserPreferences] = None,
        leadership: Optional[LeadershipSignal] = None,
    ) -> AnalysisResult:
        """Assemble the AnalysisResult for already-fetched inputs."""
        core = self.analyze_document(xml_content or "", filing.form_type, preferences, leadership)
        return AnalysisResult(
            organization=organization,
            filing=filing,
            tax_year=filing.tax_prd_yr,
            form_type_name=get_form_type_name(filing.formtype),
            ntee_classification=classify_by_ntee_code(organization.ntee_code),
            ntee_description=get_ntee_description(organization.ntee_code),
            filing_summary=parse_filing_summary(xml_content) if xml_content else None,
            leadership_signals=leadership,
            **core,
        )

    def analyze_document(
        self,
        xml_content: str,
        form_type: Union[FormType, int],
        preferences: Optional[UserPreferences] = None,
        leadership: Optional[LeadershipSignal] = None,
    ) -> dict:
        """
        Parse, classify, score and aggregate one filing's XML. No I/O.

        Returns:
            dict with grants, cause_area_breakdown, top_recipients, fit_score,
            geographic_focus and has_grant_data
        """
        grants = classify_grants(parse_xml_grants(xml_content, form_type)) if xml_content else []

        fit_score = self._scorer(preferences).evaluate(grants, leadership)
        return {
            "grants": grants,
            "cause_area_breakdown": aggregate_cause_areas(grants),
            "top_recipients": top_recipients(grants),
            "fit_score": fit_score,
            "geographic_focus": calculate_geographic_focus(grants),
            "has_grant_data": bool(grants),
        }
