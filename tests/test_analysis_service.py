"""End-to-end tests for FoundationAnalyzer over a mocked upstream."""

import httpx
import pytest

from funder_fit.collectors.news_search import NewsSearchCollector
from funder_fit.collectors.propublica import ProPublicaClient
from funder_fit.exceptions import (
    AnalysisFailedError,
    InvalidEinError,
    OrganizationNotFoundError,
    UpstreamError,
)
from funder_fit.schemas.grants import CauseArea, FormType
from funder_fit.schemas.scoring import UserPreferences
from funder_fit.scorers.fit_scorer import LEADERSHIP_SIGNALS, PRIOR_SIMILAR_FUNDING, RECIPIENT_TYPE_MATCH
from funder_fit.scorers.profile_registry import get_funder_profile
from funder_fit.services.analysis_service import FoundationAnalyzer
from funder_fit.utils.logger import PipelineLogger

EIN = "123456789"

ORG_JSON = {
    "organization": {"ein": 123456789, "name": "Example Community Foundation", "state": "NY", "ntee_code": "T20"},
    "filings_with_data": [{"tax_prd": 202212, "tax_prd_yr": 2022, "formtype": 0, "totrevenue": 5000000}],
}

ORG_PAGE = '<a href="/nonprofits/download-xml?object_id=202301349349300100">XML</a>'


class Upstream:
    """Mock ProPublica + Google News with per-test overrides."""

    def __init__(self, xml, org_json=ORG_JSON, org_status=200, org_page=ORG_PAGE, xml_status=200, news_status=503):
        self.xml = xml
        self.org_json = org_json
        self.org_status = org_status
        self.org_page = org_page
        self.xml_status = xml_status
        self.news_status = news_status
        self.hosts = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.hosts.append(request.url.host)
        path = request.url.path
        if request.url.host == "news.google.com":
            return httpx.Response(self.news_status, text="<rss><channel></channel></rss>")
        if path == f"/nonprofits/api/v2/organizations/{EIN}.json":
            return httpx.Response(self.org_status, json=self.org_json)
        if path == f"/nonprofits/organizations/{EIN}":
            return httpx.Response(200, text=self.org_page)
        if path == "/nonprofits/download-xml":
            return httpx.Response(self.xml_status, text=self.xml)
        return httpx.Response(404)

    def analyzer(self, with_news: bool = False, profile=None) -> FoundationAnalyzer:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self))
        news = NewsSearchCollector(client=client) if with_news else None
        return FoundationAnalyzer(
            ProPublicaClient(client=client),
            news=news,
            profile=profile,
            logger=PipelineLogger(name="test_analysis_service"),
        )


# ─── Happy path ───────────────────────────────────────────────────────────────


class TestAnalyze:
    """Full pipeline: lookup, XML, parse, classify, score, aggregate."""

    @pytest.mark.asyncio
    async def test_full_result(self, schedule_i_xml):
        result = await Upstream(schedule_i_xml).analyzer().analyze("12-3456789")

        assert result.organization.name == "Example Community Foundation"
        assert result.tax_year == 2022
        assert result.form_type_name == "990"
        assert result.ntee_classification.cause_area == CauseArea.PHILANTHROPY
        assert result.ntee_description == "Philanthropy & Voluntarism"
        assert result.filing_summary.total_grants_paid == 1750000
        assert result.has_grant_data

        assert [g.cause_area for g in result.grants] == [
            CauseArea.AI_TECHNOLOGY,
            CauseArea.WORKFORCE_DEVELOPMENT,
            CauseArea.HEALTH,
        ]
        assert result.top_recipients[0].recipient_name == "Year Up Inc"
        assert result.cause_area_breakdown[0].cause_area == CauseArea.WORKFORCE_DEVELOPMENT
        assert result.geographic_focus.label == "Regional: Northeast (NY, MA, NJ)"

        assert result.fit_score.overall_score == 79
        prior = result.fit_score.dimension(PRIOR_SIMILAR_FUNDING)
        assert prior.explanation == "Found 2 related grant(s): Per Scholas Inc, Year Up Inc."
        assert result.leadership_signals is None

    @pytest.mark.asyncio
    async def test_preference_override(self, schedule_i_xml):
        """'any' recipient type → 75 on that dimension: 34.8 + 18 + 12.6 + 10.5 = 75.9."""
        analyzer = Upstream(schedule_i_xml).analyzer()
        result = await analyzer.analyze(EIN, preferences=UserPreferences(recipient_type="any"))
        assert result.fit_score.dimension(RECIPIENT_TYPE_MATCH).score == 75
        assert result.fit_score.overall_score == 76

    @pytest.mark.asyncio
    async def test_leadership_from_news(self, schedule_i_xml):
        """Unreachable news feed → empty signal, analysis still succeeds."""
        upstream = Upstream(schedule_i_xml)
        result = await upstream.analyzer(with_news=True).analyze(EIN)
        assert "news.google.com" in upstream.hosts
        assert result.leadership_signals.score == 0
        assert result.fit_score.overall_score == 79

    @pytest.mark.asyncio
    async def test_leadership_skipped(self, schedule_i_xml):
        upstream = Upstream(schedule_i_xml)
        result = await upstream.analyzer(with_news=True).analyze(EIN, include_leadership=False)
        assert "news.google.com" not in upstream.hosts
        assert result.leadership_signals is None

    @pytest.mark.asyncio
    async def test_leadership_skipped_without_dimension(self, schedule_i_xml):
        """A profile whose weights have no leadership dimension never searches the news."""
        upstream = Upstream(schedule_i_xml)
        analyzer = upstream.analyzer(with_news=True, profile=get_funder_profile("merit_america_simple"))
        result = await analyzer.analyze(EIN)
        assert "news.google.com" not in upstream.hosts
        assert result.leadership_signals is None
        assert LEADERSHIP_SIGNALS not in [d.name for d in result.fit_score.dimensions]


# ─── Missing grant data ───────────────────────────────────────────────────────


class TestLimitedData:
    """No XML is a degraded result, never an error."""

    @pytest.mark.asyncio
    async def test_no_xml_links(self, schedule_i_xml):
        result = await Upstream(schedule_i_xml, org_page="<html></html>").analyzer().analyze(EIN)
        assert not result.has_grant_data
        assert result.grants == []
        assert result.filing_summary is None
        assert result.fit_score.overall_score == 0
        assert result.geographic_focus.label == "National (insufficient data)"
        # Filing-level financials still available
        assert result.filing.totrevenue == 5000000

    @pytest.mark.asyncio
    async def test_xml_download_fails(self, schedule_i_xml):
        result = await Upstream(schedule_i_xml, xml_status=500).analyzer().analyze(EIN)
        assert not result.has_grant_data

    @pytest.mark.asyncio
    async def test_malformed_xml(self):
        result = await Upstream("<Return><ReturnData>").analyzer().analyze(EIN)
        assert not result.has_grant_data
        assert result.filing_summary.tax_year is None

    @pytest.mark.asyncio
    async def test_deeply_nested_xml(self):
        """A well-formed document nested past the recursion limit degrades to no grant data."""
        depth = 3000
        xml = (
            "<Return><ReturnHeader><TaxYr>2022</TaxYr></ReturnHeader><ReturnData>"
            + "<a>" * depth
            + "x"
            + "</a>" * depth
            + "</ReturnData></Return>"
        )
        result = await Upstream(xml).analyzer().analyze(EIN)
        assert not result.has_grant_data
        assert result.filing_summary.tax_year == 2022


# ─── Failures ─────────────────────────────────────────────────────────────────


class TestAnalyzeErrors:
    @pytest.mark.asyncio
    async def test_invalid_ein(self, schedule_i_xml):
        upstream = Upstream(schedule_i_xml)
        with pytest.raises(InvalidEinError):
            await upstream.analyzer().analyze("12345")
        assert upstream.hosts == []

    @pytest.mark.asyncio
    async def test_unknown_organization(self, schedule_i_xml):
        with pytest.raises(OrganizationNotFoundError):
            await Upstream(schedule_i_xml, org_status=404).analyzer().analyze(EIN)

    @pytest.mark.asyncio
    async def test_no_filings(self, schedule_i_xml):
        org_json = {**ORG_JSON, "filings_with_data": []}
        with pytest.raises(OrganizationNotFoundError, match="No filings found"):
            await Upstream(schedule_i_xml, org_json=org_json).analyzer().analyze(EIN)

    @pytest.mark.asyncio
    async def test_upstream_failure_is_coarse(self, schedule_i_xml):
        """Internal detail stays on the cause; the message is generic."""
        with pytest.raises(AnalysisFailedError) as exc_info:
            await Upstream(schedule_i_xml, org_status=502).analyzer().analyze(EIN)
        assert str(exc_info.value).startswith(AnalysisFailedError.USER_MESSAGE)
        assert isinstance(exc_info.value.cause, UpstreamError)
        assert exc_info.value.cause.status_code == 502

    @pytest.mark.asyncio
    async def test_unexpected_organization_payload(self):
        """A 200 with the wrong JSON shape is wrapped like any other upstream failure."""
        with pytest.raises(AnalysisFailedError) as exc_info:
            await Upstream("", org_json={"error": "unexpected"}).analyzer().analyze(EIN)
        assert isinstance(exc_info.value.cause, UpstreamError)
        assert exc_info.value.cause.status_code == 200


# ─── Pure document analysis ───────────────────────────────────────────────────


class TestAnalyzeDocument:
    """analyze_document needs no network."""

    def test_private_foundation(self, pf_xml):
        analyzer = FoundationAnalyzer(ProPublicaClient(), logger=PipelineLogger(name="test_analysis_service"))
        core = analyzer.analyze_document(pf_xml, FormType.FORM_990PF)
        assert core["has_grant_data"]
        assert [g.recipient_name for g in core["grants"]] == ["Harold Washington College Foundation", "Lakeshore Museum"]
        assert core["geographic_focus"].label == "Regional: Midwest (IL, WI)"
        assert core["fit_score"].grant_count == 2

    def test_empty_document(self):
        analyzer = FoundationAnalyzer(ProPublicaClient(), logger=PipelineLogger(name="test_analysis_service"))
        core = analyzer.analyze_document("", FormType.FORM_990)
        assert core["grants"] == []
        assert not core["has_grant_data"]
