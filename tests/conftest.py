"""Shared fixtures for funder fit tests.

No test touches the network: collectors are driven through
httpx.MockTransport.
"""

import sys
from pathlib import Path

import pytest

# Add the repo root to the path so tests can import funder_fit without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from funder_fit.schemas.grants import CauseArea, ClassifiedGrant  # noqa: E402
from funder_fit.scorers import profile_registry  # noqa: E402

SCHEDULE_I_XML = """<?xml version="1.0" encoding="utf-8"?>
<Return xmlns="http://www.irs.gov/efile" returnVersion="2022v5.0">
  <ReturnHeader>
    <TaxPeriodEndDt>2022-12-31</TaxPeriodEndDt>
    <TaxYr>2022</TaxYr>
    <Filer>
      <EIN>123456789</EIN>
      <BusinessName>
        <BusinessNameLine1Txt>Example Community Foundation</BusinessNameLine1Txt>
      </BusinessName>
    </Filer>
  </ReturnHeader>
  <ReturnData documentCnt="2">
    <IRS990>
      <GrantsAndSimilarAmtsCYAmt>1750000</GrantsAndSimilarAmtsCYAmt>
      <CYTotalRevenueAmt>5000000</CYTotalRevenueAmt>
      <CYTotalExpensesAmt>4200000</CYTotalExpensesAmt>
    </IRS990>
    <IRS990ScheduleI>
      <RecipientTable>
        <RecipientBusinessName>
          <BusinessNameLine1Txt>Per Scholas Inc</BusinessNameLine1Txt>
        </RecipientBusinessName>
        <RecipientEIN>271436100</RecipientEIN>
        <USAddress>
          <CityNm>New York</CityNm>
          <StateAbbreviationCd>NY</StateAbbreviationCd>
        </USAddress>
        <CashGrantAmt>500000</CashGrantAmt>
        <PurposeOfGrantTxt>Tech training for adults</PurposeOfGrantTxt>
      </RecipientTable>
      <RecipientTable>
        <RecipientBusinessName>
          <BusinessNameLine1Txt>Year Up Inc</BusinessNameLine1Txt>
        </RecipientBusinessName>
        <RecipientEIN>133807722</RecipientEIN>
        <USAddress>
          <CityNm>Boston</CityNm>
          <StateAbbreviationCd>MA</StateAbbreviationCd>
        </USAddress>
        <CashGrantAmt>1000000</CashGrantAmt>
        <PurposeOfGrantTxt>Job training and career pathways</PurposeOfGrantTxt>
      </RecipientTable>
      <RecipientTable>
        <RecipientBusinessName>
          <BusinessNameLine1Txt>Riverside Hospital</BusinessNameLine1Txt>
        </RecipientBusinessName>
        <USAddress>
          <CityNm>Newark</CityNm>
          <StateAbbreviationCd>NJ</StateAbbreviationCd>
        </USAddress>
        <CashGrantAmt>250000</CashGrantAmt>
        <PurposeOfGrantTxt>Medical clinic operations</PurposeOfGrantTxt>
      </RecipientTable>
      <RecipientTable>
        <RecipientBusinessName>
          <BusinessNameLine1Txt>Zero Dollar Org</BusinessNameLine1Txt>
        </RecipientBusinessName>
        <CashGrantAmt>0</CashGrantAmt>
        <NonCashAssistanceAmt>0</NonCashAssistanceAmt>
      </RecipientTable>
    </IRS990ScheduleI>
  </ReturnData>
</Return>
"""

PF_XML = """<?xml version="1.0" encoding="utf-8"?>
<Return xmlns="http://www.irs.gov/efile" returnVersion="2021v4.2">
  <ReturnHeader>
    <TaxPeriodEndDt>2021-12-31</TaxPeriodEndDt>
    <Filer>
      <BusinessName>
        <BusinessNameLine1Txt>Lakeshore Family Foundation</BusinessNameLine1Txt>
      </BusinessName>
    </Filer>
  </ReturnHeader>
  <ReturnData documentCnt="1">
    <IRS990PF>
      <AnalysisOfRevenueAndExpenses>
        <TotalRevAndExpnssAmt>900000</TotalRevAndExpnssAmt>
        <ContriPaidRevAndExpnssAmt>300000</ContriPaidRevAndExpnssAmt>
      </AnalysisOfRevenueAndExpenses>
      <SupplementaryInformationGrp>
        <GrantOrContributionPdDurYrGrp>
          <RecipientBusinessName>
            <BusinessNameLine1Txt>Harold Washington College Foundation</BusinessNameLine1Txt>
          </RecipientBusinessName>
          <RecipientUSAddress>
            <CityNm>Chicago</CityNm>
            <StateAbbreviationCd>IL</StateAbbreviationCd>
          </RecipientUSAddress>
          <GrantOrContributionPurposeTxt>Scholarships for adult learners</GrantOrContributionPurposeTxt>
          <Amt>200000</Amt>
        </GrantOrContributionPdDurYrGrp>
        <GrantOrContributionPdDurYrGrp>
          <RecipientBusinessName>
            <BusinessNameLine1Txt>Lakeshore Museum</BusinessNameLine1Txt>
          </RecipientBusinessName>
          <RecipientUSAddress>
            <CityNm>Milwaukee</CityNm>
            <StateAbbreviationCd>WI</StateAbbreviationCd>
          </RecipientUSAddress>
          <GrantOrContributionPurposeTxt>Support for museum exhibitions</GrantOrContributionPurposeTxt>
          <Amt>100000</Amt>
        </GrantOrContributionPdDurYrGrp>
        <GrantOrContriApprvForFutGrp>
          <RecipientBusinessName>
            <BusinessNameLine1Txt>Future Grantee</BusinessNameLine1Txt>
          </RecipientBusinessName>
          <Amt>50000</Amt>
        </GrantOrContriApprvForFutGrp>
      </SupplementaryInformationGrp>
    </IRS990PF>
  </ReturnData>
</Return>
"""


@pytest.fixture
def schedule_i_xml():
    """Form 990 with a Schedule I recipient table (namespaced, 3 paid grants + 1 zero)."""
    return SCHEDULE_I_XML


@pytest.fixture
def pf_xml():
    """Form 990-PF with two paid grants and one approved-for-future grant."""
    return PF_XML


@pytest.fixture
def make_grant():
    """Factory for ClassifiedGrant with sensible defaults."""

    def _make(amount=100_000, cause_area=CauseArea.OTHER, relevance_score=0.05, **overrides):
        defaults = dict(
            recipient_name="Test Recipient",
            recipient_ein=None,
            purpose_text="",
            recipient_state=None,
            recipient_city=None,
        )
        defaults.update(overrides)
        return ClassifiedGrant(amount=amount, cause_area=cause_area, relevance_score=relevance_score, **defaults)

    return _make


@pytest.fixture
def sample_grants(make_grant):
    """A small mixed portfolio: workforce, tech, health."""
    return [
        make_grant(
            amount=1_000_000,
            cause_area=CauseArea.WORKFORCE_DEVELOPMENT,
            relevance_score=1.0,
            recipient_name="Year Up Inc",
            recipient_ein="133807722",
            purpose_text="Job training and career pathways",
            recipient_state="MA",
        ),
        make_grant(
            amount=500_000,
            cause_area=CauseArea.AI_TECHNOLOGY,
            relevance_score=0.85,
            recipient_name="Per Scholas Inc",
            recipient_ein="271436100",
            purpose_text="Tech training for adults",
            recipient_state="NY",
        ),
        make_grant(
            amount=250_000,
            cause_area=CauseArea.HEALTH,
            relevance_score=0.05,
            recipient_name="Riverside Hospital",
            purpose_text="Medical clinic operations",
            recipient_state="NJ",
        ),
    ]


@pytest.fixture(autouse=True)
def _clear_profile_cache():
    """Funder profile registry is module-cached; isolate every test."""
    profile_registry.clear_cache()
    yield
    profile_registry.clear_cache()
