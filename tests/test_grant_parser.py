"""Tests for the Schedule I / 990-PF grant parser and filing summaries."""

import xml.etree.ElementTree as ET

import pytest

from funder_fit.parsers.grant_parser import (
    parse_document,
    parse_filing_summary,
    parse_grants,
    parse_xml_grants,
)
from funder_fit.schemas.grants import FormType


def _return_doc(return_data: dict) -> dict:
    return {"Return": {"ReturnData": return_data}}


def _entry(name: str, amount: str) -> dict:
    return {"RecipientBusinessName": {"BusinessNameLine1Txt": name}, "CashGrantAmt": amount, "Amt": amount}


# ─── Schedule I (Form 990) ───────────────────────────────────────────────────


class TestScheduleIGrants:
    """Form 990 grants from IRS990ScheduleI."""

    def test_parses_recipient_table(self, schedule_i_xml):
        """Three paid grants; the zero-dollar record is dropped."""
        grants = parse_xml_grants(schedule_i_xml, FormType.FORM_990)
        assert [g.recipient_name for g in grants] == ["Per Scholas Inc", "Year Up Inc", "Riverside Hospital"]
        assert [g.amount for g in grants] == [500000, 1000000, 250000]

    def test_fields_extracted(self, schedule_i_xml):
        grants = parse_xml_grants(schedule_i_xml, 0)
        year_up = grants[1]
        assert year_up.recipient_ein == "133807722"
        assert year_up.recipient_state == "MA"
        assert year_up.recipient_city == "Boston"
        assert year_up.purpose_text == "Job training and career pathways"

    def test_all_containers_read(self):
        """Schedule I containers are unioned, in container order."""
        doc = _return_doc(
            {
                "IRS990ScheduleI": {
                    "RecipientTable": [_entry("A", "100")],
                    "GrantsOtherAsstToOrgsInUS": _entry("B", "200"),
                }
            }
        )
        grants = parse_grants(doc, FormType.FORM_990)
        assert [g.recipient_name for g in grants] == ["A", "B"]

    def test_990ez_uses_schedule_i_path(self):
        """Anything other than 990-PF is read from Schedule I."""
        doc = _return_doc({"IRS990ScheduleI": {"RecipientTable": [_entry("A", "100")]}})
        assert len(parse_grants(doc, FormType.FORM_990EZ)) == 1

    def test_no_schedule_i(self):
        assert parse_grants(_return_doc({"IRS990": {}}), FormType.FORM_990) == []


# ─── 990-PF ──────────────────────────────────────────────────────────────────


class TestPrivateFoundationGrants:
    """990-PF grants from the supplementary information section."""

    def test_parses_paid_grants_only(self, pf_xml):
        """Approved-for-future grants are not paid grants."""
        grants = parse_xml_grants(pf_xml, FormType.FORM_990PF)
        assert [g.recipient_name for g in grants] == ["Harold Washington College Foundation", "Lakeshore Museum"]
        assert grants[0].amount == 200000
        assert grants[0].recipient_state == "IL"
        assert grants[0].purpose_text == "Scholarships for adult learners"

    def test_first_nonempty_container_wins(self):
        """Later 990-PF containers are skipped once one yields grants."""
        doc = _return_doc(
            {
                "IRS990PF": {
                    "SupplementaryInformationGrp": {"GrantOrContributionPdDurYrGrp": [_entry("First", "100")]},
                    "GrantOrContributionPdDurYrGrp": [_entry("Second", "200")],
                }
            }
        )
        assert [g.recipient_name for g in parse_grants(doc, FormType.FORM_990PF)] == ["First"]

    def test_falls_through_empty_container(self):
        """A container whose records all have zero amounts does not stop the search."""
        doc = _return_doc(
            {
                "IRS990PF": {
                    "SupplementaryInformationGrp": {"GrantOrContributionPdDurYrGrp": [_entry("Zero", "0")]},
                    "GrantOrContributionPdDurYrGrp": [_entry("Direct", "300")],
                }
            }
        )
        assert [g.recipient_name for g in parse_grants(doc, FormType.FORM_990PF)] == ["Direct"]

    def test_older_schema_container(self):
        doc = _return_doc(
            {
                "IRS990PF": {
                    "SupplementaryInformation": {"GrantOrContributionPaidDuringYear": [_entry("Legacy", "500")]},
                }
            }
        )
        assert [g.amount for g in parse_grants(doc, 2)] == [500]

    def test_pf_ignores_schedule_i(self):
        """A 990-PF filing is never read through Schedule I paths."""
        doc = _return_doc({"IRS990ScheduleI": {"RecipientTable": [_entry("A", "100")]}})
        assert parse_grants(doc, FormType.FORM_990PF) == []


# ─── Robustness ──────────────────────────────────────────────────────────────


class TestParserRobustness:
    """Malformed or unexpected input never raises from parse_xml_grants."""

    def test_malformed_xml_returns_empty(self):
        assert parse_xml_grants("<Return><ReturnData>", FormType.FORM_990) == []

    def test_empty_string_returns_empty(self):
        assert parse_xml_grants("", FormType.FORM_990) == []

    def test_parse_document_raises_on_malformed(self):
        with pytest.raises(ET.ParseError):
            parse_document("<not-closed>")

    def test_bom_stripped(self, schedule_i_xml):
        """Leading UTF-8 BOM (decoded or mis-decoded) is tolerated."""
        assert len(parse_xml_grants("\ufeff" + schedule_i_xml, 0)) == 3
        assert len(parse_xml_grants("\u00ef\u00bb\u00bf" + schedule_i_xml, 0)) == 3

    def test_missing_return_data(self):
        assert parse_grants({"Return": {}}, FormType.FORM_990) == []
        assert parse_grants({}, FormType.FORM_990PF) == []

    def test_non_dict_entries_skipped(self):
        doc = _return_doc({"IRS990ScheduleI": {"RecipientTable": ["stray text", _entry("A", "100")]}})
        assert [g.recipient_name for g in parse_grants(doc, 0)] == ["A"]


# ─── Filing summary ──────────────────────────────────────────────────────────


class TestFilingSummary:
    """Filing-level aggregates from the return header and form body."""

    def test_form_990_summary(self, schedule_i_xml):
        summary = parse_filing_summary(schedule_i_xml)
        assert summary.tax_year == 2022
        assert summary.filer_name == "Example Community Foundation"
        assert summary.total_grants_paid == 1750000
        assert summary.total_revenue == 5000000
        assert summary.total_expenses == 4200000

    def test_pf_summary_tax_year_from_period_end(self, pf_xml):
        """Without TaxYr the year comes from TaxPeriodEndDt."""
        summary = parse_filing_summary(pf_xml)
        assert summary.tax_year == 2021
        assert summary.filer_name == "Lakeshore Family Foundation"
        assert summary.total_grants_paid == 300000
        assert summary.total_revenue == 900000
        assert summary.total_expenses is None

    def test_malformed_xml_empty_summary(self):
        summary = parse_filing_summary("<<<")
        assert summary.tax_year is None
        assert summary.total_revenue is None

    def test_deeply_nested_document(self):
        """A well-formed but very deep document still yields its header fields."""
        depth = 3000
        xml = (
            "<Return><ReturnHeader><TaxYr>2022</TaxYr></ReturnHeader><ReturnData>"
            + "<a>" * depth
            + "x"
            + "</a>" * depth
            + "</ReturnData></Return>"
        )
        assert parse_filing_summary(xml).tax_year == 2022
        assert parse_xml_grants(xml, FormType.FORM_990) == []
