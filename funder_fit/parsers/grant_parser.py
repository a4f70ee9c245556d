"""
Grant parser for IRS Form 990 / 990-PF e-file XML.

Data flow:
1. Strip the UTF-8 BOM (common in IRS XML files) and parse with ElementTree
2. Convert to a namespace-free dict tree (see field_extractor)
3. Walk the form-specific container paths and extract one Grant per record

Schedule I (990) grants can be split across several containers, so all of
them are read. 990-PF filings carry the same grant table under different
names depending on schema year, so the first container that yields grants
wins and the rest are skipped.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Union

from funder_fit.parsers.field_extractor import (
    MISSING,
    element_to_tree,
    extract_grant,
    first_present,
    get_path,
    parse_leading_int,
)
from funder_fit.schemas.analysis import FilingSummary
from funder_fit.schemas.grants import FormType, Grant

logger = logging.getLogger(__name__)

RETURN_DATA_PATH = "Return.ReturnData"

SCHEDULE_I_GRANT_PATHS = (
    "IRS990ScheduleI.RecipientTable",
    "IRS990ScheduleI.GrantsOtherAsstToOrgsInUS",
    "IRS990ScheduleI.GrantsOtherAsstToIndivInUS",
)

PF_GRANT_PATHS = (
    "IRS990PF.SupplementaryInformationGrp.GrantOrContributionPdDurYrGrp",
    "IRS990PF.SupplementaryInformationGrp.GrantOrContriPaidDurYrGrp",
    "IRS990PF.SupplementaryInformation.GrantOrContributionPaidDuringYear",
    # Some 990-PFs put the grant table directly under the form
    "IRS990PF.GrantOrContributionPdDurYrGrp",
)

# Filing-level aggregate financials, by schema year and form
SUMMARY_PATHS = {
    "tax_year": ("Return.ReturnHeader.TaxYr", "Return.ReturnHeader.TaxYear"),
    "tax_period_end": ("Return.ReturnHeader.TaxPeriodEndDt", "Return.ReturnHeader.TaxPeriodEndDate"),
    "filer_name": (
        "Return.ReturnHeader.Filer.BusinessName.BusinessNameLine1Txt",
        "Return.ReturnHeader.Filer.BusinessName.BusinessNameLine1",
        "Return.ReturnHeader.Filer.Name.BusinessNameLine1",
    ),
    "total_grants_paid": (
        "Return.ReturnData.IRS990.GrantsAndSimilarAmtsCYAmt",
        "Return.ReturnData.IRS990.GrantsAndSimilarAmountsCY",
        "Return.ReturnData.IRS990EZ.GrantsAndSimilarAmountsPaidAmt",
        "Return.ReturnData.IRS990PF.AnalysisOfRevenueAndExpenses.ContriPaidRevAndExpnssAmt",
        "Return.ReturnData.IRS990PF.AnalysisOfRevenueAndExpenses.ContributionsGiftsGrantsPaid",
    ),
    "total_revenue": (
        "Return.ReturnData.IRS990.CYTotalRevenueAmt",
        "Return.ReturnData.IRS990.TotalRevenueCurrentYear",
        "Return.ReturnData.IRS990EZ.TotalRevenueAmt",
        "Return.ReturnData.IRS990PF.AnalysisOfRevenueAndExpenses.TotalRevAndExpnssAmt",
    ),
    "total_expenses": (
        "Return.ReturnData.IRS990.CYTotalExpensesAmt",
        "Return.ReturnData.IRS990.TotalExpensesCurrentYear",
        "Return.ReturnData.IRS990EZ.TotalExpensesAmt",
        "Return.ReturnData.IRS990PF.AnalysisOfRevenueAndExpenses.TotalExpensesRevAndExpnssAmt",
    ),
}


def _strip_bom(xml_content: str) -> str:
    # BOM can appear as \ufeff (proper decode) or the latin-1 decode of EF BB BF
    if xml_content.startswith("\ufeff"):
        return xml_content[1:]
    if xml_content.startswith("\u00ef\u00bb\u00bf"):
        return xml_content[3:]
    return xml_content


def parse_document(xml_content: str) -> Dict[str, Any]:
    """
    Parse raw e-file XML into a dict tree.

    Raises:
        ET.ParseError: If the XML is malformed
    """
    root = ET.fromstring(_strip_bom(xml_content).strip())
    return element_to_tree(root)


def _as_list(value: Any) -> List[Any]:
    if value is MISSING or value is None or value == "":
        return []
    return value if isinstance(value, list) else [value]


def _grants_at(return_data: Dict[str, Any], path: str) -> List[Grant]:
    grants = []
    for entry in _as_list(get_path(return_data, path)):
        if not isinstance(entry, dict):
            continue
        grant = extract_grant(entry)
        if grant is not None:
            grants.append(grant)
    return grants


def _parse_schedule_i_grants(return_data: Dict[str, Any]) -> List[Grant]:
    grants: List[Grant] = []
    for path in SCHEDULE_I_GRANT_PATHS:
        grants.extend(_grants_at(return_data, path))
    return grants


def _parse_990pf_grants(return_data: Dict[str, Any]) -> List[Grant]:
    for path in PF_GRANT_PATHS:
        grants = _grants_at(return_data, path)
        if grants:
            return grants
    return []


def parse_grants(document: Dict[str, Any], form_type: Union[FormType, int]) -> List[Grant]:
    """
    Extract itemized grants from a parsed filing tree.

    Args:
        document: Tree from parse_document (root key "Return")
        form_type: ProPublica formtype (2 = 990-PF, anything else = Schedule I)

    Returns:
        Grants with positive amounts, in document order
    """
    return_data = get_path(document, RETURN_DATA_PATH)
    if not isinstance(return_data, dict):
        return []

    if form_type == FormType.FORM_990PF:
        return _parse_990pf_grants(return_data)
    return _parse_schedule_i_grants(return_data)


def parse_xml_grants(xml_content: str, form_type: Union[FormType, int]) -> List[Grant]:
    """
    Extract itemized grants from raw e-file XML.

    Never raises: malformed XML or an unexpected structure is logged and
    yields an empty list.
    """
    try:
        return parse_grants(parse_document(xml_content), form_type)
    except Exception as e:
        logger.warning(f"XML grant parsing failed: {e}")
        return []


def _as_float(value: Any) -> Optional[float]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _first_float(document: Dict[str, Any], paths: tuple) -> Optional[float]:
    for path in paths:
        number = _as_float(get_path(document, path))
        if number is not None:
            return number
    return None


def _extract_tax_year(document: Dict[str, Any]) -> Optional[int]:
    tax_year = first_present(document, *SUMMARY_PATHS["tax_year"])
    if isinstance(tax_year, str) and tax_year.strip().isdigit():
        return int(tax_year)
    # Fallback: TaxPeriodEndDt (format: YYYY-MM-DD)
    period_end = first_present(document, *SUMMARY_PATHS["tax_period_end"])
    if isinstance(period_end, str) and len(period_end) >= 4:
        year = parse_leading_int(period_end[:4])
        return year or None
    return None


def parse_filing_summary(xml_content: str) -> FilingSummary:
    """
    Read filing-level aggregates (tax year, filer, grants paid, revenue,
    expenses) from raw e-file XML.

    Missing values are None; malformed XML yields an empty summary.
    """
    try:
        document = parse_document(xml_content)
    except ET.ParseError as e:
        logger.warning(f"XML summary parsing failed: {e}")
        return FilingSummary()

    filer_name = first_present(document, *SUMMARY_PATHS["filer_name"])

    return FilingSummary(
        tax_year=_extract_tax_year(document),
        filer_name=filer_name.strip() if isinstance(filer_name, str) and filer_name.strip() else None,
        total_grants_paid=_first_float(document, SUMMARY_PATHS["total_grants_paid"]),
        total_revenue=_first_float(document, SUMMARY_PATHS["total_revenue"]),
        total_expenses=_first_float(document, SUMMARY_PATHS["total_expenses"]),
    )
