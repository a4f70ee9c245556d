"""
Parsers for IRS Form 990 e-file XML.

- field_extractor: tolerant per-grant field extraction across schema versions
- grant_parser: Schedule I / 990-PF grant lists and filing-level summaries
"""

from .field_extractor import extract_grant
from .grant_parser import parse_document, parse_filing_summary, parse_grants, parse_xml_grants

__all__ = [
    "extract_grant",
    "parse_document",
    "parse_filing_summary",
    "parse_grants",
    "parse_xml_grants",
]
