"""
Field extraction for IRS e-file grant records.

IRS e-file schemas renamed fields across years (e.g. BusinessNameLine1 became
BusinessNameLine1Txt, CashGrantAmount became CashGrantAmt). Each field is
therefore read through an ordered list of alias paths and the first path
whose full traversal succeeds wins.

The XML is first converted to a plain tree of nested dicts (namespace
prefixes stripped, leaf text as strings, repeated tags as lists) so the
accessors stay independent of ElementTree.
"""

import re
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from funder_fit.constants import UNKNOWN_RECIPIENT
from funder_fit.schemas.grants import Grant

# Grant-list tags that are always lists, even when a filing has one grant
ALWAYS_LIST_TAGS = frozenset(
    {
        "RecipientTable",
        "GrantOrContributionPdDurYrGrp",
        "GrantOrContributionPaidDuringYear",
        "GrantOrContriApprvForFutGrp",
        "GrantOrContriPaidDurYrGrp",
    }
)

NAME_PATHS = (
    "RecipientBusinessName.BusinessNameLine1Txt",
    "RecipientBusinessName.BusinessNameLine1",
    "RecipientNameBusiness.BusinessNameLine1Txt",
    "RecipientNameBusiness.BusinessNameLine1",
    "RecipientPersonNm",
    "RecipientPersonName",
)

AMOUNT_PATHS = (
    "CashGrantAmt",
    "Amt",
    "CashGrantAmount",
    "AmountOfCashGrant",
    "NonCashAssistanceAmt",
    "AmountOfNonCashAssistance",
)

PURPOSE_PATHS = (
    "PurposeOfGrantTxt",
    "PurposeOfGrant",
    "GrantOrContributionPurposeTxt",
    "PurposeOfGrantOrContribution",
)

EIN_PATHS = ("RecipientEIN", "EINOfRecipient")

STATE_PATHS = (
    "USAddress.StateAbbreviationCd",
    "RecipientUSAddress.StateAbbreviationCd",
    "AddressUS.StateAbbreviationCd",
    "USAddress.State",
    "RecipientUSAddress.State",
)

CITY_PATHS = (
    "USAddress.CityNm",
    "RecipientUSAddress.CityNm",
    "AddressUS.CityNm",
    "USAddress.City",
    "RecipientUSAddress.City",
)

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


class _Missing:
    """Sentinel for a path that does not resolve."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

TreeValue = Union[str, Dict[str, Any], List[Any]]


def _local_name(tag: str) -> str:
    """Strip the "{namespace}" prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1]


def _element_value(root: ET.Element) -> TreeValue:
    # Iterative walk; filings can nest deeper than the interpreter's recursion limit
    order: List[ET.Element] = []
    stack = [root]
    while stack:
        element = stack.pop()
        order.append(element)
        stack.extend(element)

    # Children follow their parent in pre-order, so reversed order sees them first
    values: Dict[int, TreeValue] = {}
    for element in reversed(order):
        children = list(element)
        if not children:
            values[id(element)] = (element.text or "").strip()
            continue

        node: Dict[str, Any] = {}
        for child in children:
            key = _local_name(child.tag)
            value = values.pop(id(child))
            if key in node:
                existing = node[key]
                if isinstance(existing, list):
                    existing.append(value)
                else:
                    node[key] = [existing, value]
            elif key in ALWAYS_LIST_TAGS:
                node[key] = [value]
            else:
                node[key] = value
        values[id(element)] = node
    return values[id(root)]


def element_to_tree(element: ET.Element) -> Dict[str, TreeValue]:
    """
    Convert an ElementTree element into a nested dict keyed by local tag name.

    Attributes are ignored and leaf text is kept as a (stripped) string.

    Example:
        <Return><ReturnData><IRS990PF>...</IRS990PF></ReturnData></Return>
        -> {"Return": {"ReturnData": {"IRS990PF": {...}}}}
    """
    return {_local_name(element.tag): _element_value(element)}


def get_path(node: Any, path: str) -> Any:
    """Value at a dotted path, or MISSING if any step is absent or not a mapping."""
    current = node
    for key in path.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return MISSING
        current = current[key]
    return current


def first_present(node: Any, *paths: str) -> Any:
    """Value at the first path that fully resolves, else MISSING."""
    for path in paths:
        value = get_path(node, path)
        if value is not MISSING:
            return value
    return MISSING


def first_of(*accessors: Callable[[], Optional[Any]]) -> Optional[Any]:
    """Result of the first accessor that returns something other than None."""
    for accessor in accessors:
        value = accessor()
        if value is not None:
            return value
    return None


def parse_leading_int(text: str) -> int:
    """
    Leading-integer parse of a numeric string; 0 when there is none.

    Examples:
        >>> parse_leading_int("1500.75")
        1500
        >>> parse_leading_int("abc")
        0
    """
    match = _LEADING_INTEGER.match(text)
    return int(match.group(1)) if match else 0


def extract_name(entry: Mapping[str, Any]) -> str:
    name = first_present(entry, *NAME_PATHS)
    if not isinstance(name, str):
        return UNKNOWN_RECIPIENT
    return name.strip() or UNKNOWN_RECIPIENT


def extract_amount(entry: Mapping[str, Any]) -> int:
    """Cash (or non-cash) grant amount in whole dollars; 0 if unreadable."""
    amount = first_present(entry, *AMOUNT_PATHS)
    if isinstance(amount, bool):
        return 0
    if isinstance(amount, (int, float)):
        return int(amount)
    if isinstance(amount, str):
        return parse_leading_int(amount)
    return 0


def extract_purpose(entry: Mapping[str, Any]) -> str:
    purpose = first_present(entry, *PURPOSE_PATHS)
    return purpose.strip() if isinstance(purpose, str) else ""


def extract_ein(entry: Mapping[str, Any]) -> Optional[str]:
    """Recipient EIN as digits only, or None when absent or empty."""
    ein = first_present(entry, *EIN_PATHS)
    if isinstance(ein, bool):
        return None
    if isinstance(ein, int):
        ein = f"{ein:09d}"
    elif isinstance(ein, float):
        ein = f"{int(ein):09d}"
    if not isinstance(ein, str):
        return None
    digits = re.sub(r"\D", "", ein)
    return digits or None


def extract_state(entry: Mapping[str, Any]) -> Optional[str]:
    state = first_present(entry, *STATE_PATHS)
    return state if isinstance(state, str) and state else None


def extract_city(entry: Mapping[str, Any]) -> Optional[str]:
    city = first_present(entry, *CITY_PATHS)
    return city if isinstance(city, str) and city else None


def extract_grant(entry: Mapping[str, Any]) -> Optional[Grant]:
    """
    Build a Grant from one grant record.

    Returns None when the amount is zero, negative or unreadable, since such
    records carry no giving signal.
    """
    amount = extract_amount(entry)
    if amount <= 0:
        return None

    return Grant(
        recipient_name=extract_name(entry),
        recipient_ein=extract_ein(entry),
        amount=amount,
        purpose_text=extract_purpose(entry),
        recipient_state=extract_state(entry),
        recipient_city=extract_city(entry),
    )
