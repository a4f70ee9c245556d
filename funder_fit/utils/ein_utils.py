"""
EIN (Employer Identification Number) utilities.

Provides consistent formatting and validation for EIN numbers.
EIN format: XX-XXXXXXX (9 digits with hyphen after first 2)
"""

import re
from typing import Optional, Tuple, Union

from funder_fit.exceptions import InvalidEinError


def normalize_ein(ein: Union[str, int, None]) -> Optional[str]:
    """
    Normalize EIN to standard XX-XXXXXXX format.

    Integers are zero-padded to nine digits, since ProPublica serves EINs
    as numbers and drops leading zeros.

    Examples:
        >>> normalize_ein("842108762")
        '84-2108762'
        >>> normalize_ein(61540907)
        '06-1540907'
        >>> normalize_ein("invalid")
        None
    """
    if ein is None or ein == "":
        return None

    if isinstance(ein, int):
        ein = f"{ein:09d}"

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", str(ein))

    if len(digits) != 9:
        return None

    # IRS prefixes are 01-99
    if int(digits[:2]) < 1:
        return None

    return f"{digits[:2]}-{digits[2:]}"


def ein_to_digits(ein: Union[str, int, None]) -> Optional[str]:
    """
    Convert EIN to digits-only format (for API calls and comparisons).

    Returns:
        9-digit string without hyphen, or None if invalid
    """
    normalized = normalize_ein(ein)
    if normalized:
        return normalized.replace("-", "")
    return None


def validate_and_format(ein: Union[str, int, None]) -> Tuple[bool, Optional[str], Optional[str]]:
    """
    Validate EIN and return formatted version with error message.

    Returns:
        Tuple of (is_valid, formatted_ein, error_message)

    Examples:
        >>> validate_and_format("842108762")
        (True, '84-2108762', None)
        >>> validate_and_format("12345")
        (False, None, 'EIN must be exactly 9 digits (got 5)')
    """
    if ein is None or ein == "":
        return False, None, "EIN is required"

    if isinstance(ein, int):
        ein = f"{ein:09d}"

    digits = re.sub(r"\D", "", str(ein).strip())

    if len(digits) != 9:
        return False, None, f"EIN must be exactly 9 digits (got {len(digits)})"

    if len(set(digits)) == 1:
        return False, None, "EIN cannot be all same digit"

    formatted = normalize_ein(digits)
    if formatted is None:
        return False, None, "EIN prefix must be between 01 and 99"

    return True, formatted, None


def require_ein_digits(ein: Union[str, int, None]) -> str:
    """
    Validate an EIN supplied by a caller and return its 9-digit form.

    Raises:
        InvalidEinError: If the EIN is malformed
    """
    is_valid, formatted, error = validate_and_format(ein)
    if not is_valid:
        raise InvalidEinError(str(ein), error or "invalid EIN")
    return formatted.replace("-", "")
