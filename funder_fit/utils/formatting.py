"""
Rounding and display formatting for score explanations and form types.
"""

import math
from typing import Union

from funder_fit.schemas.grants import FormType

Number = Union[int, float]


def round_half_up(value: float) -> int:
    """Round .5 upward (toward +inf), unlike round() which rounds half to even."""
    return math.floor(value + 0.5)


def _round_to_digits(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return math.floor(abs(value) * scale + 0.5) / scale * (1 if value >= 0 else -1)


def _plain_number(value: Number) -> str:
    if isinstance(value, float) and not value.is_integer():
        return f"{value:g}"
    return str(int(value))


def format_compact_dollars(amount: Number) -> str:
    """
    Short dollar form used in score explanations.

    Examples:
        >>> format_compact_dollars(2_500_000)
        '$2.5M'
        >>> format_compact_dollars(150_000)
        '$150K'
        >>> format_compact_dollars(750)
        '$750'
    """
    if amount >= 1_000_000:
        return f"${_round_to_digits(amount / 1_000_000, 1):.1f}M"
    if amount >= 1_000:
        return f"${_round_to_digits(amount / 1_000):.0f}K"
    return f"${_plain_number(amount)}"


def get_form_type_name(formtype: int) -> str:
    """ProPublica formtype code to display name ("Unknown" for other codes)."""
    try:
        return FormType(formtype).display_name
    except ValueError:
        return "Unknown"
