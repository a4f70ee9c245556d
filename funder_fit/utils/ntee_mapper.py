"""
NTEE (National Taxonomy of Exempt Entities) Code Mapper.

Maps NTEE codes to descriptions and to the grant cause-area taxonomy.
The cause-area mapping classifies an organization as a whole (from its
registry NTEE code), as opposed to the keyword classifier which works on
individual grant purposes.
"""

from typing import Optional

from funder_fit.constants import FALLBACK_RELEVANCE
from funder_fit.schemas.grants import CauseArea, NteeClassification

# Major NTEE groups (first letter)
NTEE_MAJOR_CATEGORIES = {
    "A": "Arts, Culture & Humanities",
    "B": "Education",
    "C": "Environment",
    "D": "Animal-Related",
    "E": "Health Care",
    "F": "Mental Health & Crisis",
    "G": "Disease & Disorders",
    "H": "Medical Research",
    "I": "Crime & Legal Related",
    "J": "Employment",
    "K": "Food, Agriculture & Nutrition",
    "L": "Housing & Shelter",
    "M": "Public Safety & Disaster",
    "N": "Recreation & Sports",
    "O": "Youth Development",
    "P": "Human Services",
    "Q": "International Affairs",
    "R": "Civil Rights & Advocacy",
    "S": "Community Improvement",
    "T": "Philanthropy & Voluntarism",
    "U": "Science & Technology",
    "V": "Social Science Research",
    "W": "Public & Societal Benefit",
    "X": "Religion Related",
    "Y": "Mutual & Membership Benefit",
    "Z": "Unknown",
}


def _ntee(cause_area: CauseArea, relevance: float) -> NteeClassification:
    return NteeClassification(cause_area=cause_area, relevance=relevance)


# Cause area for each major group letter
NTEE_MAJOR_GROUP_MAP = {
    "A": _ntee(CauseArea.ARTS_CULTURE, 0.05),
    "B": _ntee(CauseArea.HIGHER_EDUCATION, 0.3),
    "C": _ntee(CauseArea.ENVIRONMENT, 0.05),
    "D": _ntee(CauseArea.ENVIRONMENT, 0.05),
    "E": _ntee(CauseArea.HEALTH, 0.05),
    "F": _ntee(CauseArea.HEALTH, 0.05),
    "G": _ntee(CauseArea.HEALTH, 0.05),
    "H": _ntee(CauseArea.HEALTH, 0.05),
    "I": _ntee(CauseArea.HUMAN_SERVICES, 0.15),
    "J": _ntee(CauseArea.WORKFORCE_DEVELOPMENT, 1.0),
    "K": _ntee(CauseArea.HUMAN_SERVICES, 0.15),
    "L": _ntee(CauseArea.HUMAN_SERVICES, 0.15),
    "M": _ntee(CauseArea.HUMAN_SERVICES, 0.15),
    "N": _ntee(CauseArea.HUMAN_SERVICES, 0.15),
    "O": _ntee(CauseArea.YOUTH_DEVELOPMENT, 0.3),
    "P": _ntee(CauseArea.HUMAN_SERVICES, 0.2),
    "Q": _ntee(CauseArea.INTERNATIONAL, 0.1),
    "R": _ntee(CauseArea.RACIAL_EQUITY, 0.5),
    "S": _ntee(CauseArea.COMMUNITY_DEVELOPMENT, 0.4),
    "T": _ntee(CauseArea.PHILANTHROPY, 0.1),
    "U": _ntee(CauseArea.AI_TECHNOLOGY, 0.7),
    "V": _ntee(CauseArea.HUMAN_SERVICES, 0.15),
    "W": _ntee(CauseArea.HUMAN_SERVICES, 0.15),
    "X": _ntee(CauseArea.OTHER, 0.05),
    "Y": _ntee(CauseArea.OTHER, 0.05),
    "Z": _ntee(CauseArea.OTHER, 0.05),
}

# Two-character prefixes that refine the major group
NTEE_SUBCODE_MAP = {
    "J2": _ntee(CauseArea.WORKFORCE_DEVELOPMENT, 1.0),
    "J3": _ntee(CauseArea.WORKFORCE_DEVELOPMENT, 0.9),
    "B6": _ntee(CauseArea.ADULT_EDUCATION, 0.9),
    "B7": _ntee(CauseArea.ADULT_EDUCATION, 0.85),
    "B8": _ntee(CauseArea.K12_EDUCATION, 0.3),
    "B2": _ntee(CauseArea.K12_EDUCATION, 0.25),
    "B3": _ntee(CauseArea.K12_EDUCATION, 0.25),
    "B4": _ntee(CauseArea.HIGHER_EDUCATION, 0.35),
    "B5": _ntee(CauseArea.HIGHER_EDUCATION, 0.35),
    "B9": _ntee(CauseArea.HIGHER_EDUCATION, 0.3),
    "P2": _ntee(CauseArea.HUMAN_SERVICES, 0.25),
    "P8": _ntee(CauseArea.HUMAN_SERVICES, 0.3),
    "S2": _ntee(CauseArea.ECONOMIC_MOBILITY, 0.6),
    "S4": _ntee(CauseArea.ECONOMIC_MOBILITY, 0.55),
    "U5": _ntee(CauseArea.AI_TECHNOLOGY, 0.75),
}

UNCLASSIFIED = _ntee(CauseArea.OTHER, FALLBACK_RELEVANCE)


def classify_by_ntee_code(ntee_code: Optional[str]) -> NteeClassification:
    """
    Map an organization's NTEE code to a cause area and relevance.

    The two-character sub-code is checked first, then the major group
    letter. Empty or unrecognized codes fall back to Other / 0.05.

    Examples:
        >>> classify_by_ntee_code("J22").cause_area
        <CauseArea.WORKFORCE_DEVELOPMENT: 'Workforce Development'>
        >>> classify_by_ntee_code("B82").cause_area
        <CauseArea.K12_EDUCATION: 'K-12 Education'>
    """
    if not ntee_code:
        return UNCLASSIFIED

    code = ntee_code.strip().upper()
    if not code:
        return UNCLASSIFIED

    if code[:2] in NTEE_SUBCODE_MAP:
        return NTEE_SUBCODE_MAP[code[:2]]
    return NTEE_MAJOR_GROUP_MAP.get(code[0], UNCLASSIFIED)


def get_ntee_description(ntee_code: Optional[str]) -> str:
    """
    Major-group description for an NTEE code.

    Returns "Unknown" for empty or unrecognized codes.

    Examples:
        >>> get_ntee_description("J22")
        'Employment'
        >>> get_ntee_description("")
        'Unknown'
    """
    if not ntee_code or not ntee_code.strip():
        return "Unknown"
    return NTEE_MAJOR_CATEGORIES.get(ntee_code.strip()[0].upper(), "Unknown")
