"""
Keyword cause-area classifier for individual grants.

Each grant's purpose text and recipient name are matched against an ordered
table of (pattern, cause area, relevance) rows. Every row is tested and the
match with the highest relevance wins, so a grant that hits both a generic
and a specific keyword resolves to the more specific category. Ties go to
the row listed first.

Relevance expresses how closely the cause area tracks workforce and
economic-mobility funding:
- 1.0: core workforce development and job training
- 0.7-0.95: adjacent (adult education, tech skills, economic mobility)
- 0.3-0.6: related (equity, community development, youth, higher ed)
- 0.05-0.25: unrelated (health, arts, environment, international)

Grants matching nothing are Other / 0.05, never zero.
"""

import re
from typing import Iterable, List, NamedTuple, Pattern, Tuple

from funder_fit.constants import FALLBACK_RELEVANCE
from funder_fit.schemas.grants import CauseArea, ClassifiedGrant, Grant


class KeywordPattern(NamedTuple):
    pattern: Pattern[str]
    cause_area: CauseArea
    relevance: float


def _kw(regex: str, cause_area: CauseArea, relevance: float) -> KeywordPattern:
    return KeywordPattern(re.compile(r"\b" + regex, re.IGNORECASE), cause_area, relevance)


KEYWORD_PATTERNS: tuple = (
    # Workforce Development
    _kw(
        r"(workforce\s*develop|job\s*train|career\s*(train|pathway|readiness)|employment\s*train|vocational\s*train|apprentice)",
        CauseArea.WORKFORCE_DEVELOPMENT,
        1.0,
    ),
    _kw(
        r"(upskill|reskill|skills?\s*train|career\s*advance|career\s*develop|job\s*place|job\s*read)",
        CauseArea.WORKFORCE_DEVELOPMENT,
        0.95,
    ),
    _kw(r"(workforce|job\s*corps|staffing|labor\s*market|earn\s*and\s*learn)", CauseArea.WORKFORCE_DEVELOPMENT, 0.9),
    # Adult Education
    _kw(
        r"(adult\s*edu|adult\s*learn|continuing\s*edu|GED|credential|certification\s*program|adult\s*literacy)",
        CauseArea.ADULT_EDUCATION,
        0.9,
    ),
    _kw(r"(postsecondary|community\s*college|two[\s-]year\s*college|technical\s*college)", CauseArea.ADULT_EDUCATION, 0.8),
    # AI & Technology
    _kw(
        r"(tech\s*(train|edu|career|pathway)|coding|software\s*develop|data\s*(analy|scien)|cyber\s*secur|IT\s*train|digital\s*skill)",
        CauseArea.AI_TECHNOLOGY,
        0.85,
    ),
    _kw(r"(STEM|computer\s*science|artificial\s*intelligence|machine\s*learn)", CauseArea.AI_TECHNOLOGY, 0.7),
    # Economic Mobility
    _kw(
        r"(economic\s*mobil|upward\s*mobil|poverty\s*reduc|financial\s*stabil|income\s*(increas|mobil)|wage\s*gain)",
        CauseArea.ECONOMIC_MOBILITY,
        0.75,
    ),
    _kw(
        r"(low[\s-]income|underserved|disadvantaged|financial\s*empower|economic\s*empower|social\s*mobil)",
        CauseArea.ECONOMIC_MOBILITY,
        0.65,
    ),
    _kw(
        r"(anti[\s-]poverty|working\s*poor|livable?\s*wage|economic\s*opportunit|economic\s*secur)",
        CauseArea.ECONOMIC_MOBILITY,
        0.65,
    ),
    # Racial Equity & Inclusion
    _kw(r"(racial\s*equit|racial\s*justice|DEI|divers.*inclus|racial\s*disparit)", CauseArea.RACIAL_EQUITY, 0.6),
    _kw(
        r"(Black|African\s*American|Latino|Latina|Latinx|Hispanic|Indigenous|Native\s*American)\b.*\b(communit|popul|support|empower)",
        CauseArea.RACIAL_EQUITY,
        0.55,
    ),
    _kw(r"(equity|equitable|inclusion|inclusive)\b", CauseArea.RACIAL_EQUITY, 0.4),
    # Community Development
    _kw(
        r"(community\s*develop|neighborhood\s*revitaliz|economic\s*develop|small\s*business|entrepreneur)",
        CauseArea.COMMUNITY_DEVELOPMENT,
        0.4,
    ),
    _kw(r"(housing|afford.*hous|homeless|shelter)", CauseArea.COMMUNITY_DEVELOPMENT, 0.25),
    # Youth Development
    _kw(
        r"(youth\s*develop|young\s*(people|adult)|mentor|after[\s-]school|out[\s-]of[\s-]school)",
        CauseArea.YOUTH_DEVELOPMENT,
        0.35,
    ),
    # K-12 Education
    _kw(
        r"(K[\s-]?12|elementar|middle\s*school|high\s*school|primary\s*edu|secondary\s*edu|charter\s*school)",
        CauseArea.K12_EDUCATION,
        0.2,
    ),
    # Higher Education
    _kw(
        r"(college|universit|higher\s*edu|undergraduate|graduate\s*school|scholarship)",
        CauseArea.HIGHER_EDUCATION,
        0.3,
    ),
    # Health
    _kw(r"(health|medical|hospital|mental\s*health|clinic|disease|wellness)", CauseArea.HEALTH, 0.05),
    # Human Services
    _kw(
        r"(human\s*service|social\s*service|social\s*work|basic\s*needs|food\s*(bank|pantry)|child\s*welfare)",
        CauseArea.HUMAN_SERVICES,
        0.15,
    ),
    # Arts & Culture
    _kw(r"(arts?|culture|museum|theater|music|dance|literary|film)", CauseArea.ARTS_CULTURE, 0.05),
    # Environment
    _kw(r"(environment|climate|conservation|sustainab|renewable|clean\s*energy)", CauseArea.ENVIRONMENT, 0.05),
    # International
    _kw(r"(international|global|overseas|developing\s*countr|foreign)", CauseArea.INTERNATIONAL, 0.1),
    # Philanthropy & Intermediary
    _kw(
        r"(philanthrop|capacity\s*build|nonprofit\s*support|grantmak|regrant|pass[\s-]through)",
        CauseArea.PHILANTHROPY,
        0.1,
    ),
)


def classify_text(text: str) -> Tuple[CauseArea, float]:
    """Cause area and relevance of the highest-relevance row matching text."""
    best = None
    for row in KEYWORD_PATTERNS:
        if row.pattern.search(text) and (best is None or row.relevance > best.relevance):
            best = row
    if best is None:
        return CauseArea.OTHER, FALLBACK_RELEVANCE
    return best.cause_area, best.relevance


def classify_grant(grant: Grant) -> ClassifiedGrant:
    """
    Assign a cause area and relevance to one grant.

    Pure and idempotent: the same grant always yields an equal result.

    Example:
        >>> g = Grant(recipient_name="Per Scholas", amount=250_000, purpose_text="Tech training for adults")
        >>> classify_grant(g).cause_area
        <CauseArea.AI_TECHNOLOGY: 'AI & Technology'>
    """
    search_text = f"{grant.purpose_text} {grant.recipient_name}".lower()
    cause_area, relevance = classify_text(search_text)
    return ClassifiedGrant.from_grant(grant, cause_area, relevance)


def classify_grants(grants: Iterable[Grant]) -> List[ClassifiedGrant]:
    return [classify_grant(g) for g in grants]
