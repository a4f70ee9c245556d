"""Fit Score Engine - weighted 0-100 fit of a funder's giving against a profile.

Five dimensions, each scored 0-100 with a template explanation:

    Cause Area Alignment       share of dollars going to the funder's priorities
    Grant Size Fit             typical grant size vs. the funder's sweet spot
    Prior Similar Funding      direct funding, peer organizations, workforce grants
    Recipient Type Match       share of dollars to nonprofits / universities / government
    Leadership & Public Signals  pass-through of the press-signal score

Overall = round(clamp(sum(score * weight), 0, 100)). Weights come from a
WeightProfile and always sum to 1.0; the simple profile drops the
leadership dimension.

Usage:
    from funder_fit.scorers.fit_scorer import FitScorer, ENRICHED_WEIGHTS

    scorer = FitScorer(preferences, weights=ENRICHED_WEIGHTS)
    result = scorer.evaluate(classified_grants, leadership=signal)
    result.dimension("Grant Size Fit").score
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from funder_fit.constants import NEUTRAL_RECIPIENT_TYPE_SCORE, WEIGHT_SUM_TOLERANCE
from funder_fit.schemas.grants import ClassifiedGrant
from funder_fit.schemas.scoring import (
    DEFAULT_PREFERENCES,
    FitScoreDimension,
    FitScoreResult,
    LeadershipSignal,
    RecipientType,
    UserPreferences,
)
from funder_fit.utils.formatting import format_compact_dollars, round_half_up

logger = logging.getLogger(__name__)

# Dimension names (also the keys of WeightProfile.weights)
CAUSE_AREA_ALIGNMENT = "Cause Area Alignment"
GRANT_SIZE_FIT = "Grant Size Fit"
PRIOR_SIMILAR_FUNDING = "Prior Similar Funding"
RECIPIENT_TYPE_MATCH = "Recipient Type Match"
LEADERSHIP_SIGNALS = "Leadership & Public Signals"

DIMENSION_ORDER = [
    CAUSE_AREA_ALIGNMENT,
    GRANT_SIZE_FIT,
    PRIOR_SIMILAR_FUNDING,
    RECIPIENT_TYPE_MATCH,
    LEADERSHIP_SIGNALS,
]

# Alignment weight for grants outside the selected cause areas
UNSELECTED_CAUSE_WEIGHT = 0.1

# Alignment explanation tiers
STRONG_ALIGNMENT_THRESHOLD = 70
MODERATE_ALIGNMENT_THRESHOLD = 40

# Grant size scoring above the sweet spot never drops below this floor
OVERSIZED_SCORE_FLOOR = 60
OVERSIZED_PENALTY = 40

# Prior similar funding caps
PEER_BASE_SCORE = 50
PEER_GRANT_POINTS = 10
PEER_KEYWORD_POINTS = 5
PEER_SCORE_CAP = 90
KEYWORD_ONLY_MULTIPLIER = 200
KEYWORD_ONLY_CAP = 70
MAX_NAMED_RECIPIENTS = 3

WORKFORCE_KEYWORDS = re.compile(
    r"\b(workforce|job\s*train|career\s*(train|pathway|readiness)|employment\s*train|upskill|reskill"
    r"|skills?\s*train|vocational|apprentice|career\s*develop|earn\s*and\s*learn)\b",
    re.IGNORECASE,
)

UNIVERSITY_PATTERNS = re.compile(
    r"\b(university|college|institute\s*of\s*technology|school\s*of|polytechnic|academia|regent|trustee)",
    re.IGNORECASE,
)
GOVERNMENT_PATTERNS = re.compile(
    r"\b(department\s*of|city\s*of|county\s*of|state\s*of|federal|municipal|government|agency|bureau|commission)\b",
    re.IGNORECASE,
)

NO_GRANT_DATA = "No grant data available."


class AlignmentPolicy(str, Enum):
    """How each grant's dollars count toward cause-area alignment.

    SELECTED_SET: 1.0 if the grant's cause area is a funder priority, else 0.1
    RELEVANCE_SCORE: the grant's own classifier relevance
    """

    SELECTED_SET = "selected_set"
    RELEVANCE_SCORE = "relevance_score"


@dataclass(frozen=True)
class WeightProfile:
    """Per-dimension weights; must sum to 1.0."""

    name: str
    weights: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        validate_weights(self.name, self.weights)

    @property
    def dimensions(self) -> List[str]:
        """Dimension names in canonical order."""
        return [d for d in DIMENSION_ORDER if d in self.weights]

    @property
    def includes_leadership(self) -> bool:
        return LEADERSHIP_SIGNALS in self.weights


def validate_weights(profile_name: str, weights: Dict[str, float]) -> None:
    """Validate that weights use known dimension names and sum to 1.0."""
    unknown = set(weights) - set(DIMENSION_ORDER)
    if unknown:
        raise ValueError(f"Weight profile {profile_name} has unknown dimensions: {sorted(unknown)}")
    missing = set(DIMENSION_ORDER[:4]) - set(weights)
    if missing:
        raise ValueError(f"Weight profile {profile_name} missing dimensions: {sorted(missing)}")
    if any(w < 0 or w > 1 for w in weights.values()):
        raise ValueError(f"Weight profile {profile_name} has weights outside [0, 1]")
    total = sum(weights.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ValueError(f"Weight profile {profile_name} weights sum to {total}, expected 1.0")


ENRICHED_WEIGHTS = WeightProfile(
    name="enriched",
    weights={
        CAUSE_AREA_ALIGNMENT: 0.40,
        GRANT_SIZE_FIT: 0.18,
        PRIOR_SIMILAR_FUNDING: 0.18,
        RECIPIENT_TYPE_MATCH: 0.14,
        LEADERSHIP_SIGNALS: 0.10,
    },
)

SIMPLE_WEIGHTS = WeightProfile(
    name="simple",
    weights={
        CAUSE_AREA_ALIGNMENT: 0.45,
        GRANT_SIZE_FIT: 0.20,
        PRIOR_SIMILAR_FUNDING: 0.20,
        RECIPIENT_TYPE_MATCH: 0.15,
    },
)


@dataclass(frozen=True)
class FunderIdentity:
    """The organization seeking funding, and the peers whose funders are a signal.

    A grant to the funder itself (by EIN or name) is direct funding. Grants to
    peer EINs count as prior similar funding.
    """

    name: str = "Merit America"
    ein: str = "842108762"
    name_pattern: str = r"merit\s*america"
    peer_eins: frozenset = frozenset(
        {
            "842108762",  # Merit America
            "133807722",  # Year Up
            "271436100",  # Per Scholas
            "474139557",  # Generation USA
            "813026506",  # Opportunity@Work
            "412111590",  # JFF (Jobs for the Future)
            "061540907",  # Goodwill Industries International
            "521719000",  # National Urban League
            "530196605",  # UnidosUS
            "133798043",  # Robin Hood Foundation
        }
    )

    def is_direct_recipient(self, grant: ClassifiedGrant) -> bool:
        return grant.recipient_ein == self.ein or bool(re.search(self.name_pattern, grant.recipient_name, re.IGNORECASE))

    def is_peer(self, grant: ClassifiedGrant) -> bool:
        return bool(grant.recipient_ein) and grant.recipient_ein in self.peer_eins


DEFAULT_FUNDER = FunderIdentity()


def _clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


class FitScorer:
    """Scores classified grants against one funder profile."""

    def __init__(
        self,
        preferences: UserPreferences = DEFAULT_PREFERENCES,
        weights: WeightProfile = ENRICHED_WEIGHTS,
        alignment_policy: AlignmentPolicy = AlignmentPolicy.SELECTED_SET,
        funder: FunderIdentity = DEFAULT_FUNDER,
    ):
        self.preferences = preferences
        self.weights = weights
        self.alignment_policy = alignment_policy
        self.funder = funder

    def evaluate(
        self,
        grants: Sequence[ClassifiedGrant],
        leadership: Optional[LeadershipSignal] = None,
    ) -> FitScoreResult:
        total_dollars = sum(g.amount for g in grants)

        dimensions = []
        for name in self.weights.dimensions:
            weight = self.weights.weights[name]
            if name == CAUSE_AREA_ALIGNMENT:
                dimensions.append(self.score_cause_area_alignment(grants, total_dollars, weight))
            elif name == GRANT_SIZE_FIT:
                dimensions.append(self.score_grant_size_fit(grants, weight))
            elif name == PRIOR_SIMILAR_FUNDING:
                dimensions.append(self.score_prior_similar_funding(grants, weight))
            elif name == RECIPIENT_TYPE_MATCH:
                dimensions.append(self.score_recipient_type_match(grants, weight))
            else:
                dimensions.append(self.score_leadership_signals(leadership, weight))

        weighted_sum = sum(d.score * d.weight for d in dimensions)
        overall = _clamp_score(weighted_sum)

        logger.debug(
            f"Fit score {overall} over {len(grants)} grants "
            f"({', '.join(f'{d.name}={d.score}' for d in dimensions)})"
        )

        return FitScoreResult(
            overall_score=overall,
            dimensions=dimensions,
            grant_count=len(grants),
            total_grant_dollars=total_dollars,
        )

    # ─── Cause Area Alignment ──────────────────────────────────────────────

    def _alignment_weight(self, grant: ClassifiedGrant) -> float:
        if self.alignment_policy == AlignmentPolicy.RELEVANCE_SCORE:
            return grant.relevance_score
        return 1.0 if grant.cause_area in self.preferences.cause_areas else UNSELECTED_CAUSE_WEIGHT

    def score_cause_area_alignment(
        self, grants: Sequence[ClassifiedGrant], total_dollars: int, weight: float
    ) -> FitScoreDimension:
        if total_dollars == 0:
            return FitScoreDimension(
                name=CAUSE_AREA_ALIGNMENT,
                score=0,
                weight=weight,
                explanation="No grant data available to assess cause area alignment.",
            )

        weighted_relevance = sum(g.amount * self._alignment_weight(g) for g in grants)
        score = _clamp_score(weighted_relevance / total_dollars * 100)

        # Top cause by dollars; dict order keeps ties at first appearance
        cause_totals: Dict = {}
        for g in grants:
            cause_totals[g.cause_area] = cause_totals.get(g.cause_area, 0) + g.amount
        top_cause, top_dollars = max(cause_totals.items(), key=lambda item: item[1])
        top_pct = round_half_up(top_dollars / total_dollars * 100)
        is_top_selected = top_cause in self.preferences.cause_areas

        if score >= STRONG_ALIGNMENT_THRESHOLD:
            suffix = ", which matches your priorities" if is_top_selected else ""
            explanation = f"Strong alignment. Top cause: {top_cause.value} ({top_pct}%){suffix}."
        elif score >= MODERATE_ALIGNMENT_THRESHOLD:
            explanation = f"Moderate alignment. Top cause: {top_cause.value} ({top_pct}%)."
        else:
            explanation = f"Low alignment. Primarily funds {top_cause.value} ({top_pct}%)."

        return FitScoreDimension(name=CAUSE_AREA_ALIGNMENT, score=score, weight=weight, explanation=explanation)

    # ─── Grant Size Fit ────────────────────────────────────────────────────

    def score_grant_size_fit(self, grants: Sequence[ClassifiedGrant], weight: float) -> FitScoreDimension:
        if not grants:
            return FitScoreDimension(name=GRANT_SIZE_FIT, score=0, weight=weight, explanation=NO_GRANT_DATA)

        amounts = sorted(g.amount for g in grants)
        # Upper median for even counts
        median = amounts[len(amounts) // 2]
        mean = sum(amounts) / len(amounts)
        typical = (median + mean) / 2

        sweet_min = self.preferences.grant_size_min
        sweet_max = self.preferences.grant_size_max

        if sweet_min <= typical <= sweet_max:
            score = 100
        elif typical < sweet_min:
            score = _clamp_score(typical / sweet_min * 100)
        else:
            oversized = 100 - (typical - sweet_max) / sweet_max * OVERSIZED_PENALTY
            score = _clamp_score(max(OVERSIZED_SCORE_FLOOR, oversized))

        explanation = (
            f"Median: {format_compact_dollars(median)}, Mean: {format_compact_dollars(mean)}. "
            f"Your target: {format_compact_dollars(sweet_min)}-{format_compact_dollars(sweet_max)}."
        )
        return FitScoreDimension(name=GRANT_SIZE_FIT, score=score, weight=weight, explanation=explanation)

    # ─── Prior Similar Funding ─────────────────────────────────────────────

    def score_prior_similar_funding(self, grants: Sequence[ClassifiedGrant], weight: float) -> FitScoreDimension:
        if not grants:
            return FitScoreDimension(name=PRIOR_SIMILAR_FUNDING, score=0, weight=weight, explanation=NO_GRANT_DATA)

        direct = next((g for g in grants if self.funder.is_direct_recipient(g)), None)
        if direct is not None:
            return FitScoreDimension(
                name=PRIOR_SIMILAR_FUNDING,
                score=100,
                weight=weight,
                explanation=f"Has funded {self.funder.name} directly (${direct.amount:,}).",
            )

        peer_grants = [g for g in grants if self.funder.is_peer(g)]
        workforce_grants = [
            g for g in grants if WORKFORCE_KEYWORDS.search(g.purpose_text) or WORKFORCE_KEYWORDS.search(g.recipient_name)
        ]
        similar_count = len(peer_grants) + len(workforce_grants)

        if peer_grants:
            score = min(
                PEER_SCORE_CAP,
                PEER_BASE_SCORE + len(peer_grants) * PEER_GRANT_POINTS + len(workforce_grants) * PEER_KEYWORD_POINTS,
            )
        elif workforce_grants:
            score = min(KEYWORD_ONLY_CAP, round_half_up(similar_count / len(grants) * KEYWORD_ONLY_MULTIPLIER))
        else:
            score = 0

        if score == 0:
            explanation = "No prior funding to similar organizations found."
        else:
            names = [g.recipient_name for g in peer_grants]
            names += [g.recipient_name for g in workforce_grants[:MAX_NAMED_RECIPIENTS]]
            unique_names = list(dict.fromkeys(names))[:MAX_NAMED_RECIPIENTS]
            explanation = f"Found {similar_count} related grant(s): {', '.join(unique_names) or 'N/A'}."

        return FitScoreDimension(name=PRIOR_SIMILAR_FUNDING, score=score, weight=weight, explanation=explanation)

    # ─── Recipient Type Match ──────────────────────────────────────────────

    def _matches_recipient_type(self, grant: ClassifiedGrant) -> bool:
        text = f"{grant.recipient_name} {grant.purpose_text}"
        recipient_type = self.preferences.recipient_type
        if recipient_type == RecipientType.UNIVERSITY:
            return bool(UNIVERSITY_PATTERNS.search(text))
        if recipient_type == RecipientType.GOVERNMENT:
            return bool(GOVERNMENT_PATTERNS.search(text))
        # Nonprofit: anything that is neither a university nor government
        return not UNIVERSITY_PATTERNS.search(text) and not GOVERNMENT_PATTERNS.search(text)

    def score_recipient_type_match(self, grants: Sequence[ClassifiedGrant], weight: float) -> FitScoreDimension:
        if self.preferences.recipient_type == RecipientType.ANY:
            return FitScoreDimension(
                name=RECIPIENT_TYPE_MATCH,
                score=NEUTRAL_RECIPIENT_TYPE_SCORE,
                weight=weight,
                explanation="No recipient type preference set, so the score is neutral.",
            )

        if not grants:
            return FitScoreDimension(name=RECIPIENT_TYPE_MATCH, score=0, weight=weight, explanation=NO_GRANT_DATA)

        total_dollars = sum(g.amount for g in grants)
        match_dollars = sum(g.amount for g in grants if self._matches_recipient_type(g))
        match_pct = match_dollars / total_dollars if total_dollars > 0 else 0
        score = _clamp_score(match_pct * 100)

        return FitScoreDimension(
            name=RECIPIENT_TYPE_MATCH,
            score=score,
            weight=weight,
            explanation=f"{score}% of grant dollars go to {self.preferences.recipient_type.plural_label}.",
        )

    # ─── Leadership & Public Signals ───────────────────────────────────────

    def score_leadership_signals(self, leadership: Optional[LeadershipSignal], weight: float) -> FitScoreDimension:
        signal = leadership or LeadershipSignal.empty()
        if signal.articles:
            topics = ", ".join(signal.keywords_found[:3]) or "relevant topics"
            explanation = f"Found {len(signal.articles)} article(s) mentioning {topics}."
        else:
            explanation = "No recent press coverage found with alignment keywords."
        return FitScoreDimension(name=LEADERSHIP_SIGNALS, score=signal.score, weight=weight, explanation=explanation)


def calculate_fit_score(
    grants: Sequence[ClassifiedGrant],
    leadership: Optional[LeadershipSignal] = None,
    preferences: UserPreferences = DEFAULT_PREFERENCES,
    weights: WeightProfile = ENRICHED_WEIGHTS,
) -> FitScoreResult:
    """Score grants with the default funder identity and selected-set alignment."""
    return FitScorer(preferences=preferences, weights=weights).evaluate(grants, leadership)
