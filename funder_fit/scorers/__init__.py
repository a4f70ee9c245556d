"""Deterministic classification and scoring modules for funder fit."""

from funder_fit.scorers.cause_breakdown import aggregate_cause_areas, top_recipients
from funder_fit.scorers.cause_classifier import classify_grant, classify_grants, classify_text
from funder_fit.scorers.fit_scorer import (
    ENRICHED_WEIGHTS,
    SIMPLE_WEIGHTS,
    AlignmentPolicy,
    FitScorer,
    FunderIdentity,
    WeightProfile,
    calculate_fit_score,
)
from funder_fit.scorers.geographic_focus import calculate_geographic_focus
from funder_fit.scorers.leadership_signals import build_leadership_signal, calculate_news_score
from funder_fit.scorers.profile_registry import FunderProfile, get_funder_profile, load_funder_profile

__all__ = [
    # Cause areas
    "classify_text",
    "classify_grant",
    "classify_grants",
    "aggregate_cause_areas",
    "top_recipients",
    # Fit score
    "AlignmentPolicy",
    "FitScorer",
    "FunderIdentity",
    "WeightProfile",
    "ENRICHED_WEIGHTS",
    "SIMPLE_WEIGHTS",
    "calculate_fit_score",
    # Geography
    "calculate_geographic_focus",
    # Press signal
    "build_leadership_signal",
    "calculate_news_score",
    # Profiles
    "FunderProfile",
    "get_funder_profile",
    "load_funder_profile",
]
