"""Profile Registry - named funder profiles loaded from YAML.

A funder profile bundles everything the fit scorer needs beyond the grants:
preferences (sweet spot, priority causes, recipient type), a weight profile,
the alignment policy and the funder identity used for direct/peer funding.

Usage:
    from funder_fit.scorers.profile_registry import get_funder_profile

    profile = get_funder_profile("merit_america")
    scorer = profile.build_scorer()
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from funder_fit.config import get_profiles_path
from funder_fit.schemas.scoring import DEFAULT_PREFERENCES, UserPreferences
from funder_fit.scorers.fit_scorer import (
    DEFAULT_FUNDER,
    ENRICHED_WEIGHTS,
    SIMPLE_WEIGHTS,
    AlignmentPolicy,
    FitScorer,
    FunderIdentity,
    WeightProfile,
)
from funder_fit.utils.ein_utils import ein_to_digits

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "merit_america"


@dataclass
class FunderProfile:
    """Named scoring configuration for one funder."""

    name: str
    description: str = ""
    preferences: UserPreferences = DEFAULT_PREFERENCES
    weights: WeightProfile = ENRICHED_WEIGHTS
    alignment_policy: AlignmentPolicy = AlignmentPolicy.SELECTED_SET
    funder: FunderIdentity = field(default=DEFAULT_FUNDER)

    def build_scorer(self, preferences: Optional[UserPreferences] = None) -> FitScorer:
        """Scorer for this profile; explicit preferences override the profile's."""
        return FitScorer(
            preferences=preferences or self.preferences,
            weights=self.weights,
            alignment_policy=self.alignment_policy,
            funder=self.funder,
        )


# Module-level cache, keyed by config path
_registry_cache: dict[Path, dict] = {}


def _build_default_registry() -> dict:
    """Fallback: the built-in Merit America profile with enriched weights."""
    default = FunderProfile(name=DEFAULT_PROFILE_NAME, description="Built-in default")
    return {
        "profiles": {DEFAULT_PROFILE_NAME: default},
        "weight_profiles": {"enriched": ENRICHED_WEIGHTS, "simple": SIMPLE_WEIGHTS},
        "default_profile": DEFAULT_PROFILE_NAME,
    }


def _funder_ein(profile_name: str, value) -> str:
    digits = ein_to_digits(value)
    if digits is None:
        raise ValueError(f"Profile {profile_name} has an invalid funder EIN '{value}'")
    return digits


def _parse_funder(profile_name: str, data: Optional[dict]) -> FunderIdentity:
    if not data:
        return DEFAULT_FUNDER

    name_pattern = data.get("name_pattern", DEFAULT_FUNDER.name_pattern)
    try:
        re.compile(name_pattern)
    except re.error as e:
        raise ValueError(f"Profile {profile_name} has an invalid name_pattern '{name_pattern}': {e}") from e

    return FunderIdentity(
        name=data.get("name", DEFAULT_FUNDER.name),
        ein=_funder_ein(profile_name, data.get("ein", DEFAULT_FUNDER.ein)),
        name_pattern=name_pattern,
        peer_eins=frozenset(_funder_ein(profile_name, e) for e in data.get("peer_eins", DEFAULT_FUNDER.peer_eins)),
    )


def _load_registry(config_path: Optional[Path] = None) -> dict:
    """Load and cache funder profiles from YAML."""
    config_path = config_path or get_profiles_path()
    if config_path in _registry_cache:
        return _registry_cache[config_path]

    if not config_path.exists():
        logger.warning(f"Funder profiles config not found at {config_path}, using defaults")
        _registry_cache[config_path] = _build_default_registry()
        return _registry_cache[config_path]

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    weight_profiles: dict[str, WeightProfile] = {"enriched": ENRICHED_WEIGHTS, "simple": SIMPLE_WEIGHTS}
    for name, weights in raw.get("weight_profiles", {}).items():
        # WeightProfile validates dimension names and the 1.0 sum
        weight_profiles[name] = WeightProfile(name=name, weights={k: float(v) for k, v in weights.items()})

    profiles: dict[str, FunderProfile] = {}
    for name, data in raw.get("profiles", {}).items():
        weights_name = data.get("weights", "enriched")
        if weights_name not in weight_profiles:
            raise ValueError(f"Profile {name} references unknown weight profile '{weights_name}'")
        profiles[name] = FunderProfile(
            name=name,
            description=data.get("description", ""),
            preferences=UserPreferences(**data.get("preferences", {})),
            weights=weight_profiles[weights_name],
            alignment_policy=AlignmentPolicy(data.get("alignment_policy", AlignmentPolicy.SELECTED_SET.value)),
            funder=_parse_funder(name, data.get("funder")),
        )

    default_profile = raw.get("default_profile", DEFAULT_PROFILE_NAME)
    if profiles and default_profile not in profiles:
        raise ValueError(f"default_profile '{default_profile}' is not defined")

    registry = {
        "profiles": profiles or _build_default_registry()["profiles"],
        "weight_profiles": weight_profiles,
        "default_profile": default_profile if profiles else DEFAULT_PROFILE_NAME,
    }
    logger.info(f"Loaded {len(registry['profiles'])} funder profiles, {len(weight_profiles)} weight profiles")
    _registry_cache[config_path] = registry
    return registry


def get_funder_profile(name: Optional[str] = None, config_path: Optional[Path] = None) -> FunderProfile:
    """Get a funder profile by name (default profile when name is None).

    Raises:
        KeyError: If the named profile does not exist
    """
    registry = _load_registry(config_path)
    profile_name = name or registry["default_profile"]
    if profile_name not in registry["profiles"]:
        raise KeyError(f"Unknown funder profile '{profile_name}'. Available: {sorted(registry['profiles'])}")
    return registry["profiles"][profile_name]


def load_funder_profile(name: Optional[str] = None, config_path: Optional[Path] = None) -> FunderProfile:
    """Alias of get_funder_profile, for callers loading from an explicit file."""
    return get_funder_profile(name, config_path)


def get_weight_profile(name: str, config_path: Optional[Path] = None) -> WeightProfile:
    registry = _load_registry(config_path)
    if name not in registry["weight_profiles"]:
        raise KeyError(f"Unknown weight profile '{name}'")
    return registry["weight_profiles"][name]


def list_profiles(config_path: Optional[Path] = None) -> list[str]:
    """List all available funder profile names."""
    return list(_load_registry(config_path)["profiles"].keys())


def clear_cache():
    """Clear the registry cache (useful for testing)."""
    _registry_cache.clear()
