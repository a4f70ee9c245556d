"""
National vs regional giving footprint from grant recipient states.

A fixed decision table, evaluated in order:
1. No states on any grant -> National (insufficient data)
2. 10+ distinct states -> National
3. >= 60% of distinct states inside one region -> Regional (first region in
   table order wins)
4. <= 3 distinct states -> Regional, listing the states
5. Otherwise -> National, with the state count
"""

from typing import Dict, Iterable, List

from funder_fit.schemas.grants import Grant
from funder_fit.schemas.scoring import GeographicFocus

# Region order is authoritative for the first-match rule
REGIONS: Dict[str, frozenset] = {
    "Northeast": frozenset({"CT", "ME", "MA", "NH", "RI", "VT", "NJ", "NY", "PA"}),
    "Southeast": frozenset({"AL", "AR", "FL", "GA", "KY", "LA", "MS", "NC", "SC", "TN", "VA", "WV"}),
    "Midwest": frozenset({"IL", "IN", "IA", "KS", "MI", "MN", "MO", "NE", "ND", "OH", "SD", "WI"}),
    "Southwest": frozenset({"AZ", "NM", "OK", "TX"}),
    "West": frozenset({"AK", "CA", "CO", "HI", "ID", "MT", "NV", "OR", "UT", "WA", "WY"}),
    "Mid-Atlantic": frozenset({"DC", "DE", "MD"}),
}

NATIONAL_STATE_THRESHOLD = 10
REGIONAL_SHARE_THRESHOLD = 0.6
FEW_STATES_THRESHOLD = 3


def distinct_states(grants: Iterable[Grant]) -> List[str]:
    """Non-empty recipient states, de-duplicated in first-seen order."""
    return list(dict.fromkeys(g.recipient_state for g in grants if g.recipient_state))


def calculate_geographic_focus(grants: Iterable[Grant]) -> GeographicFocus:
    states = distinct_states(grants)

    if not states:
        return GeographicFocus(type="National", states=[], label="National (insufficient data)")

    if len(states) >= NATIONAL_STATE_THRESHOLD:
        return GeographicFocus(type="National", states=states, label="National")

    for region, region_states in REGIONS.items():
        in_region = sum(1 for s in states if s in region_states)
        if in_region >= len(states) * REGIONAL_SHARE_THRESHOLD:
            return GeographicFocus(
                type="Regional",
                states=states,
                label=f"Regional: {region} ({', '.join(states)})",
            )

    if len(states) <= FEW_STATES_THRESHOLD:
        return GeographicFocus(type="Regional", states=states, label=f"Regional: {', '.join(states)}")

    return GeographicFocus(type="National", states=states, label=f"National ({len(states)} states)")
