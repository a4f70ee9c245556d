"""
Per-cause-area rollup and top-recipient ranking for reporting.

Percentages are rounded per bucket and are not forced to sum to 100.
"""

from typing import Dict, Iterable, List

from funder_fit.constants import TOP_RECIPIENTS_LIMIT
from funder_fit.schemas.grants import CauseArea, ClassifiedGrant
from funder_fit.schemas.scoring import CauseAreaBreakdown
from funder_fit.utils.formatting import round_half_up


def aggregate_cause_areas(grants: Iterable[ClassifiedGrant]) -> List[CauseAreaBreakdown]:
    """
    Group classified grants by cause area.

    The representative relevance of a bucket is that of the first grant seen
    in it. Output is sorted by total dollars, descending (stable for ties).
    """
    buckets: Dict[CauseArea, dict] = {}
    total_dollars = 0

    for grant in grants:
        total_dollars += grant.amount
        bucket = buckets.setdefault(
            grant.cause_area,
            {"total_dollars": 0, "grant_count": 0, "relevance_score": grant.relevance_score},
        )
        bucket["total_dollars"] += grant.amount
        bucket["grant_count"] += 1

    breakdown = [
        CauseAreaBreakdown(
            cause_area=cause_area,
            total_dollars=bucket["total_dollars"],
            grant_count=bucket["grant_count"],
            percentage=round_half_up(bucket["total_dollars"] / total_dollars * 100) if total_dollars > 0 else 0,
            relevance_score=bucket["relevance_score"],
        )
        for cause_area, bucket in buckets.items()
    ]
    breakdown.sort(key=lambda b: b.total_dollars, reverse=True)
    return breakdown


def top_recipients(grants: Iterable[ClassifiedGrant], limit: int = TOP_RECIPIENTS_LIMIT) -> List[ClassifiedGrant]:
    """Largest grants first."""
    return sorted(grants, key=lambda g: g.amount, reverse=True)[:limit]
