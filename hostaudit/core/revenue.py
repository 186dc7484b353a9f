"""Monthly revenue-loss estimate from the score gap.

The constants are product assumptions, not measured values.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from hostaudit.schemas.audit import SEOMetrics

TARGET_SCORE = 90
LOSS_PER_POINT = 50
TRAFFIC_UNIT = 1000
MAX_TRAFFIC_MULTIPLIER = 3
MAX_MONTHLY_LOSS = 10_000


def _organic_traffic(seo: Union[SEOMetrics, Mapping[str, Any], None]) -> Optional[float]:
    if seo is None:
        return None
    if isinstance(seo, SEOMetrics):
        return seo.organic_traffic
    value = seo.get("organic_traffic")
    return value if isinstance(value, (int, float)) else None


def estimate_revenue_loss(
    score: int,
    seo: Union[SEOMetrics, Mapping[str, Any], None] = None,
) -> int:
    """
    gap = max(0, 90 - score); loss = gap * 50, scaled by up to 3x for
    sites with known organic traffic, capped at 10,000.
    """
    gap = max(0, TARGET_SCORE - score)
    loss = gap * LOSS_PER_POINT

    traffic = _organic_traffic(seo)
    if traffic:
        multiplier = min(MAX_TRAFFIC_MULTIPLIER, 1 + traffic / TRAFFIC_UNIT)
        loss = round(loss * multiplier)

    return min(loss, MAX_MONTHLY_LOSS)
