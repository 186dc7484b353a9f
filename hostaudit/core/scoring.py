"""Weighted category scoring.

Six categories with fixed weights summing to 100. Every category produces a
score from locally available facts even when an upstream source is missing.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Dict, Optional

from hostaudit.core.booking_flow import BookingFlowAnalysis
from hostaudit.core.content import PageAnalysis
from hostaudit.core.psi import category_score
from hostaudit.core.trust_signals import TrustSignalAnalysis
from hostaudit.schemas.audit import CategoryScore, SEOMetrics

WEIGHTS: dict[str, int] = {
    "Conversion": 35,
    "Performance": 20,
    "Trust": 20,
    "Content": 15,
    "SEO": 7,
    "Security": 3,
}

DESCRIPTIONS: dict[str, str] = {
    "Conversion": "Booking flow and calls-to-action",
    "Performance": "Page speed and mobile experience",
    "Trust": "Reviews, ratings, and credibility",
    "Content": "Images and property descriptions",
    "SEO": "Search engine optimization",
    "Security": "SSL and data protection",
}

# Business heuristic, not a predictive model
PROJECTED_HEADROOM = 25
PROJECTED_CEILING = 95

FAST_LOAD_MS = 3000
MAX_PAGE_BYTES = 500_000
MAX_CLICKS_TO_BOOK = 3
MAX_TRAFFIC_BONUS = 20


@dataclass(frozen=True)
class ScoreBreakdown:
    overall: int
    categories: list[CategoryScore]


def calculate_category_score(checks: Sequence[bool]) -> int:
    """Percentage of satisfied checks, rounded."""
    if not checks:
        return 0
    passed = sum(1 for check in checks if check)
    return round(passed / len(checks) * 100)


def overall_score(categories: Sequence[CategoryScore]) -> int:
    """round(sum(score * weight) / 100)."""
    return round(sum(c.score * c.weight for c in categories) / 100)


def projected_score(overall: int) -> int:
    """Fixed headroom heuristic: min(95, overall + 25)."""
    return min(PROJECTED_CEILING, overall + PROJECTED_HEADROOM)


def generate_summary(score: int) -> str:
    if score >= 80:
        return "Your site is performing well, with room for minor improvements."
    if score >= 60:
        return "Your site has several issues that may be costing you bookings."
    return "Your site has critical issues that are likely losing you significant revenue."


def _category(name: str, score: int, source: Optional[str] = None) -> CategoryScore:
    return CategoryScore(
        name=name,
        score=score,
        weight=WEIGHTS[name],
        description=DESCRIPTIONS[name],
        source=source,
    )


def _conversion_score(page: PageAnalysis, booking: BookingFlowAnalysis) -> int:
    checklist = calculate_category_score(
        [
            booking.has_booking_cta,
            booking.cta_location == "above-fold",
            booking.booking_engine is not None,
            booking.has_date_picker,
            booking.has_instant_book,
            booking.estimated_clicks_to_book <= MAX_CLICKS_TO_BOOK,
            page.has_pricing,
        ]
    )
    ease = 100 - booking.friction_score
    return round((checklist + ease) / 2)


def _performance_score(page: PageAnalysis, lighthouse_performance: Optional[float]) -> int:
    basic = calculate_category_score(
        [
            page.has_mobile_viewport,
            page.load_time_ms < FAST_LOAD_MS,
            page.page_size < MAX_PAGE_BYTES,
        ]
    )
    if lighthouse_performance:
        return round((basic + lighthouse_performance * 100) / 2)
    return basic


def _content_score(page: PageAnalysis, trust: TrustSignalAnalysis) -> int:
    return calculate_category_score(
        [
            page.has_images,
            page.image_count > 5,
            trust.has_guest_photos,
            trust.has_testimonials,
        ]
    )


def _seo_score(
    page: PageAnalysis,
    lighthouse_seo: Optional[float],
    seo: Optional[SEOMetrics],
) -> int:
    score: float = calculate_category_score([page.has_meta_title, page.has_meta_description])
    if lighthouse_seo:
        score = round((score + lighthouse_seo * 100) / 2)
    if seo is not None and seo.organic_traffic:
        bonus = min(MAX_TRAFFIC_BONUS, math.log10(seo.organic_traffic) * 5)
        score = min(100, score + bonus)
    return round(score)


def calculate_scores(
    page: PageAnalysis,
    pagespeed: Optional[Dict[str, Any]],
    seo: Optional[SEOMetrics],
    booking: BookingFlowAnalysis,
    trust: TrustSignalAnalysis,
) -> ScoreBreakdown:
    """
    Score the six categories and the weighted overall.

    Args:
        page: Checklist facts from the HTML
        pagespeed: Raw PageSpeed payload, or None when unavailable
        seo: Selected SEO metrics, or None when no provider answered
        booking: Booking-flow analysis of the HTML
        trust: Trust-signal analysis of the HTML
    """
    lighthouse_performance = category_score(pagespeed, "performance")
    lighthouse_seo = category_score(pagespeed, "seo")

    engine = booking.booking_engine
    review_source = trust.review_source

    categories = [
        _category(
            "Conversion",
            _conversion_score(page, booking),
            f"Detected: {engine.name}" if engine else "HTML analysis",
        ),
        _category(
            "Performance",
            _performance_score(page, lighthouse_performance),
            "Lighthouse + HTML" if lighthouse_performance else "HTML analysis",
        ),
        _category(
            "Trust",
            trust.overall_trust_score,
            f"Reviews: {review_source.name}" if review_source else "HTML analysis",
        ),
        _category("Content", _content_score(page, trust)),
        _category(
            "SEO",
            _seo_score(page, lighthouse_seo, seo),
            f"Lighthouse + {seo.source.value}" if seo is not None else "HTML analysis",
        ),
        _category("Security", 100 if page.has_ssl else 0),
    ]

    return ScoreBreakdown(overall=overall_score(categories), categories=categories)
