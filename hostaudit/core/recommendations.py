"""Recommendation rules for booking flow, trust, PageSpeed and SEO data."""

from __future__ import annotations

from typing import Any, Dict, Optional

from hostaudit.core.booking_flow import BookingFlowAnalysis
from hostaudit.core.content import PageAnalysis
from hostaudit.core.psi import _as_dict, _safe_float
from hostaudit.core.trust_signals import TrustSignalAnalysis
from hostaudit.schemas.audit import Recommendation, SEOMetrics
from hostaudit.schemas.common import CheckStatus, Impact


def _tiered(value: float, good: float, fair: float, strict: bool = False) -> CheckStatus:
    """pass above/at ``good``, warning above/at ``fair``, else fail."""
    if (value > good) if strict else (value >= good):
        return CheckStatus.PASS
    if (value > fair) if strict else (value >= fair):
        return CheckStatus.WARNING
    return CheckStatus.FAIL


# === Booking flow ===


def booking_flow_recommendations(analysis: BookingFlowAnalysis) -> list[Recommendation]:
    recs: list[Recommendation] = []
    above_fold = analysis.cta_location == "above-fold"

    if not analysis.has_booking_cta:
        cta_description = "No clear booking CTA found - add prominent booking buttons"
        cta_status = CheckStatus.FAIL
    elif above_fold:
        cta_description = f'"{analysis.cta_text}" button found above the fold'
        cta_status = CheckStatus.PASS
    else:
        cta_description = f'"{analysis.cta_text}" found, but below the fold - move it higher'
        cta_status = CheckStatus.WARNING
    recs.append(
        Recommendation(
            title="Booking Call-to-Action",
            description=cta_description,
            status=cta_status,
            impact=Impact.HIGH,
            category="Conversion",
        )
    )

    engine = analysis.booking_engine
    if engine is None:
        recs.append(
            Recommendation(
                title="Booking System",
                description="No booking widget detected - consider adding an integrated booking system",
                status=CheckStatus.FAIL,
                impact=Impact.HIGH,
                category="Conversion",
            )
        )
    else:
        embedded = engine.type == "embedded"
        recs.append(
            Recommendation(
                title="Booking System",
                description=f"{engine.name} widget detected - keeps guests on your site"
                if embedded
                else f"{engine.name} detected - redirects guests off your site",
                status=CheckStatus.PASS if embedded else CheckStatus.WARNING,
                impact=Impact.MEDIUM,
                category="Conversion",
            )
        )

    recs.append(
        Recommendation(
            title="Date Selection",
            description="Date picker found - guests can easily select dates"
            if analysis.has_date_picker
            else "No date picker detected - add visible date selection for availability",
            status=CheckStatus.PASS if analysis.has_date_picker else CheckStatus.FAIL,
            impact=Impact.HIGH,
            category="Conversion",
        )
    )
    recs.append(
        Recommendation(
            title="Instant Booking",
            description="Instant book enabled - reduces booking friction"
            if analysis.has_instant_book
            else "No instant booking - inquiry-based bookings have higher abandonment",
            status=CheckStatus.PASS if analysis.has_instant_book else CheckStatus.WARNING,
            impact=Impact.MEDIUM,
            category="Conversion",
        )
    )

    friction = analysis.friction_score
    if friction < 30:
        level, status = "Low", CheckStatus.PASS
    elif friction < 60:
        level, status = "Medium", CheckStatus.WARNING
    else:
        level, status = "High", CheckStatus.FAIL
    clicks = analysis.estimated_clicks_to_book
    suffix = " - aim for 3 clicks or fewer" if clicks > 3 else ""
    recs.append(
        Recommendation(
            title="Booking Friction",
            description=f"{level} friction ({clicks} estimated clicks to book){suffix}",
            status=status,
            impact=Impact.HIGH,
            category="Conversion",
        )
    )

    return recs


# === Trust signals ===


def _more_suffix(total: int, shown: int = 3) -> str:
    return f" (+{total - shown} more)" if total > shown else ""


def trust_signal_recommendations(analysis: TrustSignalAnalysis) -> list[Recommendation]:
    recs: list[Recommendation] = []

    if analysis.has_reviews:
        source = analysis.review_source
        if source is not None:
            review_info = source.name + (" (verified)" if source.is_verified else "")
        else:
            review_info = "Site reviews"
        rating_info = (
            f" - {analysis.average_rating:g}/{analysis.rating_out_of}"
            if analysis.average_rating is not None
            else ""
        )
        count_info = f" ({analysis.review_count} reviews)" if analysis.review_count is not None else ""
        recs.append(
            Recommendation(
                title="Guest Reviews",
                description=f"{review_info}{rating_info}{count_info}",
                status=CheckStatus.PASS if source and source.is_verified else CheckStatus.WARNING,
                impact=Impact.HIGH,
                category="Trust",
            )
        )
    else:
        recs.append(
            Recommendation(
                title="Guest Reviews",
                description="No reviews found - 93% of travelers read reviews before booking",
                status=CheckStatus.FAIL,
                impact=Impact.HIGH,
                category="Trust",
            )
        )

    badges = analysis.trust_badges
    if badges:
        names = ", ".join(badge.name for badge in badges[:3])
        recs.append(
            Recommendation(
                title="Trust Badges",
                description=f"Found: {names}{_more_suffix(len(badges))}",
                status=CheckStatus.PASS,
                impact=Impact.MEDIUM,
                category="Trust",
            )
        )
    else:
        recs.append(
            Recommendation(
                title="Trust Badges",
                description="No trust badges found - add Superhost, verified host, or security badges",
                status=CheckStatus.WARNING,
                impact=Impact.MEDIUM,
                category="Trust",
            )
        )

    contact = [
        label
        for label, present in (
            ("phone", analysis.has_phone_number),
            ("email", analysis.has_email_address),
            ("address", analysis.has_physical_address),
        )
        if present
    ]
    if len(contact) >= 2:
        contact_description = f"Good transparency: {', '.join(contact)} visible"
    elif len(contact) == 1:
        contact_description = f"Limited contact info: only {contact[0]} found"
    else:
        contact_description = "No contact info found - guests want to know how to reach you"
    recs.append(
        Recommendation(
            title="Contact Information",
            description=contact_description,
            status=_tiered(len(contact), 2, 1),
            impact=Impact.MEDIUM,
            category="Trust",
        )
    )

    platforms = [profile.platform for profile in analysis.social_profiles if profile.detected]
    recs.append(
        Recommendation(
            title="Social Media Presence",
            description=f"Active on: {', '.join(platforms[:3])}{_more_suffix(len(platforms))}"
            if platforms
            else "No social media links found - add profiles to show you're a real business",
            status=_tiered(len(platforms), 2, 1),
            impact=Impact.LOW,
            category="Trust",
        )
    )

    recs.append(
        Recommendation(
            title="Privacy Policy",
            description="Privacy policy found"
            if analysis.has_privacy_policy
            else "No privacy policy found - legally required and builds trust",
            status=CheckStatus.PASS if analysis.has_privacy_policy else CheckStatus.FAIL,
            impact=Impact.MEDIUM,
            category="Trust",
        )
    )

    score = analysis.overall_trust_score
    level = "Strong" if score >= 70 else "Moderate" if score >= 40 else "Weak"
    recs.append(
        Recommendation(
            title="Overall Trust Score",
            description=f"{level} trust signals ({score}/100)",
            status=_tiered(score, 70, 40),
            impact=Impact.HIGH,
            category="Trust",
        )
    )

    return recs


# === PageSpeed ===


def pagespeed_recommendations(data: Optional[Dict[str, Any]]) -> list[Recommendation]:
    """Lighthouse findings; empty when the payload has no lighthouseResult."""
    lighthouse = _as_dict((data or {}).get("lighthouseResult"))
    if not lighthouse:
        return []

    audits = _as_dict(lighthouse.get("audits"))
    categories = _as_dict(lighthouse.get("categories"))
    recs: list[Recommendation] = []

    def _score(name: str) -> Optional[int]:
        if name not in categories:
            return None
        return round((_safe_float(_as_dict(categories[name]).get("score")) or 0.0) * 100)

    performance = _score("performance")
    if performance is not None:
        if performance >= 90:
            description = f"Excellent performance score: {performance}/100"
        elif performance >= 50:
            description = f"Performance score {performance}/100 - room for improvement"
        else:
            description = f"Poor performance score {performance}/100 - needs optimization"
        recs.append(
            Recommendation(
                title="Lighthouse Performance",
                description=description,
                status=_tiered(performance, 90, 50),
                impact=Impact.HIGH,
                category="Performance",
            )
        )

    lcp = audits.get("largest-contentful-paint")
    if lcp:
        lcp_audit = _as_dict(lcp)
        lcp_ms = _safe_float(lcp_audit.get("numericValue")) or 0.0
        display = lcp_audit.get("displayValue")
        if lcp_ms <= 2500:
            lcp_status = CheckStatus.PASS
        elif lcp_ms <= 4000:
            lcp_status = CheckStatus.WARNING
        else:
            lcp_status = CheckStatus.FAIL
        recs.append(
            Recommendation(
                title="Largest Contentful Paint (LCP)",
                description=str(display) if display else f"{lcp_ms / 1000:.1f}s",
                status=lcp_status,
                impact=Impact.HIGH,
                category="Performance",
            )
        )

    accessibility = _score("accessibility")
    if accessibility is not None:
        recs.append(
            Recommendation(
                title="Accessibility Score",
                description=f"Excellent accessibility: {accessibility}/100"
                if accessibility >= 90
                else f"Accessibility issues found: {accessibility}/100",
                status=_tiered(accessibility, 90, 70),
                impact=Impact.MEDIUM,
                category="Trust",
            )
        )

    seo = _score("seo")
    if seo is not None:
        recs.append(
            Recommendation(
                title="Lighthouse SEO Score",
                description=f"SEO well-optimized: {seo}/100"
                if seo >= 90
                else f"SEO issues to address: {seo}/100",
                status=_tiered(seo, 90, 70),
                impact=Impact.HIGH,
                category="SEO",
            )
        )

    return recs


# === SEO metrics ===


def seo_recommendations(metrics: Optional[SEOMetrics]) -> list[Recommendation]:
    """Findings for traffic, keywords and backlinks that are known and non-zero."""
    if metrics is None:
        return []

    recs: list[Recommendation] = []

    traffic = metrics.organic_traffic
    if traffic > 0:
        if traffic > 1000:
            description = f"Strong organic presence: ~{traffic:,} monthly visits"
        elif traffic > 100:
            description = f"Moderate organic traffic: ~{traffic:,} monthly visits"
        else:
            description = f"Low organic traffic: ~{traffic} monthly visits - SEO opportunity"
        recs.append(
            Recommendation(
                title="Organic Search Traffic",
                description=description,
                status=_tiered(traffic, 1000, 100, strict=True),
                impact=Impact.HIGH,
                category="SEO",
            )
        )

    keywords = metrics.organic_keywords
    if keywords > 0:
        if keywords > 100:
            description = f"Ranking for {keywords:,} keywords - good visibility"
        elif keywords > 10:
            description = f"Ranking for {keywords} keywords - room to expand"
        else:
            description = f"Only ranking for {keywords} keywords - needs content strategy"
        recs.append(
            Recommendation(
                title="Ranking Keywords",
                description=description,
                status=_tiered(keywords, 100, 10, strict=True),
                impact=Impact.MEDIUM,
                category="SEO",
            )
        )

    backlinks = metrics.backlinks
    if backlinks is not None and backlinks > 0:
        if backlinks > 1000:
            description = f"Strong backlink profile: {backlinks:,} referring domains"
        elif backlinks > 100:
            description = f"Moderate backlinks: {backlinks:,} referring domains"
        else:
            description = f"Limited backlinks: {backlinks} - build more links from local tourism sites"
        recs.append(
            Recommendation(
                title="Backlink Profile",
                description=description,
                status=_tiered(backlinks, 1000, 100, strict=True),
                impact=Impact.MEDIUM,
                category="SEO",
            )
        )

    return recs


def compile_recommendations(
    page: PageAnalysis,
    booking: BookingFlowAnalysis,
    trust: TrustSignalAnalysis,
    pagespeed: Optional[Dict[str, Any]],
    seo: Optional[SEOMetrics],
) -> list[Recommendation]:
    """All findings in report order: HTML, booking, trust, PageSpeed, SEO."""
    return [
        *page.recommendations,
        *booking_flow_recommendations(booking),
        *trust_signal_recommendations(trust),
        *pagespeed_recommendations(pagespeed),
        *seo_recommendations(seo),
    ]
