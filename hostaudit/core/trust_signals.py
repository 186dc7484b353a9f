"""Trust signal analysis - reviews, badges, contact details and social proof."""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from hostaudit.schemas.audit import (
    ReviewSourceData,
    SocialProfileData,
    TrustBadgeData,
    TrustSignalsData,
)

logger = logging.getLogger(__name__)

ReviewSourceType = Literal[
    "google", "airbnb", "vrbo", "tripadvisor", "trustpilot", "custom", "aggregate"
]
BadgeCategory = Literal["security", "industry", "payment", "verification"]

VERIFIED_SOURCE_TYPES = frozenset({"google", "airbnb", "vrbo", "tripadvisor"})


@dataclass(frozen=True)
class ReviewSource:
    name: str
    type: ReviewSourceType
    is_verified: bool


@dataclass(frozen=True)
class TrustBadge:
    name: str
    category: BadgeCategory


@dataclass(frozen=True)
class SocialProfile:
    platform: str
    detected: bool


@dataclass(frozen=True)
class ReviewAnalysis:
    has_reviews: bool = False
    source: Optional[ReviewSource] = None
    review_count: Optional[int] = None
    average_rating: Optional[float] = None


@dataclass(frozen=True)
class TrustSignalAnalysis:
    """Trust facts for one page. ``overall_trust_score`` is 0-100."""

    overall_trust_score: int
    has_reviews: bool
    review_source: Optional[ReviewSource]
    review_count: Optional[int]
    average_rating: Optional[float]
    trust_badges: list[TrustBadge]
    has_security_badges: bool
    has_industry_badges: bool
    has_phone_number: bool
    has_email_address: bool
    has_physical_address: bool
    social_profiles: list[SocialProfile]
    has_about_page: bool
    has_privacy_policy: bool
    has_terms_of_service: bool
    has_testimonials: bool
    has_guest_photos: bool
    has_press_logos: bool
    rating_out_of: int = 5
    recommendations: list[str] = field(default_factory=list)

    @property
    def detected_social_count(self) -> int:
        return sum(1 for profile in self.social_profiles if profile.detected)

    def to_summary(self) -> TrustSignalsData:
        """The subset carried on the audit result."""
        source = self.review_source
        return TrustSignalsData(
            overall_trust_score=self.overall_trust_score,
            has_reviews=self.has_reviews,
            review_source=ReviewSourceData(
                name=source.name, type=source.type, is_verified=source.is_verified
            )
            if source
            else None,
            review_count=self.review_count,
            average_rating=self.average_rating,
            trust_badges=[
                TrustBadgeData(name=badge.name, category=badge.category)
                for badge in self.trust_badges
            ],
            has_phone_number=self.has_phone_number,
            has_email_address=self.has_email_address,
            has_physical_address=self.has_physical_address,
            has_social_profiles=[
                SocialProfileData(platform=profile.platform, detected=profile.detected)
                for profile in self.social_profiles
            ],
            has_privacy_policy=self.has_privacy_policy,
        )


def _patterns(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


def _any_match(patterns: tuple[re.Pattern[str], ...], html: str) -> bool:
    return any(pattern.search(html) for pattern in patterns)


@dataclass(frozen=True)
class _ReviewPlatform:
    name: str
    type: ReviewSourceType
    patterns: tuple[re.Pattern[str], ...]
    rating_pattern: Optional[re.Pattern[str]] = None
    count_pattern: Optional[re.Pattern[str]] = None


REVIEW_PLATFORMS: tuple[_ReviewPlatform, ...] = (
    _ReviewPlatform(
        "Google Reviews",
        "google",
        _patterns(r"google.*review", r"g-review", r"googleplacesreviews"),
        rating_pattern=re.compile(r"(\d+\.?\d*)\s*(?:out of 5|/5|stars?)", re.IGNORECASE),
        count_pattern=re.compile(r"(\d+)\s*(?:google\s*)?reviews?", re.IGNORECASE),
    ),
    _ReviewPlatform(
        "Airbnb",
        "airbnb",
        _patterns(r"airbnb.*review", r"superhost"),
        rating_pattern=re.compile(r"(\d+\.?\d*)\s*(?:rating|stars?)", re.IGNORECASE),
    ),
    _ReviewPlatform("VRBO", "vrbo", _patterns(r"vrbo.*review", r"premier\s*host")),
    _ReviewPlatform(
        "TripAdvisor",
        "tripadvisor",
        _patterns(r"tripadvisor", r"trip\s*advisor"),
        rating_pattern=re.compile(r"(\d+\.?\d*)\s*(?:of 5|bubbles?)", re.IGNORECASE),
    ),
    _ReviewPlatform(
        "Trustpilot",
        "trustpilot",
        _patterns(r"trustpilot", r"trustscore"),
        rating_pattern=re.compile(r"trustscore[:\s]*(\d+\.?\d*)", re.IGNORECASE),
    ),
)

TRUST_BADGES: tuple[tuple[str, BadgeCategory, tuple[re.Pattern[str], ...]], ...] = (
    # Security
    ("SSL/Secure", "security", _patterns(r"ssl\s*secure", r"256.?bit")),
    ("McAfee Secure", "security", _patterns(r"mcafee\s*secure")),
    ("Norton Secured", "security", _patterns(r"norton\s*secured")),
    ("DigiCert", "security", _patterns(r"digicert")),
    # Industry
    ("Superhost", "industry", _patterns(r"superhost")),
    ("Premier Host", "industry", _patterns(r"premier\s*host")),
    ("Verified Host", "industry", _patterns(r"verified\s*host")),
    ("VRMA Member", "industry", _patterns(r"vrma", r"vacation\s*rental\s*management\s*association")),
    ("BBB Accredited", "industry", _patterns(r"bbb", r"better\s*business\s*bureau")),
    ("AAA Approved", "industry", _patterns(r"aaa\s*approved")),
    # Payment
    ("Visa/Mastercard", "payment", _patterns(r"visa.*mastercard", r"we\s*accept.*card")),
    ("PayPal", "payment", _patterns(r"paypal")),
    ("Stripe", "payment", _patterns(r"powered\s*by\s*stripe")),
    # Verification
    ("ID Verified", "verification", _patterns(r"id\s*verif", r"identity\s*verif")),
    ("Background Check", "verification", _patterns(r"background\s*check")),
)

SOCIAL_PLATFORMS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = (
    ("Facebook", _patterns(r"facebook\.com", r"fb\.com")),
    ("Instagram", _patterns(r"instagram\.com", r"instagr\.am")),
    ("Twitter/X", _patterns(r"twitter\.com", r"x\.com/(?!share)")),
    ("YouTube", _patterns(r"youtube\.com", r"youtu\.be")),
    ("Pinterest", _patterns(r"pinterest\.com")),
    ("LinkedIn", _patterns(r"linkedin\.com")),
    ("TikTok", _patterns(r"tiktok\.com")),
)

PHONE_PATTERNS = (
    re.compile(r"\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b"),
    re.compile(r"\b\(\d{3}\)\s*\d{3}[-.\s]?\d{4}\b"),
    re.compile(r"\b\+1[-.\s]?\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b"),
    re.compile(r"\b\+\d{1,3}[-.\s]?\d{2,4}[-.\s]?\d{3,4}[-.\s]?\d{3,4}\b"),
    re.compile(r"tel:", re.IGNORECASE),
)

EMAIL_PATTERNS = (
    re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    re.compile(r"mailto:", re.IGNORECASE),
)

ADDRESS_PATTERNS = _patterns(
    r"\d+\s+[A-Za-z]+\s+(Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Way|Court|Ct)",
    r"[A-Za-z]+,\s*[A-Z]{2}\s+\d{5}",
    r"physical\s*address",
    r"our\s*location",
)

JSON_LD_BLOCK = re.compile(
    r"<script[^>]*type=[\"']application/ld\+json[\"'][^>]*>([\s\S]*?)</script>",
    re.IGNORECASE,
)

GENERIC_REVIEW_PATTERNS = _patterns(r"\d+\.?\d*\s*(out of 5|/5|stars?)", r"★{3,5}", r"review")
GENERIC_RATING = re.compile(r"(\d+\.?\d*)\s*(?:out of 5|/5)", re.IGNORECASE)
GENERIC_COUNT = re.compile(r"(\d+)\s*reviews?", re.IGNORECASE)

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)")


def _leading_int(value: Any) -> Optional[int]:
    """Leading integer of ``value`` (non-zero), else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return int(value) or None
    match = _LEADING_INT.match(str(value)) if isinstance(value, str) else None
    return (int(match.group()) or None) if match else None


def _leading_float(value: Any) -> Optional[float]:
    """Leading number of ``value`` (non-zero), else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_FLOAT.match(value) if isinstance(value, str) else None
        if not match:
            return None
        number = float(match.group())
    return number if number and math.isfinite(number) else None


def _aggregate_rating_from_json_ld(html: str) -> Optional[ReviewAnalysis]:
    for block in JSON_LD_BLOCK.findall(html):
        try:
            data = json.loads(block)
        except ValueError:
            logger.debug("Skipping invalid JSON-LD block")
            continue

        rating = data.get("aggregateRating") if isinstance(data, dict) else None
        if not rating:
            continue
        rating = rating if isinstance(rating, dict) else {}

        return ReviewAnalysis(
            has_reviews=True,
            source=ReviewSource(name="Schema.org Aggregate", type="aggregate", is_verified=True),
            review_count=_leading_int(rating.get("reviewCount")),
            average_rating=_leading_float(rating.get("ratingValue")),
        )
    return None


def analyze_reviews(html: str) -> ReviewAnalysis:
    """Structured data first, then known review platforms, then generic review markup."""
    structured = _aggregate_rating_from_json_ld(html)
    if structured is not None:
        return structured

    for platform in REVIEW_PLATFORMS:
        if not _any_match(platform.patterns, html):
            continue

        rating: Optional[float] = None
        count: Optional[int] = None
        if platform.rating_pattern:
            match = platform.rating_pattern.search(html)
            if match:
                rating = float(match.group(1))
        if platform.count_pattern:
            match = platform.count_pattern.search(html)
            if match:
                count = int(match.group(1))

        return ReviewAnalysis(
            has_reviews=True,
            source=ReviewSource(
                name=platform.name,
                type=platform.type,
                is_verified=platform.type in VERIFIED_SOURCE_TYPES,
            ),
            review_count=count,
            average_rating=rating,
        )

    if _any_match(GENERIC_REVIEW_PATTERNS, html):
        rating_match = GENERIC_RATING.search(html)
        count_match = GENERIC_COUNT.search(html)
        return ReviewAnalysis(
            has_reviews=True,
            source=ReviewSource(name="Site Reviews", type="custom", is_verified=False),
            review_count=int(count_match.group(1)) if count_match else None,
            average_rating=float(rating_match.group(1)) if rating_match else None,
        )

    return ReviewAnalysis()


def detect_trust_badges(html: str) -> list[TrustBadge]:
    return [
        TrustBadge(name=name, category=category)
        for name, category, patterns in TRUST_BADGES
        if _any_match(patterns, html)
    ]


def detect_social_profiles(html: str) -> list[SocialProfile]:
    return [
        SocialProfile(platform=platform, detected=_any_match(patterns, html))
        for platform, patterns in SOCIAL_PLATFORMS
    ]


def _trust_score(
    reviews: ReviewAnalysis,
    badges: list[TrustBadge],
    has_phone: bool,
    has_email: bool,
    has_address: bool,
    social_count: int,
    has_testimonials: bool,
    has_privacy_policy: bool,
    has_terms: bool,
) -> int:
    score = 0

    # Reviews, up to 35
    if reviews.has_reviews:
        score += 15
        if reviews.average_rating and reviews.average_rating >= 4.0:
            score += 10
        if reviews.review_count and reviews.review_count >= 10:
            score += 10

    # Badges, up to 20
    score += min(len(badges) * 5, 20)

    # Contact, up to 20
    if has_phone:
        score += 8
    if has_email:
        score += 6
    if has_address:
        score += 6

    # Social, up to 10
    score += min(social_count * 3, 10)

    if has_testimonials:
        score += 5

    # Legal pages, up to 10
    if has_privacy_policy:
        score += 5
    if has_terms:
        score += 5

    return min(score, 100)


def analyze_trust_signals(html: str) -> TrustSignalAnalysis:
    """Scan raw HTML for credibility indicators and score them 0-100."""
    reviews = analyze_reviews(html)
    badges = detect_trust_badges(html)
    social_profiles = detect_social_profiles(html)
    social_count = sum(1 for profile in social_profiles if profile.detected)

    has_phone = _any_match(PHONE_PATTERNS, html)
    has_email = _any_match(EMAIL_PATTERNS, html)
    has_address = _any_match(ADDRESS_PATTERNS, html)

    has_testimonials = _any_match(_patterns(r"testimonial", r"guest\s*(said|says|wrote)"), html)
    has_guest_photos = _any_match(_patterns(r"guest\s*photo", r"photo.*review"), html)
    has_press_logos = _any_match(_patterns(r"as\s*seen\s*(in|on)", r"featured\s*(in|on)"), html)

    has_privacy_policy = _any_match(_patterns(r"privacy\s*policy", r"privacy-policy"), html)
    has_terms = _any_match(_patterns(r"terms\s*(of\s*service|&\s*conditions)"), html)
    has_about_page = _any_match(_patterns(r"about\s*us", r"our\s*story"), html)

    has_security_badges = any(badge.category == "security" for badge in badges)
    has_industry_badges = any(badge.category == "industry" for badge in badges)

    tips: list[str] = []
    if not reviews.has_reviews:
        tips.append("Add guest reviews to your site - 93% of travelers read reviews before booking")
    elif reviews.review_count and reviews.review_count < 10:
        tips.append(
            f"You have {reviews.review_count} reviews - encourage more guests to leave feedback"
        )
    if not (reviews.source and reviews.source.is_verified):
        tips.append("Display verified reviews from Google, Airbnb, or VRBO to build credibility")
    if not has_phone:
        tips.append("Add a visible phone number - guests want to know they can reach you")
    if not has_address:
        tips.append("Show your general location or business address for transparency")
    if social_count == 0:
        tips.append("Link to your social media profiles to show you're an active, real business")
    if not has_security_badges and not has_industry_badges:
        tips.append(
            "Add trust badges (Superhost, verified host, secure payment) to reduce booking anxiety"
        )
    if not has_privacy_policy:
        tips.append("Add a privacy policy link - it's legally required and builds trust")
    if reviews.average_rating and reviews.average_rating >= 4.5:
        tips.append(
            f"Great {reviews.average_rating:g} rating! Feature this prominently in your hero section"
        )

    return TrustSignalAnalysis(
        overall_trust_score=_trust_score(
            reviews,
            badges,
            has_phone,
            has_email,
            has_address,
            social_count,
            has_testimonials,
            has_privacy_policy,
            has_terms,
        ),
        has_reviews=reviews.has_reviews,
        review_source=reviews.source,
        review_count=reviews.review_count,
        average_rating=reviews.average_rating,
        trust_badges=badges,
        has_security_badges=has_security_badges,
        has_industry_badges=has_industry_badges,
        has_phone_number=has_phone,
        has_email_address=has_email,
        has_physical_address=has_address,
        social_profiles=social_profiles,
        has_about_page=has_about_page,
        has_privacy_policy=has_privacy_policy,
        has_terms_of_service=has_terms,
        has_testimonials=has_testimonials,
        has_guest_photos=has_guest_photos,
        has_press_logos=has_press_logos,
        recommendations=tips,
    )
