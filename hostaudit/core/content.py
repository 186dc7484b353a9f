"""HTML content checks - checklist facts and their recommendations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from hostaudit.schemas.audit import RawPageFetch, Recommendation
from hostaudit.schemas.common import CheckStatus, Impact

TITLE_PATTERN = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
IMAGE_PATTERN = re.compile(r"<img[^>]+>", re.IGNORECASE)

PRICING_PATTERNS = (
    re.compile(r"\$\d+"),
    re.compile(r"\d+\s*(per|/)\s*night", re.IGNORECASE),
    re.compile(r"nightly\s*rate", re.IGNORECASE),
    re.compile(r"price", re.IGNORECASE),
)
CONTACT_PATTERNS = (
    re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}"),
    re.compile(r"mailto:", re.IGNORECASE),
    re.compile(r"@.*\.(com|net|org)", re.IGNORECASE),
)
BOOKING_KEYWORDS = ("book now", "reserve", "check availability")
REVIEW_KEYWORDS = ("review", "testimonial", "guest said", "★", "stars")

# Thresholds
MANY_IMAGES = 5
FAST_LOAD_MS = 2000
SLOW_LOAD_MS = 4000
MAX_PAGE_BYTES = 500_000


@dataclass(frozen=True)
class PageAnalysis:
    """Checklist facts derived from the raw page, plus one finding per check."""

    has_ssl: bool
    has_meta_title: bool
    has_meta_description: bool
    has_mobile_viewport: bool
    has_booking_cta: bool
    has_pricing: bool
    has_reviews: bool
    has_contact_info: bool
    has_images: bool
    image_count: int
    load_time_ms: int
    page_size: int
    recommendations: list[Recommendation] = field(default_factory=list)


def _pass_fail(ok: bool) -> CheckStatus:
    return CheckStatus.PASS if ok else CheckStatus.FAIL


def _image_recommendation(count: int) -> Recommendation:
    if count > MANY_IMAGES:
        description, status = f"Found {count} images - good visual content", CheckStatus.PASS
    elif count > 0:
        description = f"Only {count} images - consider adding more property photos"
        status = CheckStatus.WARNING
    else:
        description, status = "No images found - property photos are essential", CheckStatus.FAIL

    return Recommendation(
        title="Property Images",
        description=description,
        status=status,
        impact=Impact.HIGH,
        category="Content",
    )


def _load_time_recommendation(load_time_ms: int) -> Recommendation:
    if load_time_ms < FAST_LOAD_MS:
        description = f"Page loaded in {load_time_ms}ms - good performance"
        status = CheckStatus.PASS
    elif load_time_ms < SLOW_LOAD_MS:
        description = f"Page loaded in {load_time_ms}ms - could be faster"
        status = CheckStatus.WARNING
    else:
        description = f"Page loaded in {load_time_ms}ms - too slow, optimize images and scripts"
        status = CheckStatus.FAIL

    return Recommendation(
        title="Page Load Time",
        description=description,
        status=status,
        impact=Impact.MEDIUM,
        category="Performance",
    )


def _page_size_recommendation(page_size: int) -> Recommendation:
    kilobytes = round(page_size / 1024)
    small = page_size < MAX_PAGE_BYTES
    return Recommendation(
        title="Page Size",
        description=f"Page is {kilobytes}KB - acceptable size"
        if small
        else f"Page is {kilobytes}KB - consider reducing page weight",
        status=CheckStatus.PASS if small else CheckStatus.WARNING,
        impact=Impact.MEDIUM,
        category="Performance",
    )


def analyze_page(page: RawPageFetch, domain: str) -> PageAnalysis:
    """
    Run the fixed HTML checklist over a fetched page.

    Pure: substring and regex tests on the raw HTML only. ``domain`` is
    accepted for parity with the other analyzers and currently unused.
    """
    html = page.html
    lower_html = html.lower()

    has_ssl = page.error is None and page.status_code == 200

    title_match = TITLE_PATTERN.search(html)
    title = title_match.group(1) if title_match else ""
    has_meta_title = bool(title.strip())

    has_meta_description = 'name="description"' in lower_html or "name='description'" in lower_html
    has_mobile_viewport = "viewport" in lower_html and "width=device-width" in lower_html

    has_pricing = any(pattern.search(html) for pattern in PRICING_PATTERNS)
    has_booking_cta = any(keyword in lower_html for keyword in BOOKING_KEYWORDS)
    has_reviews = any(keyword in lower_html for keyword in REVIEW_KEYWORDS)
    has_contact_info = any(pattern.search(html) for pattern in CONTACT_PATTERNS)

    image_count = len(IMAGE_PATTERN.findall(html))
    page_size = page.content_length

    recommendations = [
        Recommendation(
            title="SSL Certificate",
            description="Site uses HTTPS correctly" if has_ssl else "Site is not accessible via HTTPS",
            status=_pass_fail(has_ssl),
            impact=Impact.HIGH,
            category="Security",
        ),
        Recommendation(
            title="Page Title",
            description=f'Found title: "{title[:50]}..."'
            if has_meta_title
            else "Missing or empty page title",
            status=_pass_fail(has_meta_title),
            impact=Impact.HIGH,
            category="SEO",
        ),
        Recommendation(
            title="Meta Description",
            description="Meta description found"
            if has_meta_description
            else "Missing meta description - important for search results",
            status=_pass_fail(has_meta_description),
            impact=Impact.HIGH,
            category="SEO",
        ),
        Recommendation(
            title="Mobile Viewport",
            description="Mobile viewport configured correctly"
            if has_mobile_viewport
            else "Missing mobile viewport meta tag",
            status=_pass_fail(has_mobile_viewport),
            impact=Impact.HIGH,
            category="Performance",
        ),
        Recommendation(
            title="Pricing Display",
            description="Pricing information visible"
            if has_pricing
            else "No pricing found on page - show rates upfront to set expectations",
            status=CheckStatus.PASS if has_pricing else CheckStatus.WARNING,
            impact=Impact.HIGH,
            category="Conversion",
        ),
        _image_recommendation(image_count),
        _load_time_recommendation(page.load_time_ms),
        _page_size_recommendation(page_size),
    ]

    return PageAnalysis(
        has_ssl=has_ssl,
        has_meta_title=has_meta_title,
        has_meta_description=has_meta_description,
        has_mobile_viewport=has_mobile_viewport,
        has_booking_cta=has_booking_cta,
        has_pricing=has_pricing,
        has_reviews=has_reviews,
        has_contact_info=has_contact_info,
        has_images=image_count > 0,
        image_count=image_count,
        load_time_ms=page.load_time_ms,
        page_size=page_size,
        recommendations=recommendations,
    )
