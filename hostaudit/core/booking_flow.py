"""Booking flow analysis - booking engines, CTAs and booking friction."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Optional

from hostaudit.schemas.audit import BookingEngineData, BookingFlowData

EngineType = Literal["embedded", "redirect", "native"]
CtaLocation = Literal["above-fold", "below-fold", "none"]

# First 20% of the document is treated as "above the fold"
FOLD_RATIO = 0.2
MAX_CLICKS = 10
MAX_FRICTION = 100


@dataclass(frozen=True)
class BookingEngine:
    name: str
    type: EngineType
    confidence: float


@dataclass(frozen=True)
class BookingFlowAnalysis:
    """Booking flow facts for one page. ``friction_score`` is 0-100, higher is worse."""

    has_booking_cta: bool
    cta_text: Optional[str]
    cta_location: CtaLocation
    booking_engine: Optional[BookingEngine]
    has_date_picker: bool
    has_guest_selector: bool
    has_price_calculator: bool
    has_instant_book: bool
    estimated_clicks_to_book: int
    friction_score: int
    recommendations: list[str] = field(default_factory=list)

    def to_summary(self) -> BookingFlowData:
        """The subset carried on the audit result."""
        engine = self.booking_engine
        return BookingFlowData(
            has_booking_cta=self.has_booking_cta,
            cta_text=self.cta_text,
            cta_location=self.cta_location,
            booking_engine=BookingEngineData(
                name=engine.name, type=engine.type, confidence=engine.confidence
            )
            if engine
            else None,
            has_date_picker=self.has_date_picker,
            has_instant_book=self.has_instant_book,
            estimated_clicks_to_book=self.estimated_clicks_to_book,
            friction_score=self.friction_score,
        )


def _patterns(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


# (name, type, signatures)
BOOKING_ENGINES: tuple[tuple[str, EngineType, tuple[re.Pattern[str], ...]], ...] = (
    ("Lodgify", "embedded", _patterns(r"lodgify\.com", r"lodgify-widget", r"data-lodgify")),
    ("Hospitable (formerly Smartbnb)", "redirect", _patterns(r"hospitable\.com", r"smartbnb")),
    ("Guesty", "embedded", _patterns(r"guesty\.com", r"guestybooking", r"guesty-widget")),
    ("OwnerRez", "embedded", _patterns(r"ownerrez\.com", r"ownerreservations", r"\.ownerrez\.")),
    ("Hostaway", "embedded", _patterns(r"hostaway\.com", r"hostaway-booking")),
    ("Cloudbeds", "embedded", _patterns(r"cloudbeds\.com", r"cloudbeds-widget", r"myfrontdesk")),
    ("Hostfully", "embedded", _patterns(r"hostfully\.com", r"hostfully-widget")),
    ("Escapia", "redirect", _patterns(r"escapia\.com", r"vrconnection")),
    ("Streamline", "embedded", _patterns(r"streamlinevrs\.com", r"streamline-widget")),
    ("Booking.com Widget", "embedded", _patterns(r"booking\.com/widget", r"bookingwidget")),
    ("Airbnb Embed", "redirect", _patterns(r"airbnb\.com/embeddable", r"airbnb-embed")),
    ("VRBO/Expedia", "redirect", _patterns(r"vrbo\.com", r"expedia\.com.*vacation")),
    ("Beds24", "embedded", _patterns(r"beds24\.com", r"beds24-booking")),
    ("Checkfront", "embedded", _patterns(r"checkfront\.com", r"checkfront-widget")),
    ("FareHarbor", "embedded", _patterns(r"fareharbor\.com", r"fh-widget")),
)

CUSTOM_FORM_PATTERNS = _patterns(r"<form[^>]*booking", r"<form[^>]*reservation")

# (pattern, priority, label) - higher priority wins
CTA_PATTERNS: tuple[tuple[re.Pattern[str], int, str], ...] = (
    (re.compile(r"book\s*now", re.IGNORECASE), 100, "Book Now"),
    (re.compile(r"reserve\s*now", re.IGNORECASE), 95, "Reserve Now"),
    (re.compile(r"book\s*your\s*stay", re.IGNORECASE), 90, "Book Your Stay"),
    (re.compile(r"check\s*availability", re.IGNORECASE), 85, "Check Availability"),
    (re.compile(r"instant\s*book", re.IGNORECASE), 100, "Instant Book"),
    (re.compile(r"book\s*this", re.IGNORECASE), 80, "Book This"),
    (re.compile(r"reserve", re.IGNORECASE), 70, "Reserve"),
    (re.compile(r"book\s*online", re.IGNORECASE), 75, "Book Online"),
    (re.compile(r"get\s*quote", re.IGNORECASE), 60, "Get Quote"),
    (re.compile(r"request\s*booking", re.IGNORECASE), 65, "Request Booking"),
    (re.compile(r"inquire", re.IGNORECASE), 50, "Inquire"),
    (re.compile(r"contact\s*us", re.IGNORECASE), 30, "Contact Us"),
)

DATE_PICKER_PATTERNS = _patterns(
    r"date-?picker",
    r"datepicker",
    r"calendar-?widget",
    r"check-?in.*date",
    r"arrival.*date",
    r"type=[\"']date[\"']",
    r"flatpickr",
    r"pikaday",
    r"air-?datepicker",
    r"react-?dates",
    r"input.*check.?in",
)

GUEST_SELECTOR_PATTERNS = _patterns(
    r"guest.*selector",
    r"number.*guests",
    r"how.*many.*guests",
    r"adults.*children",
    r"occupancy",
    r"select.*guests",
    r"guest.*count",
)

PRICE_CALCULATOR_PATTERNS = _patterns(
    r"price.*calculator",
    r"total.*price",
    r"\$\d+.*/.*night",
    r"per.*night",
    r"nightly.*rate",
    r"price.*breakdown",
    r"cleaning.*fee",
    r"service.*fee",
)

INSTANT_BOOK_PATTERNS = _patterns(r"instant\s*book", r"book\s*instantly")


def _any_match(patterns: tuple[re.Pattern[str], ...], html: str) -> bool:
    return any(pattern.search(html) for pattern in patterns)


def detect_booking_engine(html: str) -> Optional[BookingEngine]:
    """First known engine whose signature appears, else a generic booking form."""
    for name, engine_type, patterns in BOOKING_ENGINES:
        if _any_match(patterns, html):
            return BookingEngine(name=name, type=engine_type, confidence=0.9)

    if _any_match(CUSTOM_FORM_PATTERNS, html):
        return BookingEngine(name="Custom Booking Form", type="native", confidence=0.6)

    return None


def _analyze_ctas(html: str) -> tuple[Optional[str], CtaLocation]:
    best: Optional[tuple[int, str, int]] = None  # (priority, label, position)

    for pattern, priority, label in CTA_PATTERNS:
        match = pattern.search(html)
        if match and (best is None or priority > best[0]):
            best = (priority, label, match.start())

    if best is None:
        return None, "none"

    _, label, position = best
    location: CtaLocation = "above-fold" if position < len(html) * FOLD_RATIO else "below-fold"
    return label, location


def _estimate_clicks_to_book(
    has_booking_cta: bool,
    engine: Optional[BookingEngine],
    has_date_picker: bool,
    has_guest_selector: bool,
    has_instant_book: bool,
) -> int:
    if not has_booking_cta:
        return MAX_CLICKS

    clicks = 1  # the CTA itself
    if engine is not None and engine.type == "redirect":
        clicks += 1
    clicks += 1 if has_date_picker else 2
    if not has_guest_selector:
        clicks += 1
    if not has_instant_book:
        clicks += 2  # inquiry: submit, wait, confirm
    clicks += 2  # payment and confirmation

    return min(clicks, MAX_CLICKS)


def _friction_score(
    has_booking_cta: bool,
    cta_location: CtaLocation,
    engine: Optional[BookingEngine],
    has_date_picker: bool,
    has_instant_book: bool,
    clicks: int,
) -> int:
    friction = 0

    if not has_booking_cta:
        friction += 40
    elif cta_location == "below-fold":
        friction += 15

    if engine is None:
        friction += 25
    elif engine.type == "redirect":
        friction += 10

    if not has_date_picker:
        friction += 10
    if not has_instant_book:
        friction += 15

    if clicks > 5:
        friction += 15
    elif clicks > 3:
        friction += 5

    return min(friction, MAX_FRICTION)


def _recommendations(
    has_booking_cta: bool,
    cta_location: CtaLocation,
    engine: Optional[BookingEngine],
    has_date_picker: bool,
    has_instant_book: bool,
    clicks: int,
) -> list[str]:
    tips: list[str] = []

    if not has_booking_cta:
        tips.append("Add a prominent 'Book Now' button - visitors can't book if they can't find how")
    elif cta_location == "below-fold":
        tips.append("Move your booking CTA above the fold - don't make visitors scroll to book")

    if engine is None:
        tips.append("Consider adding an integrated booking widget to capture direct bookings")
    elif engine.type == "redirect":
        tips.append(
            f"Your booking redirects to {engine.name} - consider an embedded widget "
            "to keep guests on your site"
        )

    if not has_date_picker:
        tips.append("Add a visible date picker - let guests check availability immediately")

    if not has_instant_book and engine is not None:
        tips.append(
            "Enable instant booking if possible - inquiry-based bookings have higher abandonment"
        )

    if clicks > 3:
        tips.append(f"Reduce booking steps - currently ~{clicks} clicks, aim for 3 or fewer")

    return tips


def analyze_booking_flow(html: str) -> BookingFlowAnalysis:
    """Scan raw HTML for booking engines, CTAs and booking widgets."""
    engine = detect_booking_engine(html)
    cta_text, cta_location = _analyze_ctas(html)
    has_booking_cta = cta_text is not None

    has_date_picker = _any_match(DATE_PICKER_PATTERNS, html)
    has_guest_selector = _any_match(GUEST_SELECTOR_PATTERNS, html)
    has_price_calculator = _any_match(PRICE_CALCULATOR_PATTERNS, html)
    has_instant_book = _any_match(INSTANT_BOOK_PATTERNS, html)

    clicks = _estimate_clicks_to_book(
        has_booking_cta, engine, has_date_picker, has_guest_selector, has_instant_book
    )
    friction = _friction_score(
        has_booking_cta, cta_location, engine, has_date_picker, has_instant_book, clicks
    )

    return BookingFlowAnalysis(
        has_booking_cta=has_booking_cta,
        cta_text=cta_text,
        cta_location=cta_location,
        booking_engine=engine,
        has_date_picker=has_date_picker,
        has_guest_selector=has_guest_selector,
        has_price_calculator=has_price_calculator,
        has_instant_book=has_instant_book,
        estimated_clicks_to_book=clicks,
        friction_score=friction,
        recommendations=_recommendations(
            has_booking_cta, cta_location, engine, has_date_picker, has_instant_book, clicks
        ),
    )
