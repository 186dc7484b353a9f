from typing import Any

from hostaudit.core.booking_flow import analyze_booking_flow
from hostaudit.core.content import analyze_page
from hostaudit.core.recommendations import (
    booking_flow_recommendations,
    compile_recommendations,
    pagespeed_recommendations,
    seo_recommendations,
    trust_signal_recommendations,
)
from hostaudit.core.trust_signals import analyze_trust_signals
from hostaudit.schemas.audit import RawPageFetch, SEOMetrics
from hostaudit.schemas.common import CheckStatus, SEOSource


def _by_title(recs):
    return {r.title: r for r in recs}


class TestBookingFlowRecommendations:
    def test_sample_page(self, sample_html: str):
        recs = _by_title(booking_flow_recommendations(analyze_booking_flow(sample_html)))

        cta = recs["Booking Call-to-Action"]
        assert cta.status == CheckStatus.WARNING
        assert cta.description == '"Book Now" found, but below the fold - move it higher'
        assert recs["Booking System"].status == CheckStatus.PASS
        assert "Lodgify" in recs["Booking System"].description
        assert recs["Date Selection"].status == CheckStatus.PASS
        assert recs["Instant Booking"].status == CheckStatus.PASS
        assert recs["Booking Friction"].description == (
            "Low friction (4 estimated clicks to book) - aim for 3 clicks or fewer"
        )
        assert all(r.category == "Conversion" for r in recs.values())

    def test_nothing_found(self):
        recs = _by_title(booking_flow_recommendations(analyze_booking_flow("")))

        assert recs["Booking Call-to-Action"].status == CheckStatus.FAIL
        assert recs["Booking System"].status == CheckStatus.FAIL
        assert recs["Booking Friction"].status == CheckStatus.FAIL
        assert recs["Booking Friction"].description.startswith("High friction (10 estimated")


class TestTrustSignalRecommendations:
    def test_sample_page(self, sample_html: str):
        recs = trust_signal_recommendations(analyze_trust_signals(sample_html))
        by_title = _by_title(recs)

        assert [r.title for r in recs] == [
            "Guest Reviews",
            "Trust Badges",
            "Contact Information",
            "Social Media Presence",
            "Privacy Policy",
            "Overall Trust Score",
        ]
        assert by_title["Guest Reviews"].description == (
            "Schema.org Aggregate (verified) - 4.9/5 (87 reviews)"
        )
        assert by_title["Trust Badges"].description == "Found: Superhost"
        assert by_title["Contact Information"].description == (
            "Good transparency: phone, email, address visible"
        )
        assert by_title["Social Media Presence"].description == "Active on: Facebook, Instagram"
        assert by_title["Overall Trust Score"].description == "Strong trust signals (81/100)"
        assert all(r.status == CheckStatus.PASS for r in recs)

    def test_empty_page(self):
        by_title = _by_title(trust_signal_recommendations(analyze_trust_signals("")))

        assert by_title["Guest Reviews"].status == CheckStatus.FAIL
        assert by_title["Trust Badges"].status == CheckStatus.WARNING
        assert by_title["Contact Information"].status == CheckStatus.FAIL
        assert by_title["Social Media Presence"].status == CheckStatus.FAIL
        assert by_title["Overall Trust Score"].description == "Weak trust signals (0/100)"

    def test_badge_overflow(self):
        html = "Superhost Premier Host Verified Host PayPal"
        by_title = _by_title(trust_signal_recommendations(analyze_trust_signals(html)))
        assert by_title["Trust Badges"].description == (
            "Found: Superhost, Premier Host, Verified Host (+1 more)"
        )


class TestPagespeedRecommendations:
    def test_without_lighthouse(self):
        assert pagespeed_recommendations(None) == []
        assert pagespeed_recommendations({"loadingExperience": {}}) == []

    def test_lab_payload(self, pagespeed_lab_payload: dict[str, Any]):
        recs = pagespeed_recommendations(pagespeed_lab_payload)
        by_title = _by_title(recs)

        assert [r.title for r in recs] == [
            "Lighthouse Performance",
            "Largest Contentful Paint (LCP)",
            "Accessibility Score",
            "Lighthouse SEO Score",
        ]
        assert by_title["Lighthouse Performance"].status == CheckStatus.WARNING
        assert by_title["Lighthouse Performance"].description == (
            "Performance score 72/100 - room for improvement"
        )
        assert by_title["Largest Contentful Paint (LCP)"].description == "3.1 s"
        assert by_title["Largest Contentful Paint (LCP)"].status == CheckStatus.WARNING
        assert by_title["Accessibility Score"].category == "Trust"
        assert by_title["Lighthouse SEO Score"].status == CheckStatus.PASS

    def test_lcp_without_display_value(self):
        payload = {
            "lighthouseResult": {
                "audits": {"largest-contentful-paint": {"numericValue": 5200}},
            }
        }
        (lcp,) = pagespeed_recommendations(payload)
        assert lcp.description == "5.2s"
        assert lcp.status == CheckStatus.FAIL

    def test_malformed_values_read_as_zero(self):
        payload = {
            "lighthouseResult": {
                "categories": {"performance": {"score": True}, "seo": "n/a"},
                "audits": {"largest-contentful-paint": {"numericValue": "fast"}},
            }
        }
        by_title = _by_title(pagespeed_recommendations(payload))
        assert by_title["Lighthouse Performance"].status == CheckStatus.FAIL
        assert by_title["Lighthouse Performance"].description == (
            "Poor performance score 0/100 - needs optimization"
        )
        assert by_title["Largest Contentful Paint (LCP)"].status == CheckStatus.PASS


class TestSEORecommendations:
    def test_none(self):
        assert seo_recommendations(None) == []

    def test_strong_profile(self):
        metrics = SEOMetrics(
            organic_traffic=4300,
            organic_keywords=120,
            backlinks=1520,
            source=SEOSource.SEMRUSH,
        )
        recs = seo_recommendations(metrics)

        assert [r.description for r in recs] == [
            "Strong organic presence: ~4,300 monthly visits",
            "Ranking for 120 keywords - good visibility",
            "Strong backlink profile: 1,520 referring domains",
        ]
        assert all(r.status == CheckStatus.PASS for r in recs)

    def test_thresholds_are_strict(self):
        recs = seo_recommendations(SEOMetrics(organic_traffic=1000, organic_keywords=10))
        assert [r.status for r in recs] == [CheckStatus.WARNING, CheckStatus.FAIL]

    def test_zero_and_unknown_values_skipped(self):
        metrics = SEOMetrics(organic_traffic=50, organic_keywords=0, backlinks=None)
        recs = seo_recommendations(metrics)
        assert [r.title for r in recs] == ["Organic Search Traffic"]
        assert recs[0].status == CheckStatus.FAIL


def test_compile_order(sample_page: RawPageFetch, pagespeed_lab_payload: dict[str, Any]):
    page = analyze_page(sample_page, "seaside.com")
    booking = analyze_booking_flow(sample_page.html)
    trust = analyze_trust_signals(sample_page.html)
    seo = SEOMetrics(organic_traffic=4300, organic_keywords=120, source=SEOSource.SEMRUSH)

    recs = compile_recommendations(page, booking, trust, pagespeed_lab_payload, seo)
    titles = [r.title for r in recs]

    assert titles[:8] == [r.title for r in page.recommendations]
    assert titles[8] == "Booking Call-to-Action"
    assert titles.index("Guest Reviews") < titles.index("Lighthouse Performance")
    assert titles[-2:] == ["Organic Search Traffic", "Ranking Keywords"]
    assert recs == compile_recommendations(page, booking, trust, pagespeed_lab_payload, seo)
