from hostaudit.core.content import analyze_page
from hostaudit.schemas.audit import RawPageFetch
from hostaudit.schemas.common import CheckStatus, Impact

EXPECTED_TITLES = [
    "SSL Certificate",
    "Page Title",
    "Meta Description",
    "Mobile Viewport",
    "Pricing Display",
    "Property Images",
    "Page Load Time",
    "Page Size",
]


def test_sample_page_passes_checklist(sample_page: RawPageFetch):
    analysis = analyze_page(sample_page, "seaside.com")

    assert analysis.has_ssl is True
    assert analysis.has_meta_title is True
    assert analysis.has_meta_description is True
    assert analysis.has_mobile_viewport is True
    assert analysis.has_booking_cta is True
    assert analysis.has_pricing is True
    assert analysis.has_reviews is True
    assert analysis.has_contact_info is True
    assert analysis.image_count == 6
    assert analysis.page_size == len(sample_page.html.encode("utf-8"))

    assert [r.title for r in analysis.recommendations] == EXPECTED_TITLES
    assert all(r.status == CheckStatus.PASS for r in analysis.recommendations)


def test_failed_fetch(empty_page: RawPageFetch):
    analysis = analyze_page(empty_page, "unreachable.example")

    assert analysis.has_ssl is False
    assert analysis.has_images is False
    assert analysis.page_size == 0

    by_title = {r.title: r for r in analysis.recommendations}
    assert by_title["SSL Certificate"].status == CheckStatus.FAIL
    assert by_title["Page Title"].status == CheckStatus.FAIL
    assert by_title["Pricing Display"].status == CheckStatus.WARNING
    assert by_title["Property Images"].status == CheckStatus.FAIL
    assert by_title["Page Size"].status == CheckStatus.PASS


def test_non_200_is_not_ssl():
    page = RawPageFetch(url="https://seaside.com", html="<title>x</title>", status_code=404)
    assert analyze_page(page, "seaside.com").has_ssl is False


def test_title_description_is_truncated():
    title = "A" * 80
    page = RawPageFetch(url="https://a.com", html=f"<title>{title}</title>", status_code=200)
    rec = analyze_page(page, "a.com").recommendations[1]
    assert rec.description == f'Found title: "{"A" * 50}..."'
    assert rec.category == "SEO"
    assert rec.impact == Impact.HIGH


def test_blank_title_counts_as_missing():
    page = RawPageFetch(url="https://a.com", html="<title>   </title>", status_code=200)
    assert analyze_page(page, "a.com").has_meta_title is False


def test_image_tiers():
    def images(count: int) -> CheckStatus:
        page = RawPageFetch(url="https://a.com", html='<img src="x">' * count, status_code=200)
        return analyze_page(page, "a.com").recommendations[5].status

    assert images(0) == CheckStatus.FAIL
    assert images(5) == CheckStatus.WARNING
    assert images(6) == CheckStatus.PASS


def test_load_time_and_size_tiers():
    def recs(load_time_ms: int, size: int) -> tuple[CheckStatus, CheckStatus]:
        page = RawPageFetch(
            url="https://a.com", html="x" * size, status_code=200, load_time_ms=load_time_ms
        )
        analysis = analyze_page(page, "a.com")
        return analysis.recommendations[6].status, analysis.recommendations[7].status

    assert recs(1999, 10) == (CheckStatus.PASS, CheckStatus.PASS)
    assert recs(2000, 10) == (CheckStatus.WARNING, CheckStatus.PASS)
    assert recs(4000, 500_000) == (CheckStatus.FAIL, CheckStatus.WARNING)
