"""Pytest fixtures for hostaudit tests."""

from collections.abc import Callable, Generator
from typing import Any

import pytest

from hostaudit.config.settings import Config, reset_config
from hostaudit.schemas.audit import RawPageFetch
from hostaudit.services.jobs import JobStore

PROVIDER_ENV_VARS = (
    "PAGESPEED_API_KEY",
    "DATAFORSEO_LOGIN",
    "DATAFORSEO_PASSWORD",
    "SEMRUSH_API_KEY",
)


@pytest.fixture(autouse=True, scope="function")
def reset_singletons(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Reset singletons and hide real credentials for each test."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # A local .env must not leak credentials into tests
    monkeypatch.setattr("hostaudit.config.settings.load_dotenv", lambda *a, **kw: False)

    JobStore.reset_instance()
    reset_config()

    yield

    JobStore.reset_instance()
    reset_config()


def _config(**overrides: Any) -> Config:
    values: dict[str, Any] = {
        "pagespeed_api_key": None,
        "dataforseo_login": None,
        "dataforseo_password": None,
        "semrush_api_key": None,
        "page_fetch_timeout": 5.0,
        "pagespeed_timeout": 5.0,
        "dataforseo_timeout": 5.0,
        "semrush_timeout": 5.0,
        "max_jobs_per_ip": 5,
    }
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def make_config() -> Callable[..., Config]:
    """Factory for explicit Config objects (no environment involved)."""
    return _config


SAMPLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Seaside Cottage - Direct Booking</title>
  <meta name="description" content="Oceanfront cottage for six guests">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <script type="application/ld+json">
  {"@type": "LodgingBusiness", "aggregateRating": {"ratingValue": "4.9", "reviewCount": "87"}}
  </script>
</head>
<body>
  <a class="cta" href="/book">Book Now</a>
  <div class="lodgify-widget" data-lodgify="123"></div>
  <input class="datepicker" name="checkin">
  <select name="guests" class="guest-selector"><option>Number of guests</option></select>
  <p>From $189 per night. Instant book available.</p>
  <img src="1.jpg"><img src="2.jpg"><img src="3.jpg">
  <img src="4.jpg"><img src="5.jpg"><img src="6.jpg">
  <section class="testimonials">Guest said: "Perfect stay!"</section>
  <footer>
    Call 555-123-4567 or <a href="mailto:stay@seaside.com">email us</a>.
    12 Ocean Drive, Cannon Beach, OR 97110
    <a href="https://facebook.com/seaside">Facebook</a>
    <a href="https://instagram.com/seaside">Instagram</a>
    <a href="/privacy-policy">Privacy Policy</a>
    <a href="/terms">Terms of Service</a>
    Superhost
  </footer>
</body>
</html>
"""


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture
def sample_page() -> RawPageFetch:
    """A successful fetch of a well-built direct-booking page."""
    return RawPageFetch(
        url="https://seaside.com",
        html=SAMPLE_HTML,
        status_code=200,
        headers={"content-type": "text/html"},
        load_time_ms=850,
    )


@pytest.fixture
def empty_page() -> RawPageFetch:
    """A fetch that failed at the transport level."""
    return RawPageFetch(url="https://unreachable.example", error="Connection refused")


@pytest.fixture
def pagespeed_lab_payload() -> dict[str, Any]:
    """PageSpeed response with Lighthouse lab data only."""
    return {
        "lighthouseResult": {
            "categories": {
                "performance": {"score": 0.72},
                "accessibility": {"score": 0.95},
                "best-practices": {"score": 0.83},
                "seo": {"score": 0.91},
            },
            "audits": {
                "largest-contentful-paint": {"numericValue": 3120.4, "displayValue": "3.1 s"},
                "cumulative-layout-shift": {"numericValue": 0.04567},
                "first-contentful-paint": {"numericValue": 1450.2},
                "total-blocking-time": {"numericValue": 310.6},
            },
        }
    }


@pytest.fixture
def pagespeed_field_payload(pagespeed_lab_payload: dict[str, Any]) -> dict[str, Any]:
    """PageSpeed response with real-user field data and lab data."""
    return {
        "loadingExperience": {
            "metrics": {
                "LARGEST_CONTENTFUL_PAINT_MS": {"percentile": 2100, "category": "FAST"},
                "FIRST_INPUT_DELAY_MS": {"percentile": 45, "category": "FAST"},
                "CUMULATIVE_LAYOUT_SHIFT_SCORE": {"percentile": 12, "category": "AVERAGE"},
                "FIRST_CONTENTFUL_PAINT_MS": {"percentile": 1900, "category": "AVERAGE"},
            }
        },
        **pagespeed_lab_payload,
    }
