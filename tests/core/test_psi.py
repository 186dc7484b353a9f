"""Tests for the PageSpeed Insights client and web-vitals normalization."""

from typing import Any

import httpx
import pytest

from hostaudit.core.psi import (
    PSI_API_URL,
    _rate_cls,  # type: ignore
    _rate_fcp,  # type: ignore
    _rate_fid,  # type: ignore
    _rate_lcp,  # type: ignore
    _rate_tbt,  # type: ignore
    category_score,
    extract_core_web_vitals,
    extract_lighthouse_scores,
    fetch_pagespeed,
)
from hostaudit.schemas.common import MetricSource, Rating


class TestRatings:
    def test_lcp_thresholds(self):
        assert _rate_lcp(2500) == Rating.GOOD
        assert _rate_lcp(2501) == Rating.NEEDS_IMPROVEMENT
        assert _rate_lcp(4000) == Rating.NEEDS_IMPROVEMENT
        assert _rate_lcp(4001) == Rating.POOR

    def test_fid_thresholds(self):
        assert _rate_fid(100) == Rating.GOOD
        assert _rate_fid(300) == Rating.NEEDS_IMPROVEMENT
        assert _rate_fid(301) == Rating.POOR

    def test_cls_thresholds(self):
        assert _rate_cls(0.1) == Rating.GOOD
        assert _rate_cls(0.12) == Rating.NEEDS_IMPROVEMENT
        assert _rate_cls(0.25) == Rating.NEEDS_IMPROVEMENT
        assert _rate_cls(0.26) == Rating.POOR

    def test_fcp_and_tbt_thresholds(self):
        assert _rate_fcp(1800) == Rating.GOOD
        assert _rate_fcp(3000) == Rating.NEEDS_IMPROVEMENT
        assert _rate_fcp(3001) == Rating.POOR
        assert _rate_tbt(200) == Rating.GOOD
        assert _rate_tbt(600) == Rating.NEEDS_IMPROVEMENT
        assert _rate_tbt(601) == Rating.POOR


class TestExtractCoreWebVitals:
    def test_none_payload(self):
        assert extract_core_web_vitals(None) is None

    def test_payload_without_any_metrics(self):
        assert extract_core_web_vitals({"id": "https://example.com"}) is None

    def test_lab_only_has_no_fid(self, pagespeed_lab_payload: dict[str, Any]):
        vitals = extract_core_web_vitals(pagespeed_lab_payload)
        assert vitals is not None
        assert vitals.fid is None
        assert vitals.lcp.source == MetricSource.LAB
        assert vitals.lcp.value == 3120
        assert vitals.lcp.rating == Rating.NEEDS_IMPROVEMENT
        assert vitals.cls.value == 0.046
        assert vitals.tbt is not None
        assert vitals.tbt.value == 311
        assert vitals.tbt.rating == Rating.NEEDS_IMPROVEMENT

    def test_field_data_preferred(self, pagespeed_field_payload: dict[str, Any]):
        vitals = extract_core_web_vitals(pagespeed_field_payload)
        assert vitals is not None
        assert vitals.lcp.source == MetricSource.FIELD
        assert vitals.lcp.value == 2100
        assert vitals.fid is not None
        assert vitals.fid.rating == Rating.GOOD
        assert vitals.tbt is None

    def test_field_cls_rating(self, pagespeed_field_payload: dict[str, Any]):
        # Field CLS arrives multiplied by 100
        vitals = extract_core_web_vitals(pagespeed_field_payload)
        assert vitals is not None
        assert vitals.cls.value == pytest.approx(0.12)
        assert vitals.cls.rating == Rating.NEEDS_IMPROVEMENT

    def test_field_cls_already_unitless(self):
        payload = {
            "loadingExperience": {
                "metrics": {
                    "LARGEST_CONTENTFUL_PAINT_MS": {"percentile": 1800},
                    "CUMULATIVE_LAYOUT_SHIFT_SCORE": {"percentile": 0.12},
                }
            }
        }
        vitals = extract_core_web_vitals(payload)
        assert vitals is not None
        assert vitals.cls.rating == Rating.NEEDS_IMPROVEMENT
        assert vitals.fid is None

    def test_field_cls_integer_percentile_is_scaled(self):
        payload = {
            "loadingExperience": {
                "metrics": {
                    "LARGEST_CONTENTFUL_PAINT_MS": {"percentile": 1800},
                    "CUMULATIVE_LAYOUT_SHIFT_SCORE": {"percentile": 1},
                }
            }
        }
        vitals = extract_core_web_vitals(payload)
        assert vitals is not None
        assert vitals.cls.value == pytest.approx(0.01)
        assert vitals.cls.rating == Rating.GOOD

    def test_lab_rating_uses_unrounded_values(self):
        payload = {
            "lighthouseResult": {
                "audits": {
                    "largest-contentful-paint": {"numericValue": 2500.4},
                    "cumulative-layout-shift": {"numericValue": 0.1004},
                    "first-contentful-paint": {"numericValue": 1800.3},
                    "total-blocking-time": {"numericValue": 200.2},
                }
            }
        }
        vitals = extract_core_web_vitals(payload)
        assert vitals is not None
        assert vitals.lcp.value == 2500
        assert vitals.lcp.rating == Rating.NEEDS_IMPROVEMENT
        assert vitals.cls.value == 0.1
        assert vitals.cls.rating == Rating.NEEDS_IMPROVEMENT
        assert vitals.fcp.value == 1800
        assert vitals.fcp.rating == Rating.NEEDS_IMPROVEMENT
        assert vitals.tbt is not None
        assert vitals.tbt.value == 200
        assert vitals.tbt.rating == Rating.NEEDS_IMPROVEMENT

    def test_serializes_with_uppercase_keys(self, pagespeed_lab_payload: dict[str, Any]):
        vitals = extract_core_web_vitals(pagespeed_lab_payload)
        assert vitals is not None
        dumped = vitals.model_dump(by_alias=True, mode="json")
        assert set(dumped) == {"LCP", "FID", "CLS", "FCP", "TBT"}
        assert dumped["LCP"]["rating"] == "needs-improvement"


class TestLighthouseScores:
    def test_extract_scores(self, pagespeed_lab_payload: dict[str, Any]):
        scores = extract_lighthouse_scores(pagespeed_lab_payload)
        assert scores is not None
        assert scores.performance is not None
        assert scores.performance.score == 0.72
        dumped = scores.model_dump(by_alias=True)
        assert dumped["best-practices"]["score"] == 0.83

    def test_missing_lighthouse(self):
        assert extract_lighthouse_scores(None) is None
        assert extract_lighthouse_scores({"loadingExperience": {}}) is None

    def test_category_score(self, pagespeed_lab_payload: dict[str, Any]):
        assert category_score(pagespeed_lab_payload, "seo") == 0.91
        assert category_score(pagespeed_lab_payload, "pwa") is None
        assert category_score(None, "seo") is None


class TestFetchPagespeed:
    @pytest.mark.asyncio
    async def test_success_masks_key(self, pagespeed_lab_payload: dict[str, Any]):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=pagespeed_lab_payload)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            data, call = await fetch_pagespeed(
                "https://example.com", api_key="secret-key-123", client=client
            )

        assert data == pagespeed_lab_payload
        assert call.response == pagespeed_lab_payload

        sent = seen[0]
        assert str(sent.url).startswith(PSI_API_URL)
        assert sent.url.params.get_list("category") == [
            "performance",
            "accessibility",
            "best-practices",
            "seo",
        ]
        assert sent.url.params["strategy"] == "mobile"
        assert sent.url.params["key"] == "secret-key-123"

        assert "secret-key-123" not in call.request.url
        assert "key=%2A%2A%2A" in call.request.url or "key=***" in call.request.url
        assert "secret-key-123" not in call.request.to_curl()

    @pytest.mark.asyncio
    async def test_no_key_omits_param(self, pagespeed_lab_payload: dict[str, Any]):
        def handler(request: httpx.Request) -> httpx.Response:
            assert "key" not in request.url.params
            return httpx.Response(200, json=pagespeed_lab_payload)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            data, _ = await fetch_pagespeed("https://example.com", client=client)

        assert data is not None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            data, call = await fetch_pagespeed("https://example.com", client=client)

        assert data is None
        assert "timed out" in call.response["error"]

    @pytest.mark.asyncio
    async def test_api_error_body_returns_none(self):
        body = {"error": {"code": 429, "message": "Quota exceeded"}}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json=body)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            data, call = await fetch_pagespeed("https://example.com", client=client)

        assert data is None
        assert call.response == body

    @pytest.mark.asyncio
    async def test_non_json_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad gateway</html>")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            data, call = await fetch_pagespeed("https://example.com", client=client)

        assert data is None
        assert "error" in call.response
