"""PageSpeed Insights client - Lighthouse categories and Core Web Vitals."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, cast

import httpx
from pydantic import ValidationError as PydanticValidationError

from hostaudit.core.http import open_client
from hostaudit.core.trail import build_request_info, error_payload
from hostaudit.errors.exceptions import APIError, ParseError, ProviderError, TransportError
from hostaudit.schemas.audit import ApiCall, CoreWebVitals, LighthouseScores, WebVital
from hostaudit.schemas.common import MetricSource, Rating

logger = logging.getLogger(__name__)

PSI_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

PSI_CATEGORIES = ("performance", "accessibility", "best-practices", "seo")


# === Rating Functions ===


def _rate(value: float, good: float, needs_improvement: float) -> Rating:
    if value <= good:
        return Rating.GOOD
    if value <= needs_improvement:
        return Rating.NEEDS_IMPROVEMENT
    return Rating.POOR


def _rate_lcp(lcp_ms: float) -> Rating:
    return _rate(lcp_ms, 2500, 4000)


def _rate_fid(fid_ms: float) -> Rating:
    return _rate(fid_ms, 100, 300)


def _rate_cls(cls: float) -> Rating:
    return _rate(cls, 0.1, 0.25)


def _rate_fcp(fcp_ms: float) -> Rating:
    return _rate(fcp_ms, 1800, 3000)


def _rate_tbt(tbt_ms: float) -> Rating:
    return _rate(tbt_ms, 200, 600)


# === Type-safe helpers ===


def _safe_float(value: Any) -> Optional[float]:
    """Safely convert value to float or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a dict, else an empty one."""
    if isinstance(value, dict):
        return cast(Dict[str, Any], value)
    return {}


# === Field (CrUX) parsing ===


def _field_value(metrics: Dict[str, Any], key: str) -> Optional[float]:
    return _safe_float(_as_dict(metrics.get(key)).get("percentile"))


def _field_cls(metrics: Dict[str, Any]) -> float:
    # CrUX reports the CLS percentile as an integer scaled by 100
    raw = _as_dict(metrics.get("CUMULATIVE_LAYOUT_SHIFT_SCORE")).get("percentile")
    value = _safe_float(raw) or 0.0
    if isinstance(raw, int) and not isinstance(raw, bool):
        return value / 100
    return value


def _field_vital(value: float, rate_func: Callable[[float], Rating]) -> WebVital:
    return WebVital(value=value, rating=rate_func(value), source=MetricSource.FIELD)


def _extract_field_vitals(metrics: Dict[str, Any]) -> Optional[CoreWebVitals]:
    lcp = _field_value(metrics, "LARGEST_CONTENTFUL_PAINT_MS")
    if lcp is None:
        return None

    fid = _field_value(metrics, "FIRST_INPUT_DELAY_MS")
    fcp = _field_value(metrics, "FIRST_CONTENTFUL_PAINT_MS") or 0.0

    return CoreWebVitals(
        lcp=_field_vital(lcp, _rate_lcp),
        fid=_field_vital(fid, _rate_fid) if fid is not None else None,
        cls=_field_vital(_field_cls(metrics), _rate_cls),
        fcp=_field_vital(fcp, _rate_fcp),
        tbt=None,
    )


# === Lab (Lighthouse) parsing ===


def _get_audit_value(audits: Dict[str, Any], audit_id: str) -> float:
    """Extract a numeric value from Lighthouse audits (0 when missing)."""
    return _safe_float(_as_dict(audits.get(audit_id)).get("numericValue")) or 0.0


def _lab_vital(value: float, rate_func: Callable[[float], Rating], digits: int = 0) -> WebVital:
    # rating uses the unrounded reading
    shown = round(value, digits) if digits else round(value)
    return WebVital(value=shown, rating=rate_func(value), source=MetricSource.LAB)


def _extract_lab_vitals(audits: Dict[str, Any]) -> CoreWebVitals:
    lcp = _get_audit_value(audits, "largest-contentful-paint")
    cls = _get_audit_value(audits, "cumulative-layout-shift")
    fcp = _get_audit_value(audits, "first-contentful-paint")
    tbt = _get_audit_value(audits, "total-blocking-time")

    return CoreWebVitals(
        lcp=_lab_vital(lcp, _rate_lcp),
        fid=None,  # no lab equivalent
        cls=_lab_vital(cls, _rate_cls, digits=3),
        fcp=_lab_vital(fcp, _rate_fcp),
        tbt=_lab_vital(tbt, _rate_tbt),
    )


def extract_core_web_vitals(data: Optional[Dict[str, Any]]) -> Optional[CoreWebVitals]:
    """
    Normalize Core Web Vitals from a PageSpeed response.

    Real-user field data wins whenever the payload carries an LCP percentile;
    otherwise the synthetic Lighthouse audits from the same payload are used.
    Returns None when neither is present.
    """
    if not data:
        return None

    metrics = _as_dict(_as_dict(data.get("loadingExperience")).get("metrics"))
    field = _extract_field_vitals(metrics)
    if field is not None:
        return field

    audits = _as_dict(data.get("lighthouseResult")).get("audits")
    if isinstance(audits, dict):
        return _extract_lab_vitals(cast(Dict[str, Any], audits))

    return None


def extract_lighthouse_scores(data: Optional[Dict[str, Any]]) -> Optional[LighthouseScores]:
    """Lighthouse category block, or None when absent or malformed."""
    if not data:
        return None
    categories = _as_dict(data.get("lighthouseResult")).get("categories")
    if not isinstance(categories, dict):
        return None
    try:
        return LighthouseScores.model_validate(categories)
    except PydanticValidationError as e:
        logger.warning(f"[PageSpeed] Unexpected categories shape: {e}")
        return None


def category_score(data: Optional[Dict[str, Any]], category: str) -> Optional[float]:
    """Raw 0-1 Lighthouse score for ``category`` if present."""
    if not data:
        return None
    categories = _as_dict(_as_dict(data.get("lighthouseResult")).get("categories"))
    return _safe_float(_as_dict(categories.get(category)).get("score"))


# === API client ===


def _build_params(url: str, api_key: Optional[str]) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = [("url", url), ("strategy", "mobile")]
    params.extend(("category", category) for category in PSI_CATEGORIES)
    if api_key:
        params.append(("key", api_key))
    return params


async def _request_pagespeed(
    http: httpx.AsyncClient,
    params: list[tuple[str, str]],
    timeout: float,
) -> Dict[str, Any]:
    """
    Perform the request and return the decoded body.

    Raises TransportError, ProviderError or ParseError.
    """
    try:
        response = await http.get(
            PSI_API_URL,
            params=params,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except httpx.TimeoutException as e:
        raise TransportError(f"PageSpeed API request timed out: {e!r}") from e
    except httpx.HTTPError as e:
        raise TransportError(f"Failed to connect to PageSpeed API: {e!r}") from e

    try:
        body = response.json()
    except ValueError as e:
        raise ParseError(f"PageSpeed returned non-JSON body (status {response.status_code})") from e

    if not isinstance(body, dict):
        raise ParseError(f"PageSpeed returned unexpected JSON (status {response.status_code})")
    data = cast(Dict[str, Any], body)

    if data.get("error"):
        message = _as_dict(data["error"]).get("message", data["error"])
        raise ProviderError(f"PageSpeed API error: {message}", response.status_code, data)

    if not response.is_success:
        raise ProviderError(
            f"PageSpeed API returned error status {response.status_code}",
            response.status_code,
            data,
        )

    return data


async def fetch_pagespeed(
    url: str,
    api_key: Optional[str] = None,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> tuple[Optional[Dict[str, Any]], ApiCall]:
    """
    Query PageSpeed Insights (mobile, four categories) for ``url``.

    Returns ``(data, call)`` where data is None on any transport failure,
    non-success status or API-reported error. ``call`` is always populated
    for the audit trail, with the API key masked.
    """
    params = _build_params(url, api_key)
    request_info = build_request_info(
        "GET",
        PSI_API_URL,
        params=params,
        headers={"Accept": "application/json"},
        secrets=[api_key],
    )
    logger.info(f"[PageSpeed] Fetching: {request_info.url}")

    try:
        async with open_client(client, timeout) as http:
            data = await _request_pagespeed(http, params, timeout)
    except ProviderError as e:
        logger.warning(f"[PageSpeed] {e}")
        response = e.body if e.body is not None else error_payload(e)
        return None, ApiCall(request=request_info, response=response)
    except (APIError, ParseError) as e:
        logger.warning(f"[PageSpeed] Fetch failed: {e}")
        return None, ApiCall(request=request_info, response=error_payload(e))

    logger.info(
        f"[PageSpeed] Success, performance score: {category_score(data, 'performance')}"
    )
    return data, ApiCall(request=request_info, response=data)
