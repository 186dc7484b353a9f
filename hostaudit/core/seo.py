"""SEO intelligence clients - DataForSEO (JSON) and SEMrush (delimited text)."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Mapping, Optional

import httpx

from hostaudit.config.settings import Config
from hostaudit.core.http import open_client
from hostaudit.core.semrush_csv import (
    BACKLINKS_COLUMNS,
    DOMAIN_RANKS_COLUMNS,
    ORGANIC_COLUMNS,
    REF_DOMAINS_COLUMNS,
    parse_semrush_response,
)
from hostaudit.core.trail import (
    QueryParams,
    build_request_info,
    build_url,
    error_payload,
    mask_secrets,
)
from hostaudit.errors.exceptions import APIError, ParseError, ProviderError, TransportError
from hostaudit.schemas.audit import ApiCall, SEMrushParsedData, SEOMetrics
from hostaudit.schemas.common import SEOSource

logger = logging.getLogger(__name__)

DATAFORSEO_URL = "https://api.dataforseo.com/v3/dataforseo_labs/google/domain_rank_overview/live"
DATAFORSEO_SUCCESS = 20000
DATAFORSEO_LOCATION_US = 2840

SEMRUSH_API_URL = "https://api.semrush.com/"
SEMRUSH_ANALYTICS_URL = "https://api.semrush.com/analytics/v1/"
SEMRUSH_DISPLAY_LIMIT = "20"

NO_CREDENTIALS = "No credentials configured"


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider: normalized metrics (or None) plus the trail."""

    metrics: Optional[SEOMetrics]
    call: ApiCall


@dataclass(frozen=True)
class SEOFetchResult:
    """Both provider snapshots side by side, plus the selected one."""

    primary: Optional[SEOMetrics]
    dataforseo: ProviderResult
    semrush: ProviderResult


def select_primary_metrics(
    dataforseo: Optional[SEOMetrics],
    semrush: Optional[SEOMetrics],
) -> Optional[SEOMetrics]:
    """DataForSEO wins when it produced data; SEMrush is the fallback."""
    return dataforseo if dataforseo is not None else semrush


def _number(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def calculate_authority_score(organic: Mapping[str, Any]) -> int:
    """
    Synthesize a 0-100 authority proxy from DataForSEO organic stats.

    Half keyword-position quality (top-1 keywords weigh 3, positions 2-3 weigh
    2, positions 4-10 weigh 1, relative to all ranking keywords), half traffic
    (log-scaled estimated traffic value).
    """
    count = _number(organic, "count")
    if not count:
        return 0

    top_keywords = (
        _number(organic, "pos_1") * 3
        + _number(organic, "pos_2_3") * 2
        + _number(organic, "pos_4_10")
    )
    position_score = min(100.0, (top_keywords / count) * 100 * 5)

    etv = _number(organic, "etv") or 1.0
    traffic_score = min(100.0, math.log10(etv + 1) * 15)

    return round((position_score + traffic_score) / 2)


# === DataForSEO ===


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def _dataforseo_item(data: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """tasks[0].result[0].items[0], or None when any level is missing."""
    task = _first(data.get("tasks"))
    result = _first(task.get("result")) if isinstance(task, dict) else None
    item = _first(result.get("items")) if isinstance(result, dict) else None
    return item if isinstance(item, dict) else None


def _dataforseo_metrics(item: Mapping[str, Any]) -> SEOMetrics:
    metrics = item.get("metrics")
    organic = metrics.get("organic") if isinstance(metrics, dict) else None
    if not isinstance(organic, dict):
        organic = {}

    return SEOMetrics(
        organic_keywords=int(_number(organic, "count")),
        organic_traffic=round(_number(organic, "etv")),
        backlinks=0,  # needs the separate backlinks API
        domain_rank=int(_number(organic, "pos_1")),
        authority_score=calculate_authority_score(organic),
        source=SEOSource.DATAFORSEO,
    )


async def fetch_dataforseo(
    domain: str,
    login: Optional[str],
    password: Optional[str],
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> ProviderResult:
    """
    Query DataForSEO Labs domain rank overview for ``domain``.

    Missing credentials are not an error: the result is simply empty.
    """
    body = json.dumps(
        [{"target": domain, "location_code": DATAFORSEO_LOCATION_US, "language_code": "en"}]
    )
    request_info = build_request_info(
        "POST",
        DATAFORSEO_URL,
        headers={
            "Authorization": "Basic ***"
            if login and password
            else "Basic <DATAFORSEO_LOGIN:DATAFORSEO_PASSWORD>",
            "Content-Type": "application/json",
        },
        body=body,
    )

    if not login or not password:
        logger.info("[DataForSEO] No credentials found")
        return ProviderResult(None, ApiCall(request=request_info, response=error_payload(NO_CREDENTIALS)))

    logger.info(f"[DataForSEO] Fetching domain rank for: {domain}")

    try:
        async with open_client(client, timeout) as http:
            try:
                response = await http.post(
                    DATAFORSEO_URL,
                    content=body,
                    headers={"Content-Type": "application/json"},
                    auth=httpx.BasicAuth(login, password),
                    timeout=timeout,
                )
            except httpx.HTTPError as e:
                raise TransportError(f"DataForSEO request failed: {e!r}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"DataForSEO returned non-JSON body (status {response.status_code})") from e
        if not isinstance(data, dict):
            raise ParseError(f"DataForSEO returned unexpected JSON (status {response.status_code})")

        item = _dataforseo_item(data)
        if data.get("status_code") != DATAFORSEO_SUCCESS or item is None:
            raise ProviderError(
                f"DataForSEO domain rank error: {data.get('status_message') or 'No data'}",
                response.status_code,
                data,
            )
    except ProviderError as e:
        logger.warning(f"[DataForSEO] {e}")
        response_body = e.body if e.body is not None else error_payload(e)
        return ProviderResult(None, ApiCall(request=request_info, response=response_body))
    except (APIError, ParseError) as e:
        logger.warning(f"[DataForSEO] Fetch failed: {e}")
        return ProviderResult(None, ApiCall(request=request_info, response=error_payload(e)))

    metrics = _dataforseo_metrics(item)
    logger.info(
        f"[DataForSEO] Success, keywords: {metrics.organic_keywords} "
        f"traffic: {metrics.organic_traffic}"
    )
    return ProviderResult(metrics, ApiCall(request=request_info, response=data))


# === SEMrush ===


def _semrush_endpoints(domain: str, api_key: str) -> dict[str, tuple[str, QueryParams]]:
    """The four SEMrush reports, keyed by their slot in the raw response."""
    return {
        "domainRanks": (
            SEMRUSH_API_URL,
            [
                ("type", "domain_ranks"),
                ("key", api_key),
                ("export_columns", DOMAIN_RANKS_COLUMNS),
                ("domain", domain),
                ("database", "us"),
            ],
        ),
        "backlinks": (
            SEMRUSH_ANALYTICS_URL,
            [
                ("type", "backlinks_overview"),
                ("key", api_key),
                ("target", domain),
                ("target_type", "root_domain"),
                ("export_columns", BACKLINKS_COLUMNS),
            ],
        ),
        "organicKeywords": (
            SEMRUSH_API_URL,
            [
                ("type", "domain_organic"),
                ("key", api_key),
                ("domain", domain),
                ("database", "us"),
                ("display_limit", SEMRUSH_DISPLAY_LIMIT),
                ("display_sort", "tr_desc"),
                ("export_columns", ORGANIC_COLUMNS),
            ],
        ),
        "refDomains": (
            SEMRUSH_ANALYTICS_URL,
            [
                ("type", "backlinks_refdomains"),
                ("key", api_key),
                ("target", domain),
                ("target_type", "root_domain"),
                ("display_limit", SEMRUSH_DISPLAY_LIMIT),
                ("display_sort", "backlinks_num"),
                ("export_columns", REF_DOMAINS_COLUMNS),
            ],
        ),
    }


async def _fetch_text(
    http: httpx.AsyncClient,
    url: str,
    params: QueryParams,
    timeout: float,
) -> httpx.Response:
    try:
        return await http.get(url, params=list(params), timeout=timeout)
    except httpx.HTTPError as e:
        raise TransportError(f"SEMrush request failed: {e!r}") from e


def _semrush_metrics(parsed: SEMrushParsedData) -> SEOMetrics:
    ranks = parsed.domain_ranks
    backlinks = parsed.backlinks
    return SEOMetrics(
        organic_keywords=ranks.organic_keywords if ranks else 0,
        organic_traffic=ranks.organic_traffic if ranks else 0,
        domain_rank=ranks.rank if ranks else 0,
        backlinks=backlinks.total_backlinks if backlinks else None,
        authority_score=backlinks.authority_score if backlinks else None,
        source=SEOSource.SEMRUSH,
    )


async def fetch_semrush(
    domain: str,
    api_key: Optional[str],
    timeout: float = 15.0,
    client: httpx.AsyncClient | None = None,
) -> ProviderResult:
    """
    Query the four SEMrush reports for ``domain`` in parallel.

    The provider counts as unavailable only when the domain-ranks report
    fails; a failed secondary report leaves its slot empty.
    """
    if not api_key:
        placeholder = build_url(
            SEMRUSH_API_URL,
            [("type", "domain_ranks"), ("key", "<SEMRUSH_API_KEY>"), ("domain", domain)],
        )
        return ProviderResult(
            None,
            ApiCall(
                request=build_request_info("GET", placeholder),
                response=error_payload("No API key configured"),
            ),
        )

    endpoints = _semrush_endpoints(domain, api_key)
    ranks_url, ranks_params = endpoints["domainRanks"]
    request_info = build_request_info("GET", ranks_url, params=ranks_params, secrets=[api_key])
    logger.info(f"[SEMrush] Fetching comprehensive data for: {domain}")

    async with open_client(client, timeout) as http:
        results = await asyncio.gather(
            *(_fetch_text(http, url, params, timeout) for url, params in endpoints.values()),
            return_exceptions=True,
        )

    responses = dict(zip(endpoints.keys(), results))
    ranks_response = responses["domainRanks"]

    if isinstance(ranks_response, BaseException):
        logger.warning(f"[SEMrush] Fetch failed: {ranks_response}")
        return ProviderResult(None, ApiCall(request=request_info, response=error_payload(ranks_response)))

    texts: dict[str, Optional[str]] = {}
    for slot, result in responses.items():
        if isinstance(result, BaseException):
            logger.warning(f"[SEMrush] {slot} unavailable: {result}")
            texts[slot] = None
        elif slot != "domainRanks" and not result.is_success:
            logger.warning(f"[SEMrush] {slot} unavailable (status {result.status_code})")
            texts[slot] = None
        else:
            texts[slot] = result.text

    raw_response: dict[str, Any] = {
        "statusCode": ranks_response.status_code,
        **texts,
        "fetchedAt": datetime.now(UTC).isoformat(),
        "urls": {
            slot: mask_secrets(build_url(url, params), [api_key])
            for slot, (url, params) in endpoints.items()
        },
    }

    ranks_text = texts["domainRanks"] or ""
    if not ranks_response.is_success or ranks_text.startswith("ERROR"):
        logger.warning(
            f"[SEMrush] domain_ranks unavailable (status {ranks_response.status_code}): "
            f"{ranks_text.strip()[:120]}"
        )
        return ProviderResult(None, ApiCall(request=request_info, response=raw_response))

    parsed = parse_semrush_response(raw_response)
    metrics = _semrush_metrics(parsed)

    logger.info(
        f"[SEMrush] Success - Keywords: {metrics.organic_keywords} Traffic: {metrics.organic_traffic} "
        f"Authority: {metrics.authority_score} Backlinks: {metrics.backlinks} "
        f"TopKWs: {len(parsed.top_keywords)} RefDomains: {len(parsed.ref_domains)}"
    )
    return ProviderResult(
        metrics,
        ApiCall(request=request_info, response=raw_response, parsed=parsed),
    )


# === Combined ===


async def fetch_seo_metrics(
    domain: str,
    config: Config,
    client: httpx.AsyncClient | None = None,
) -> SEOFetchResult:
    """
    Query both providers concurrently, whatever credentials are configured.

    Both snapshots are kept; the primary one follows select_primary_metrics.
    """
    dataforseo, semrush = await asyncio.gather(
        fetch_dataforseo(
            domain,
            config.dataforseo_login,
            config.dataforseo_password,
            timeout=config.dataforseo_timeout,
            client=client,
        ),
        fetch_semrush(domain, config.semrush_api_key, timeout=config.semrush_timeout, client=client),
    )

    return SEOFetchResult(
        primary=select_primary_metrics(dataforseo.metrics, semrush.metrics),
        dataforseo=dataforseo,
        semrush=semrush,
    )
