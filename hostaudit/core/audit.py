"""Main audit orchestration - fetch, measure, analyze, score."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

import httpx

from hostaudit.config.settings import Config, get_config
from hostaudit.core.booking_flow import BookingFlowAnalysis, analyze_booking_flow
from hostaudit.core.content import analyze_page
from hostaudit.core.http import USER_AGENT
from hostaudit.core.page import fetch_page
from hostaudit.core.psi import extract_core_web_vitals, extract_lighthouse_scores, fetch_pagespeed
from hostaudit.core.recommendations import compile_recommendations
from hostaudit.core.revenue import estimate_revenue_loss
from hostaudit.core.scoring import calculate_scores, generate_summary, projected_score
from hostaudit.core.seo import fetch_seo_metrics
from hostaudit.core.trail import build_request_info
from hostaudit.core.trust_signals import TrustSignalAnalysis, analyze_trust_signals
from hostaudit.schemas.audit import (
    AuditMeta,
    AuditResult,
    DataSourcesUsed,
    HtmlFetchCall,
    HtmlFetchResponse,
    RawApiData,
    RawPageFetch,
)
from hostaudit.services.validators import extract_domain, validate_url

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]
BookingAnalyzer = Callable[[str], BookingFlowAnalysis]
TrustAnalyzer = Callable[[str], TrustSignalAnalysis]

PAGESPEED_UNAVAILABLE_NOTE = "PageSpeed API unavailable - add PAGESPEED_API_KEY for Lighthouse data"

# Progress milestones (percent, label)
STEP_FETCH = (20, "Fetching website content...")
STEP_EXTERNAL = (40, "Analyzing performance metrics...")
STEP_CONTENT = (50, "Scanning for conversion elements...")
STEP_BOOKING = (60, "Analyzing booking flow...")
STEP_TRUST = (70, "Analyzing trust signals...")
STEP_SCORES = (85, "Calculating scores...")
STEP_RECOMMENDATIONS = (90, "Generating recommendations...")
STEP_COMPLETE = (100, "Complete")


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _html_fetch_call(page: RawPageFetch) -> HtmlFetchCall:
    return HtmlFetchCall(
        request=build_request_info("GET", page.url, headers={"User-Agent": USER_AGENT}),
        response=HtmlFetchResponse(
            status_code=page.status_code,
            content_length=page.content_length,
            headers=page.headers,
            load_time_ms=page.load_time_ms,
            fetched_at=_now_iso(),
            error=page.error,
        ),
    )


async def run_audit_async(
    url: str,
    domain: str | None = None,
    on_progress: ProgressCallback | None = None,
    config: Config | None = None,
    client: httpx.AsyncClient | None = None,
    booking_analyzer: BookingAnalyzer = analyze_booking_flow,
    trust_analyzer: TrustAnalyzer = analyze_trust_signals,
) -> AuditResult:
    """
    Run a complete site audit.

    External sources (PageSpeed, DataForSEO, SEMrush, even the page itself)
    may all be unavailable; each failure is recorded in the audit trail and
    the notes, and the run still produces a scored result.

    Args:
        url: Page to audit (protocol optional)
        domain: Domain for SEO lookups; derived from ``url`` when omitted
        on_progress: Called with (percent, step label) at fixed milestones
        config: Credentials and timeouts; defaults to the environment config
        client: Optional shared httpx client (tests inject a mock transport)
        booking_analyzer: Booking-flow analyzer run over the fetched HTML
        trust_analyzer: Trust-signal analyzer run over the fetched HTML

    Raises:
        ValidationError: If ``url`` (or ``domain``) is malformed
    """
    url = validate_url(url)
    domain = extract_domain(domain or url)
    config = config or get_config()

    def report(step: tuple[int, str]) -> None:
        if on_progress:
            on_progress(*step)

    start = time.monotonic()
    notes: list[str] = []

    # Page first: everything downstream reads its HTML
    report(STEP_FETCH)
    page = await fetch_page(url, timeout=config.page_fetch_timeout, client=client)
    if page.error:
        notes.append(f"Page fetch failed: {page.error}")

    report(STEP_EXTERNAL)
    (pagespeed, pagespeed_call), seo = await asyncio.gather(
        fetch_pagespeed(
            url,
            api_key=config.pagespeed_api_key,
            timeout=config.pagespeed_timeout,
            client=client,
        ),
        fetch_seo_metrics(domain, config, client=client),
    )

    report(STEP_CONTENT)
    analysis = analyze_page(page, domain)

    report(STEP_BOOKING)
    booking = booking_analyzer(page.html)

    report(STEP_TRUST)
    trust = trust_analyzer(page.html)

    report(STEP_SCORES)
    scores = calculate_scores(analysis, pagespeed, seo.primary, booking, trust)

    report(STEP_RECOMMENDATIONS)
    recommendations = compile_recommendations(analysis, booking, trust, pagespeed, seo.primary)

    core_web_vitals = extract_core_web_vitals(pagespeed)
    has_lighthouse = bool(pagespeed and pagespeed.get("lighthouseResult"))
    if not has_lighthouse:
        notes.append(PAGESPEED_UNAVAILABLE_NOTE)
    if seo.primary is not None:
        notes.append(f"SEO data from {seo.primary.source.value}")

    result = AuditResult(
        domain=domain,
        timestamp=_now_iso(),
        overall_score=scores.overall,
        projected_score=projected_score(scores.overall),
        monthly_revenue_loss=estimate_revenue_loss(scores.overall, seo.primary),
        summary=generate_summary(scores.overall),
        categories=scores.categories,
        recommendations=recommendations,
        core_web_vitals=core_web_vitals,
        lighthouse_scores=extract_lighthouse_scores(pagespeed),
        seo_metrics=seo.primary,
        data_for_seo_metrics=seo.dataforseo.metrics,
        semrush_metrics=seo.semrush.metrics,
        booking_flow=booking.to_summary(),
        trust_signals=trust.to_summary(),
        meta=AuditMeta(
            fetch_time_ms=int((time.monotonic() - start) * 1000),
            url=url,
            data_sources_used=DataSourcesUsed(
                page_speed=has_lighthouse,
                core_web_vitals=core_web_vitals is not None,
                seo_data=seo.primary is not None,
            ),
            notes=notes,
        ),
        raw_api_data=RawApiData(
            page_speed=pagespeed_call,
            data_for_seo=seo.dataforseo.call,
            semrush=seo.semrush.call,
            html_fetch=_html_fetch_call(page),
        ),
    )

    report(STEP_COMPLETE)
    logger.info(f"Audit complete for {domain}: overall={result.overall_score}")
    return result


def run_audit(
    url: str,
    domain: str | None = None,
    on_progress: ProgressCallback | None = None,
    config: Config | None = None,
) -> AuditResult:
    """Synchronous wrapper around run_audit_async."""
    return asyncio.run(run_audit_async(url, domain=domain, on_progress=on_progress, config=config))
