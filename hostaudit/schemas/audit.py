"""Audit-related Pydantic schemas.

Field aliases are the JSON contract consumed by storage and export
collaborators; always dump with ``by_alias=True``.
"""

import shlex
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from hostaudit.schemas.common import CheckStatus, Impact, MetricSource, Rating, SEOSource


class CamelModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# === Page Fetch ===


class RawPageFetch(BaseModel):
    """Result of the single GET of the target page."""

    model_config = ConfigDict(frozen=True)

    url: str
    html: str = ""
    status_code: int = 0
    headers: dict[str, str] = Field(default_factory=dict)
    load_time_ms: int = 0
    error: str | None = None
    body_bytes: int | None = None

    @property
    def content_length(self) -> int:
        """Body size in bytes as received, or the UTF-8 size of ``html`` when unknown."""
        if self.body_bytes is not None:
            return self.body_bytes
        return len(self.html.encode("utf-8"))


# === Web Vitals ===


class WebVital(BaseModel):
    """A single Core Web Vitals measurement."""

    model_config = ConfigDict(frozen=True)

    value: float
    rating: Rating
    source: MetricSource


class CoreWebVitals(BaseModel):
    """Core Web Vitals, from field data when available, else lab data."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    lcp: WebVital = Field(alias="LCP")
    fid: WebVital | None = Field(default=None, alias="FID")
    cls: WebVital = Field(alias="CLS")
    fcp: WebVital = Field(alias="FCP")
    tbt: WebVital | None = Field(default=None, alias="TBT")


class LighthouseCategory(BaseModel):
    """Lighthouse category block (score on a 0-1 scale)."""

    model_config = ConfigDict(frozen=True)

    score: float | None = None


class LighthouseScores(BaseModel):
    """Lighthouse category scores as returned by PageSpeed Insights."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    performance: LighthouseCategory | None = None
    accessibility: LighthouseCategory | None = None
    best_practices: LighthouseCategory | None = Field(default=None, alias="best-practices")
    seo: LighthouseCategory | None = None


# === SEO Models ===


class SEOMetrics(BaseModel):
    """Normalized snapshot from one SEO intelligence provider."""

    model_config = ConfigDict(frozen=True)

    organic_traffic: int = 0
    organic_keywords: int = 0
    backlinks: int | None = 0
    domain_rank: int = 0
    authority_score: int | None = 0
    source: SEOSource = SEOSource.NONE


class SEMrushDomainRanks(CamelModel):
    rank: int
    organic_keywords: int
    organic_traffic: int
    organic_cost: float
    adwords_keywords: int
    adwords_traffic: int
    adwords_cost: float


class SEMrushBacklinks(CamelModel):
    authority_score: int
    total_backlinks: int
    referring_domains: int
    referring_urls: int
    referring_ips: int
    follow_links: int
    nofollow_links: int


class SEMrushKeyword(CamelModel):
    keyword: str
    position: int
    previous_position: int | None = None
    search_volume: int
    cpc: float
    traffic_percent: float
    traffic_cost: float
    url: str = ""


class SEMrushRefDomain(CamelModel):
    domain: str
    backlinks_count: int
    first_seen: str
    last_seen: str


class SEMrushParsedData(CamelModel):
    """Structured view of the four SEMrush text payloads."""

    domain_ranks: SEMrushDomainRanks | None = None
    backlinks: SEMrushBacklinks | None = None
    top_keywords: list[SEMrushKeyword] = Field(default_factory=list)
    ref_domains: list[SEMrushRefDomain] = Field(default_factory=list)


# === Scoring Models ===


class CategoryScore(BaseModel):
    """Weighted score for one audit category."""

    model_config = ConfigDict(frozen=True)

    name: str
    score: int
    weight: int
    description: str
    source: str | None = None


class Recommendation(BaseModel):
    """A single human-readable finding."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    status: CheckStatus
    impact: Impact
    category: str


# === Audit Trail ===


class RequestInfo(BaseModel):
    """Outgoing HTTP request as recorded for the audit trail.

    Secrets are masked before a RequestInfo is built, so ``curl`` is safe to
    store and display.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def curl(self) -> str:
        return self.to_curl()

    def to_curl(self) -> str:
        """Render the request as a copy-pasteable curl command."""
        parts = ["curl", "-X", self.method, shlex.quote(self.url)]
        for name, value in self.headers.items():
            parts.extend(["-H", shlex.quote(f"{name}: {value}")])
        if self.body is not None:
            parts.extend(["--data", shlex.quote(self.body)])
        return " ".join(parts)


class ApiCall(BaseModel):
    """One external call: what was sent and what came back (or the error)."""

    model_config = ConfigDict(frozen=True)

    request: RequestInfo
    response: Any = None
    parsed: SEMrushParsedData | None = None


class HtmlFetchResponse(CamelModel):
    status_code: int
    content_length: int
    headers: dict[str, str] = Field(default_factory=dict)
    load_time_ms: int
    fetched_at: str
    error: str | None = None


class HtmlFetchCall(BaseModel):
    model_config = ConfigDict(frozen=True)

    request: RequestInfo
    response: HtmlFetchResponse


class RawApiData(BaseModel):
    """Raw per-source snapshots kept for debugging and transparency."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    page_speed: ApiCall | None = Field(default=None, alias="pageSpeed")
    data_for_seo: ApiCall | None = Field(default=None, alias="dataForSEO")
    semrush: ApiCall | None = None
    html_fetch: HtmlFetchCall | None = Field(default=None, alias="htmlFetch")


# === Domain Analyzer Summaries ===


class BookingEngineData(CamelModel):
    name: str
    type: str
    confidence: float


class BookingFlowData(CamelModel):
    has_booking_cta: bool = Field(alias="hasBookingCTA")
    cta_text: str | None = None
    cta_location: str
    booking_engine: BookingEngineData | None = None
    has_date_picker: bool
    has_instant_book: bool
    estimated_clicks_to_book: int
    friction_score: int


class ReviewSourceData(CamelModel):
    name: str
    type: str
    is_verified: bool


class TrustBadgeData(CamelModel):
    name: str
    category: str


class SocialProfileData(CamelModel):
    platform: str
    detected: bool


class TrustSignalsData(CamelModel):
    overall_trust_score: int
    has_reviews: bool
    review_source: ReviewSourceData | None = None
    review_count: int | None = None
    average_rating: float | None = None
    trust_badges: list[TrustBadgeData] = Field(default_factory=list)
    has_phone_number: bool
    has_email_address: bool
    has_physical_address: bool
    has_social_profiles: list[SocialProfileData] = Field(default_factory=list)
    has_privacy_policy: bool


# === Main Result ===


class DataSourcesUsed(CamelModel):
    html_analysis: bool = True
    page_speed: bool = False
    core_web_vitals: bool = False
    seo_data: bool = False
    booking_flow_analysis: bool = True
    trust_signal_analysis: bool = True


class AuditMeta(CamelModel):
    fetch_time_ms: int
    url: str
    data_sources_used: DataSourcesUsed
    notes: list[str] = Field(default_factory=list)


class AuditResult(CamelModel):
    """The aggregate root produced once per audit run."""

    domain: str
    timestamp: str
    overall_score: int
    projected_score: int
    monthly_revenue_loss: int
    summary: str
    categories: list[CategoryScore]
    recommendations: list[Recommendation]
    competitors: list[dict[str, Any]] = Field(default_factory=list)
    core_web_vitals: CoreWebVitals | None = None
    lighthouse_scores: LighthouseScores | None = None
    seo_metrics: SEOMetrics | None = None
    data_for_seo_metrics: SEOMetrics | None = Field(default=None, alias="dataForSEOMetrics")
    semrush_metrics: SEOMetrics | None = None
    booking_flow: BookingFlowData | None = None
    trust_signals: TrustSignalsData | None = None
    meta: AuditMeta
    raw_api_data: RawApiData = Field(default_factory=RawApiData)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump using the external field names."""
        return self.model_dump(by_alias=True, mode="json")


# === Request Models ===


class AuditRequest(BaseModel):
    """Request model for audit endpoint."""

    url: str
    domain: str | None = None
