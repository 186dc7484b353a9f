"""Common schemas and enums shared across the application."""

from enum import Enum


class Rating(str, Enum):
    """Web-vitals rating bucket."""

    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


class MetricSource(str, Enum):
    """Where a web-vitals measurement came from."""

    FIELD = "field"  # Real-user (CrUX) data
    LAB = "lab"  # Synthetic Lighthouse run


class CheckStatus(str, Enum):
    """Outcome of a single recommendation check."""

    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"


class Impact(str, Enum):
    """Business impact of a recommendation."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SEOSource(str, Enum):
    """SEO intelligence provider a metrics snapshot came from."""

    DATAFORSEO = "dataforseo"
    SEMRUSH = "semrush"
    NONE = "none"
