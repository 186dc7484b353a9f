"""Direct-booking website audits: HTML checks, web vitals, SEO data and scoring."""

__version__ = "0.1.0"

from hostaudit.core.audit import run_audit, run_audit_async  # noqa: E402
from hostaudit.schemas.audit import AuditResult  # noqa: E402
from hostaudit.services.validators import validate_url  # noqa: E402

__all__ = ["AuditResult", "run_audit", "run_audit_async", "validate_url", "__version__"]
