"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends

from hostaudit.api.v1.deps import get_job_store, get_settings
from hostaudit.config.settings import Config
from hostaudit.services.jobs import JobStatus, JobStore

router = APIRouter()


@router.get("/health")
async def health_check(
    config: Config = Depends(get_settings),  # noqa: B008
    job_store: JobStore = Depends(get_job_store),  # noqa: B008
) -> dict[str, Any]:
    """
    Liveness plus a summary of which data sources are configured.

    Missing credentials never make the service unhealthy: audits still run
    with those sources reported as unavailable.
    """
    active = sum(
        1
        for job in job_store.jobs.values()
        if job.status in (JobStatus.PENDING, JobStatus.RUNNING)
    )
    return {
        "status": "healthy",
        "alive": True,
        "data_sources": {
            "pagespeed": {"api_key_configured": config.pagespeed_api_key is not None},
            "dataforseo": {"credentials_configured": config.has_dataforseo_credentials},
            "semrush": {"api_key_configured": config.semrush_api_key is not None},
        },
        "jobs": {"active": active, "max_per_ip": job_store.max_jobs_per_ip},
    }
