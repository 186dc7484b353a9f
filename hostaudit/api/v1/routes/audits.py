"""Audit endpoints - create a background audit job and poll its status."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from hostaudit.api.v1.deps import get_job_store, get_settings
from hostaudit.config.settings import Config
from hostaudit.core.audit import run_audit_async
from hostaudit.errors.exceptions import ValidationError
from hostaudit.schemas.audit import AuditRequest
from hostaudit.schemas.job import JobCreateResponse, JobProgress, JobStatusResponse
from hostaudit.services.jobs import JobStatus, JobStore
from hostaudit.services.validators import extract_domain, validate_url

logger = logging.getLogger(__name__)

router = APIRouter()

# Strong references so running jobs are not garbage collected
_background_tasks: set[asyncio.Task[None]] = set()


async def run_audit_job(
    job_id: str,
    url: str,
    domain: str,
    job_store: JobStore,
    config: Config,
) -> None:
    """Background task: run the audit and record progress on the job."""

    def on_progress(percent: int, step: str) -> None:
        job_store.update_progress(job_id, percent, step)

    try:
        result = await run_audit_async(
            url=url,
            domain=domain,
            on_progress=on_progress,
            config=config,
        )
        job_store.complete_job(job_id, result.to_json_dict())
    except Exception as e:
        # Any escape from the pipeline is fatal for the job; clients may resubmit
        logger.exception(f"Audit job {job_id} failed: {e}")
        job_store.fail_job(job_id, str(e))


@router.post("/audit", response_model=JobCreateResponse)
async def create_audit(
    request: AuditRequest,
    req: Request,
    job_store: JobStore = Depends(get_job_store),  # noqa: B008
    config: Config = Depends(get_settings),  # noqa: B008
) -> JobCreateResponse:
    """
    Create an async audit job for the given URL.

    Returns job_id immediately, use GET /audit/{job_id} to check status.
    """
    job_store.cleanup_expired()

    try:
        validated_url = validate_url(request.url)
        domain = extract_domain(request.domain or validated_url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    client_ip = req.client.host if req.client else "unknown"
    job_id = job_store.create_job(validated_url, client_ip, domain=domain)
    if job_id is None:
        raise HTTPException(
            status_code=429,
            detail="Too many active jobs for this IP. Try again later.",
        )

    task = asyncio.create_task(
        run_audit_job(
            job_id=job_id,
            url=validated_url,
            domain=domain,
            job_store=job_store,
            config=config,
        )
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    return JobCreateResponse(
        job_id=job_id,
        status=JobStatus.PENDING,
        message="Audit job created. Poll GET /v1/audit/{job_id} for status.",
    )


@router.get("/audit/{job_id}", response_model=JobStatusResponse)
async def get_audit_status(
    job_id: str,
    job_store: JobStore = Depends(get_job_store),  # noqa: B008
) -> JobStatusResponse:
    """Return job status, progress and, once complete, the audit result JSON."""
    job = job_store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found or expired")

    return JobStatusResponse(
        job_id=job.id,
        status=job.status,
        url=job.url,
        domain=job.domain,
        progress=JobProgress(percent=job.progress, current_step=job.current_step),
        result=job.result,
        error=job.error,
        created_at=job.created_at,
    )
