from datetime import datetime
from typing import Any

from pydantic import BaseModel

from hostaudit.services.jobs import JobStatus


class JobProgress(BaseModel):
    percent: int = 0
    current_step: str | None = None


class JobCreateResponse(BaseModel):
    job_id: str
    status: JobStatus
    message: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: JobStatus
    url: str
    domain: str | None = None
    progress: JobProgress
    result: dict[str, Any] | None = None  # AuditResult JSON when complete
    error: str | None = None
    created_at: datetime
