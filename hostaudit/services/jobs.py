from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from hostaudit.services.websocket import websocket_manager

JOB_TTL = timedelta(hours=24)


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Job:
    id: str
    status: JobStatus
    url: str
    domain: str | None = None
    progress: int = 0
    current_step: str | None = None
    result: dict[str, Any] | None = None  # AuditResult JSON (camelCase)
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class JobStore:
    _instance: JobStore | None = None
    _lock = threading.Lock()

    def __init__(self, max_jobs_per_ip: int = 5) -> None:
        self.jobs: dict[str, Job] = {}
        self.ip_limits: dict[str, set[str]] = {}  # IP -> set of active job_ids
        self.max_jobs_per_ip = max_jobs_per_ip

    @classmethod
    def get_instance(cls) -> JobStore:
        with cls._lock:
            if cls._instance is None:
                from hostaudit.config.settings import get_config

                cls._instance = cls(max_jobs_per_ip=get_config().max_jobs_per_ip)
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton (useful for testing)."""
        with cls._lock:
            cls._instance = None

    def _release_ip(self, job_id: str) -> None:
        for ip_jobs in self.ip_limits.values():
            ip_jobs.discard(job_id)
        self.ip_limits = {ip: jobs for ip, jobs in self.ip_limits.items() if jobs}

    def create_job(self, url: str, client_ip: str, domain: str | None = None) -> str | None:
        with self._lock:
            active_jobs = self.ip_limits.get(client_ip, set())
            if len(active_jobs) >= self.max_jobs_per_ip:
                return None

            job_id = str(uuid.uuid4())
            self.jobs[job_id] = Job(id=job_id, status=JobStatus.PENDING, url=url, domain=domain)
            self.ip_limits.setdefault(client_ip, set()).add(job_id)
            return job_id

    def get_job(self, job_id: str) -> Job | None:
        with self._lock:
            return self.jobs.get(job_id)

    def update_progress(self, job_id: str, progress: int, step: str) -> None:
        """Record a progress milestone. Progress never moves backwards."""
        with self._lock:
            if job := self.jobs.get(job_id):
                job.status = JobStatus.RUNNING
                job.progress = max(job.progress, progress)
                job.current_step = step
                websocket_manager.enqueue_broadcast(job_id, step, job.progress, job.status.value)

    def complete_job(self, job_id: str, result: dict[str, Any]) -> None:
        with self._lock:
            if job := self.jobs.get(job_id):
                job.status = JobStatus.COMPLETED
                job.result = result
                job.progress = 100
                job.current_step = None
                websocket_manager.enqueue_broadcast(job_id, "", 100, job.status.value)
                self._release_ip(job_id)

    def fail_job(self, job_id: str, error: str) -> None:
        with self._lock:
            if job := self.jobs.get(job_id):
                job.status = JobStatus.FAILED
                job.error = error
                job.current_step = None
                websocket_manager.enqueue_broadcast(job_id, "", job.progress, job.status.value)
                self._release_ip(job_id)

    def cleanup_expired(self) -> None:
        with self._lock:
            expiry_time = datetime.now(UTC) - JOB_TTL
            expired_ids = [
                job_id for job_id, job in self.jobs.items() if job.created_at < expiry_time
            ]
            for job_id in expired_ids:
                del self.jobs[job_id]
                self._release_ip(job_id)
