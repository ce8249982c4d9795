"""
Background translation jobs.

A job translates a list of texts in batches on an `asyncio.Task`, so an API
request can return a job ID immediately and clients poll for progress.

Lifecycle: PENDING -> IN_PROGRESS -> COMPLETED | FAILED

Cancellation is best-effort: the flag is checked between batches, so a batch
already sent to the backend finishes and its results are discarded.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from storeglot.backends.errors import BackendError
from storeglot.core.errors import JobNotFoundError, StoreglotError
from storeglot.core.models import TranslationStatus
from storeglot.core.utils import generate_id, utc_now
from storeglot.i18n.orchestrator import TranslationOrchestrator

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Cancelled by user"


class TranslationJob(BaseModel):
    """A batch of texts translated in the background."""

    id: str = Field(default_factory=lambda: generate_id("job"))
    texts: list[str]
    source_language: str | None = None
    target_language: str
    status: TranslationStatus = TranslationStatus.PENDING
    results: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    retry_count: int = 0
    cancelled: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def total(self) -> int:
        return len(self.texts)

    @property
    def completed(self) -> int:
        return len(self.results)

    @property
    def progress(self) -> float:
        """Percentage of texts translated."""
        return round(self.completed / self.total * 100, 1) if self.texts else 100.0

    @property
    def estimated_completion(self) -> datetime | None:
        """Linear estimate from the elapsed time per translated text."""
        if self.status != TranslationStatus.IN_PROGRESS or not self.started_at or not self.completed:
            return None
        elapsed = utc_now() - self.started_at
        per_text = elapsed / self.completed
        return utc_now() + per_text * (self.total - self.completed)


class JobStatus(BaseModel):
    """Polling view of a job."""

    id: str
    status: TranslationStatus
    progress: float
    completed: int
    total: int
    retry_count: int
    errors: list[str]
    estimated_completion: datetime | None = None

    @classmethod
    def of(cls, job: TranslationJob) -> JobStatus:
        return cls(
            id=job.id,
            status=job.status,
            progress=job.progress,
            completed=job.completed,
            total=job.total,
            retry_count=job.retry_count,
            errors=job.errors,
            estimated_completion=job.estimated_completion,
        )


class JobManager:
    """
    Runs translation jobs on the current event loop.

    Usage:
        jobs = JobManager(orchestrator)
        job = jobs.submit(["Free shipping", "In stock"], "en", "fr")
        ...
        jobs.status(job.id).progress
    """

    def __init__(self, orchestrator: TranslationOrchestrator, retention: timedelta | None = None):
        self.orchestrator = orchestrator
        self.retention = retention
        self._jobs: dict[str, TranslationJob] = {}
        self._tasks: dict[str, asyncio.Task] = {}

    def submit(
        self,
        texts: list[str],
        source_language: str | None,
        target_language: str,
    ) -> TranslationJob:
        """Create a job and start it in the background."""
        self._prune()
        job = TranslationJob(
            texts=texts,
            source_language=source_language,
            target_language=target_language,
        )
        self._jobs[job.id] = job
        self._start(job)
        logger.info("Submitted job %s (%d texts -> %s)", job.id, job.total, target_language)
        return job

    def get(self, job_id: str) -> TranslationJob:
        if job_id not in self._jobs:
            raise JobNotFoundError(f"Job '{job_id}' not found")
        return self._jobs[job_id]

    def status(self, job_id: str) -> JobStatus:
        return JobStatus.of(self.get(job_id))

    def list(self, status: TranslationStatus | None = None) -> list[TranslationJob]:
        """Jobs, newest first, optionally filtered by status."""
        jobs = [job for job in self._jobs.values() if status is None or job.status == status]
        return sorted(jobs, key=lambda job: job.created_at, reverse=True)

    def cancel(self, job_id: str) -> TranslationJob:
        """
        Stop a job after its current batch.

        Finished jobs are returned unchanged.
        """
        job = self.get(job_id)
        if job.status in (TranslationStatus.PENDING, TranslationStatus.IN_PROGRESS):
            job.cancelled = True
            logger.info("Cancelling job %s", job_id)
        return job

    def retry(self, job_id: str) -> TranslationJob:
        """Restart a failed job from the beginning."""
        job = self.get(job_id)
        if job.status != TranslationStatus.FAILED:
            raise StoreglotError(f"Job '{job_id}' is {job.status.value}; only failed jobs can be retried")
        job.status = TranslationStatus.PENDING
        job.results = []
        job.errors = []
        job.cancelled = False
        job.completed_at = None
        self._start(job)
        return job

    async def wait(self, job_id: str) -> TranslationJob:
        """Wait for a job's task to finish (tests, CLI)."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.shield(task)
        return self.get(job_id)

    # =========================================================================
    # Execution
    # =========================================================================

    def _start(self, job: TranslationJob) -> None:
        task = asyncio.get_running_loop().create_task(self._run(job), name=job.id)
        self._tasks[job.id] = task
        task.add_done_callback(self._forget_task)

    def _forget_task(self, task: asyncio.Task) -> None:
        job_id = task.get_name()
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]

    async def _run(self, job: TranslationJob) -> None:
        job.status = TranslationStatus.IN_PROGRESS
        job.started_at = utc_now()
        batch_size = self.orchestrator.batch_size

        try:
            for start in range(0, job.total, batch_size):
                if job.cancelled:
                    self._fail(job, CANCELLED_MESSAGE)
                    return
                if start > 0 and self.orchestrator.batch_delay > 0:
                    await asyncio.sleep(self.orchestrator.batch_delay)
                translated = await self.orchestrator.translate_texts(
                    job.texts[start:start + batch_size],
                    job.target_language,
                    job.source_language,
                )
                if job.cancelled:
                    self._fail(job, CANCELLED_MESSAGE)
                    return
                job.results.extend(translated)
        except BackendError as e:
            self._fail(job, e.message)
            logger.error("Job %s failed: %s", job.id, e)
            return
        except Exception as e:
            self._fail(job, str(e) or type(e).__name__)
            logger.exception("Job %s failed unexpectedly", job.id)
            return

        job.status = TranslationStatus.COMPLETED
        job.completed_at = utc_now()
        logger.info("Job %s completed (%d texts)", job.id, job.total)

    def _fail(self, job: TranslationJob, message: str) -> None:
        job.status = TranslationStatus.FAILED
        job.errors.append(message)
        job.retry_count += 1
        job.completed_at = utc_now()

    def _prune(self) -> None:
        """Forget finished jobs older than the retention window."""
        if self.retention is None:
            return
        cutoff = utc_now() - self.retention
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.completed_at is not None and job.completed_at < cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
