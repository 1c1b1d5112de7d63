"""
Background job runner for fire-and-forget pipelines.

Each job runs as its own asyncio task, detached from the HTTP request that
started it. Failures are logged and recorded on the job; they never
propagate back to the caller.
"""
import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger("chatbot.jobs")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Job:
    """Outcome record of one background pipeline run."""
    name: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.status in (JobStatus.SUCCEEDED, JobStatus.FAILED)


class JobRunner:
    """Spawns background jobs and keeps a bounded history of their outcomes."""

    def __init__(self, max_history: int = 100):
        self.max_history = max_history
        self._jobs: "OrderedDict[str, Job]" = OrderedDict()
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, name: str, factory: Callable[[], Awaitable[Any]]) -> Job:
        """
        Start `factory()` as a detached task and return its job record.

        Must be called from within a running event loop.
        """
        job = Job(name=name)
        self._jobs[job.id] = job
        self._prune()

        task = asyncio.create_task(self._run(job, factory), name=f"{name}-{job.id}")
        # Keep a strong reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.info("Job spawned: %s (%s)", name, job.id)
        return job

    async def _run(self, job: Job, factory: Callable[[], Awaitable[Any]]) -> None:
        job.status = JobStatus.RUNNING
        job.started_at = _utcnow()
        try:
            await factory()
        except asyncio.CancelledError:
            job.status = JobStatus.FAILED
            job.error = "cancelled"
            job.finished_at = _utcnow()
            logger.warning("Job cancelled: %s (%s)", job.name, job.id)
            raise
        except Exception as exc:
            job.status = JobStatus.FAILED
            job.error = f"{type(exc).__name__}: {exc}"
            job.finished_at = _utcnow()
            logger.exception("Job failed: %s (%s)", job.name, job.id)
            return

        job.status = JobStatus.SUCCEEDED
        job.finished_at = _utcnow()
        elapsed = (job.finished_at - job.started_at).total_seconds()
        logger.info("Job finished: %s (%s) in %.2fs", job.name, job.id, elapsed)

    def _prune(self) -> None:
        # Drop the oldest finished jobs beyond the history limit
        excess = len(self._jobs) - self.max_history
        if excess <= 0:
            return
        for job_id in [j.id for j in self._jobs.values() if j.done][:excess]:
            del self._jobs[job_id]

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def list_jobs(self) -> List[Job]:
        """Jobs in creation order, newest last."""
        return list(self._jobs.values())

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every spawned job has finished."""
        while True:
            running = [t for t in self._tasks if not t.done()]
            if not running:
                return
            await asyncio.gather(*running, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel unfinished jobs and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d unfinished jobs", len(tasks))


def job_counts(jobs: List[Job]) -> Dict[str, int]:
    counts = {status.value: 0 for status in JobStatus}
    for job in jobs:
        counts[job.status.value] += 1
    return counts
