"""
Job Service - Accept-now, poll-later execution of finder requests.

Jobs live in process memory only and are lost on restart.
"""
import concurrent.futures
import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from partfinder.errors import JobNotFoundError, JobQueueFullError, PartFinderError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


UNFINISHED = (JobStatus.PENDING, JobStatus.RUNNING)


@dataclass
class Job:
    id: str
    kind: str
    status: JobStatus = JobStatus.PENDING
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class JobManager:
    """Runs jobs on a small thread pool and keeps the most recent `max_jobs`."""

    def __init__(self, max_workers: int = 4, max_jobs: int = 200):
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="partfinder-job"
        )
        self._jobs: "OrderedDict[str, Job]" = OrderedDict()
        self._lock = threading.Lock()
        self.max_jobs = max_jobs

    def submit(self, kind: str, work: Callable[[], Dict[str, Any]]) -> Job:
        """
        Queue `work` and return its job record.

        Raises:
            JobQueueFullError: `max_jobs` jobs are already pending or running
        """
        job = Job(id=uuid.uuid4().hex, kind=kind)
        with self._lock:
            unfinished = sum(1 for queued in self._jobs.values() if queued.status in UNFINISHED)
            if unfinished >= self.max_jobs:
                logger.warning("Rejected %s job: %d jobs already queued", kind, unfinished)
                raise JobQueueFullError("Too many jobs in progress, try again later")
            self._jobs[job.id] = job
            self._prune()
        self._executor.submit(self._run, job, work)
        logger.info("Queued %s job %s", kind, job.id)
        return job

    def get(self, job_id: str) -> Job:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _update(self, job: Job, **changes) -> None:
        with self._lock:
            for name, value in changes.items():
                setattr(job, name, value)
            job.updated_at = _utcnow()

    def _run(self, job: Job, work: Callable[[], Dict[str, Any]]) -> None:
        self._update(job, status=JobStatus.RUNNING)
        try:
            result = work()
        except PartFinderError as e:
            logger.warning("Job %s failed: %s", job.id, e.message)
            self._update(job, status=JobStatus.FAILED, error=e.message)
            return
        except Exception:
            logger.exception("Job %s failed unexpectedly", job.id)
            self._update(job, status=JobStatus.FAILED, error="Server error")
            return
        self._update(job, status=JobStatus.COMPLETED, result=result)
        logger.info("Job %s completed", job.id)

    def _prune(self) -> None:
        # Drop the oldest finished jobs once over capacity
        finished = [job_id for job_id, job in self._jobs.items()
                    if job.status in (JobStatus.COMPLETED, JobStatus.FAILED)]
        while len(self._jobs) > self.max_jobs and finished:
            self._jobs.pop(finished.pop(0), None)
