import threading
from collections import Counter, deque

from studyaid.jobs.models import Job, JobStatus


class JobStore:
    """In-memory registry of the latest record for every job.

    Terminal records are final: once a job is completed or failed, later
    records for the same id are rejected. Only the newest
    ``max_terminal_records`` terminal jobs are kept; older ones are dropped
    but still counted.
    """

    def __init__(self, max_terminal_records: int = 10000) -> None:
        self._jobs: dict[str, Job] = {}
        self._terminal_ids: deque[str] = deque()
        self._pruned: Counter[JobStatus] = Counter()
        self._max_terminal_records = max(1, max_terminal_records)
        self._lock = threading.Lock()

    def record(self, job: Job) -> bool:
        """Store ``job`` as the current state of its id.

        Returns False (and keeps the old record) when the job already
        reached a terminal status.
        """
        with self._lock:
            current = self._jobs.get(job.id)
            if current is not None and current.status.is_terminal:
                return False
            self._jobs[job.id] = job
            if job.status.is_terminal:
                self._terminal_ids.append(job.id)
                self._prune()
            return True

    def get(self, job_id: str) -> Job | None:
        with self._lock:
            return self._jobs.get(job_id)

    def with_status(self, status: JobStatus) -> list[Job]:
        with self._lock:
            return [job for job in self._jobs.values() if job.status is status]

    def counts(self) -> dict[JobStatus, int]:
        """Jobs per status, including terminal jobs no longer retained."""
        with self._lock:
            counter = Counter(job.status for job in self._jobs.values())
            counter.update(self._pruned)
        return {status: counter.get(status, 0) for status in JobStatus}

    def has_unfinished(self) -> bool:
        with self._lock:
            return any(not job.status.is_terminal for job in self._jobs.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _prune(self) -> None:
        while len(self._terminal_ids) > self._max_terminal_records:
            dropped = self._jobs.pop(self._terminal_ids.popleft())
            self._pruned[dropped.status] += 1
