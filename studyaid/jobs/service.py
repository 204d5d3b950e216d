import threading
import time
from collections.abc import Callable
from typing import Any

from studyaid.jobs.exceptions import QueueClosedError
from studyaid.jobs.handlers import BaseJobHandler
from studyaid.jobs.job_runner import JobRunner
from studyaid.jobs.models import Job, JobKind, JobStatus
from studyaid.jobs.queue import JobQueue
from studyaid.jobs.store import JobStore
from studyaid.jobs.worker import WorkerPool
from studyaid.logging.logger import Log


class JobService:
    """In-process background job service with an explicit start/stop lifecycle.

    Producers call ``enqueue``; a pool of workers executes jobs by kind.
    """

    def __init__(
        self,
        *,
        worker_count: int = 3,
        max_job_attempts: int = 3,
        poll_interval_seconds: float = 1.0,
        retry_backoff_seconds: float = 0.0,
        shutdown_grace_seconds: float = 30.0,
        max_terminal_records: int = 10000,
        on_failed: Callable[[Job], None] | None = None,
    ) -> None:
        self._worker_count = worker_count
        self._max_job_attempts = max_job_attempts
        self._poll_interval_seconds = poll_interval_seconds
        self._retry_backoff_seconds = retry_backoff_seconds
        self._shutdown_grace_seconds = shutdown_grace_seconds
        self._on_failed = on_failed
        self._handlers: dict[str, BaseJobHandler] = {}
        self._shutdown_hooks: list[Callable[[], None]] = []
        self._queue = JobQueue()
        self._store = JobStore(max_terminal_records)
        self._pool: WorkerPool | None = None
        self._lifecycle_lock = threading.Lock()
        self._stopped = False

    @property
    def store(self) -> JobStore:
        return self._store

    def register_handler(self, kind: JobKind | str, handler: BaseJobHandler) -> None:
        if self._pool is not None:
            raise RuntimeError("Handlers must be registered before start()")
        self._handlers[str(kind)] = handler

    def add_shutdown_hook(self, hook: Callable[[], None]) -> None:
        """Register a callable that runs once after the workers have stopped."""
        self._shutdown_hooks.append(hook)

    def start(self) -> None:
        with self._lifecycle_lock:
            if self._pool is not None or self._stopped:
                raise RuntimeError("JobService can only be started once")
            runner = JobRunner(
                self._handlers,
                self._store,
                self._queue,
                max_job_attempts=self._max_job_attempts,
                retry_backoff_seconds=self._retry_backoff_seconds,
                on_failed=self._on_failed,
            )
            self._pool = WorkerPool(
                self._queue,
                runner,
                self._store,
                worker_count=self._worker_count,
                poll_interval_seconds=self._poll_interval_seconds,
            )
            self._pool.start()
        Log.info("Background job service started")

    def enqueue(self, job: Job) -> Job:
        """Submit a job without waiting for it. Returns the pending record.

        Raises:
            QueueClosedError: if the service has been stopped.
        """
        if job.status is not JobStatus.PENDING:
            raise ValueError(f"Only pending jobs can be enqueued, got {job.status}")
        if self._queue.closed:
            raise QueueClosedError("Job service is stopped")
        self._store.record(job)
        try:
            self._queue.put(job)
        except QueueClosedError:
            self._store.record(job.failed("Queue closed"))
            raise
        Log.info(f"Job enqueued: {job.kind} - {job.id}")
        return job

    def submit(self, kind: JobKind | str, **payload: Any) -> Job:
        return self.enqueue(Job.create(kind, **payload))

    def get_job(self, job_id: str) -> Job | None:
        return self._store.get(job_id)

    def counts(self) -> dict[JobStatus, int]:
        return self._store.counts()

    def wait_idle(self, timeout: float | None = None, poll_seconds: float = 0.05) -> bool:
        """Block until every known job is terminal. Returns False on timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while self._store.has_unfinished():
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(poll_seconds)
        return True

    def stop(self, grace_seconds: float | None = None) -> None:
        """Stop accepting work, cancel queued jobs and wait for running ones.

        Every job ends with a terminal record: queued jobs are failed as
        cancelled, jobs still running after the grace period are failed as
        abandoned.
        """
        grace = self._shutdown_grace_seconds if grace_seconds is None else grace_seconds
        with self._lifecycle_lock:
            if self._stopped:
                return
            self._stopped = True

        self._queue.close()
        for job in self._queue.drain():
            self._store.record(job.failed("Cancelled before start: service shutting down"))
            Log.warning(f"Job {job.id} ({job.kind}) cancelled at shutdown")

        if self._pool is not None:
            for job in self._pool.stop(grace):
                if self._store.record(job.failed("Shutdown grace period expired while running")):
                    Log.error(f"Job {job.id} ({job.kind}) still running at shutdown, marked failed")

        for hook in self._shutdown_hooks:
            try:
                hook()
            except Exception as exc:
                Log.error(f"Shutdown hook failed: {exc}")
        Log.info("Background job service stopped")
