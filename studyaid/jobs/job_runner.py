from collections.abc import Callable, Mapping

from studyaid.jobs.handlers import BaseJobHandler
from studyaid.jobs.models import Job
from studyaid.jobs.queue import JobQueue
from studyaid.jobs.store import JobStore
from studyaid.logging.logger import Log


class JobRunner:
    """Run one job, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        handlers: Mapping[str, BaseJobHandler],
        store: JobStore,
        queue: JobQueue,
        *,
        max_job_attempts: int,
        retry_backoff_seconds: float = 0.0,
        on_failed: Callable[[Job], None] | None = None,
    ) -> None:
        self._handlers = dict(handlers)
        self._store = store
        self._queue = queue
        self._max_job_attempts = max(1, max_job_attempts)
        self._retry_backoff_seconds = retry_backoff_seconds
        self._on_failed = on_failed

    def run(self, job: Job) -> Job:
        """Execute a single job with error handling and return its latest record."""
        handler = self._handlers.get(str(job.kind))
        if handler is None:
            Log.error(f"Unknown job kind '{job.kind}' for job {job.id}, discarding")
            return self._fail(job.failed(f"Unknown job kind '{job.kind}'"))

        running = job.processing()
        self._store.record(running)
        Log.info(f"Running job {job.id} ({job.kind}, attempt {job.retry_count + 1})")
        try:
            handler.handle(running)
        except Exception as exc:
            return self._handle_failure(running, exc)

        done = running.completed()
        if self._store.record(done):
            Log.info(f"Job {job.id} completed successfully")
        else:
            Log.warning(f"Job {job.id} finished after it was already marked terminal")
        return done

    def _handle_failure(self, job: Job, exc: Exception) -> Job:
        """Count the attempt; requeue below the limit, otherwise fail permanently."""
        error = str(exc) or type(exc).__name__
        Log.error(f"Job {job.id} failed: {error}")
        if job.retry_count + 1 >= self._max_job_attempts:
            failed = job.failed(error, count_attempt=True)
            Log.error(f"Job {job.id} permanently failed after {failed.retry_count} attempts")
            return self._fail(failed)

        retry = job.retried(error)
        delay = self._backoff(retry.retry_count)
        self._store.record(retry)
        if not self._queue.requeue(retry, delay):
            return self._fail(retry.failed(f"Queue closed before retry: {error}"))
        Log.warning(
            f"Job {job.id} will be retried (attempt {retry.retry_count + 1}) in {delay:.1f}s"
        )
        return retry

    def _fail(self, job: Job) -> Job:
        current = self._store.get(job.id)
        if current is not None and current.status.is_terminal:
            return current
        # The sink runs while the job is still unfinished so that follow-up
        # jobs it queues are visible before this one turns terminal.
        if self._on_failed is not None:
            try:
                self._on_failed(job)
            except Exception as exc:
                Log.error(f"Failure sink raised for job {job.id}: {exc}")
        self._store.record(job)
        return job

    def _backoff(self, retry_count: int) -> float:
        if self._retry_backoff_seconds <= 0:
            return 0.0
        return float(self._retry_backoff_seconds**retry_count)
