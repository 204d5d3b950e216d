import threading
import time

from studyaid.jobs.job_runner import JobRunner
from studyaid.jobs.models import Job
from studyaid.jobs.queue import JobQueue
from studyaid.jobs.store import JobStore
from studyaid.logging.logger import Log


class WorkerPool:
    """N worker threads pulling from one shared queue: claim -> dispatch."""

    def __init__(
        self,
        queue: JobQueue,
        runner: JobRunner,
        store: JobStore,
        *,
        worker_count: int,
        poll_interval_seconds: float,
    ) -> None:
        self._queue = queue
        self._runner = runner
        self._store = store
        self._worker_count = max(1, worker_count)
        self._poll_interval_seconds = poll_interval_seconds
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._in_flight: dict[str, Job] = {}
        self._lock = threading.Lock()

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("WorkerPool already started")
        for index in range(self._worker_count):
            thread = threading.Thread(
                target=self._run_loop,
                name=f"job-worker-{index + 1}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        Log.info(f"Started {self._worker_count} job workers")

    def stop(self, timeout: float) -> list[Job]:
        """Signal workers to exit and wait up to ``timeout`` seconds.

        Returns the jobs still running when the wait ran out.
        """
        self._stop_event.set()
        deadline = time.monotonic() + max(0.0, timeout)
        for thread in self._threads:
            thread.join(max(0.0, deadline - time.monotonic()))
        with self._lock:
            return list(self._in_flight.values())

    def in_flight_count(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            job = self._queue.get(timeout=self._poll_interval_seconds)
            if job is None:
                if self._queue.closed:
                    break
                continue
            self._execute(job)
        Log.debug("Worker exiting")

    def _execute(self, job: Job) -> None:
        with self._lock:
            self._in_flight[job.id] = job
        try:
            self._runner.run(job)
        except Exception as exc:
            Log.exception(f"Unexpected runner error for job {job.id}")
            self._store.record(job.failed(f"Runner error: {exc}"))
        finally:
            with self._lock:
                self._in_flight.pop(job.id, None)

