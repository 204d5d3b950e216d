"""Thread-safe in-process job queue with delayed (backoff) delivery."""

import heapq
import itertools
import threading
import time
from collections import deque
from collections.abc import Callable

from studyaid.jobs.exceptions import QueueClosedError
from studyaid.jobs.models import Job


class JobQueue:
    """FIFO queue of ready jobs plus a time-ordered heap of delayed jobs.

    ``get`` removes the job it returns (pop-and-own), so a job is only ever
    held by one consumer at a time.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._ready: deque[Job] = deque()
        self._delayed: list[tuple[float, int, Job]] = []
        self._sequence = itertools.count()
        self._cond = threading.Condition()
        self._closed = False

    def put(self, job: Job, delay_seconds: float = 0.0) -> None:
        with self._cond:
            if self._closed:
                raise QueueClosedError(f"Queue is closed, cannot accept job {job.id}")
            self._push(job, delay_seconds)

    def requeue(self, job: Job, delay_seconds: float = 0.0) -> bool:
        """Put back a job that was already owned by a worker.

        Returns False when the queue was closed in the meantime; the caller
        must then record a terminal status itself.
        """
        with self._cond:
            if self._closed:
                return False
            self._push(job, delay_seconds)
            return True

    def get(self, timeout: float | None = None) -> Job | None:
        """Remove and return the next due job, or None after ``timeout``."""
        deadline = None if timeout is None else self._clock() + timeout
        with self._cond:
            while True:
                self._promote_due()
                if self._ready:
                    return self._ready.popleft()
                if self._closed:
                    return None
                now = self._clock()
                if deadline is not None and deadline <= now:
                    return None
                self._cond.wait(self._next_wait(deadline, now))

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def drain(self) -> list[Job]:
        """Remove and return every job that has not been dequeued yet."""
        with self._cond:
            jobs = list(self._ready) + [job for _, _, job in sorted(self._delayed)]
            self._ready.clear()
            self._delayed.clear()
            return jobs

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._ready) + len(self._delayed)

    def _push(self, job: Job, delay_seconds: float) -> None:
        if delay_seconds > 0:
            due = self._clock() + delay_seconds
            heapq.heappush(self._delayed, (due, next(self._sequence), job))
        else:
            self._ready.append(job)
        self._cond.notify()

    def _promote_due(self) -> None:
        now = self._clock()
        while self._delayed and self._delayed[0][0] <= now:
            _, _, job = heapq.heappop(self._delayed)
            self._ready.append(job)

    def _next_wait(self, deadline: float | None, now: float) -> float | None:
        waits: list[float] = []
        if deadline is not None:
            waits.append(deadline - now)
        if self._delayed:
            waits.append(max(0.0, self._delayed[0][0] - now))
        return min(waits) if waits else None
