import threading

import pytest

from studyaid.jobs.exceptions import QueueClosedError
from studyaid.jobs.models import Job, JobKind
from studyaid.jobs.queue import JobQueue


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _job() -> Job:
    return Job.create(JobKind.NOTIFICATION, message="hi")


class TestPutAndGet:
    def test_fifo_order(self) -> None:
        queue = JobQueue()
        first, second = _job(), _job()
        queue.put(first)
        queue.put(second)

        assert queue.get(timeout=0) is first
        assert queue.get(timeout=0) is second

    def test_get_removes_job(self) -> None:
        queue = JobQueue()
        queue.put(_job())

        queue.get(timeout=0)

        assert len(queue) == 0
        assert queue.get(timeout=0) is None

    def test_get_times_out_when_empty(self) -> None:
        assert JobQueue().get(timeout=0.01) is None

    def test_get_wakes_up_on_put(self) -> None:
        queue = JobQueue()
        job = _job()
        timer = threading.Timer(0.05, queue.put, args=(job,))
        timer.start()

        assert queue.get(timeout=5) is job
        timer.join()


class TestDelayedJobs:
    def test_delayed_job_not_ready_before_due(self) -> None:
        clock = FakeClock()
        queue = JobQueue(clock=clock)
        queue.put(_job(), delay_seconds=10)

        assert queue.get(timeout=0) is None
        assert len(queue) == 1

    def test_delayed_job_ready_when_due(self) -> None:
        clock = FakeClock()
        queue = JobQueue(clock=clock)
        job = _job()
        queue.put(job, delay_seconds=10)

        clock.now += 10

        assert queue.get(timeout=0) is job

    def test_ready_jobs_before_later_delayed_ones(self) -> None:
        clock = FakeClock()
        queue = JobQueue(clock=clock)
        delayed, ready = _job(), _job()
        queue.put(delayed, delay_seconds=5)
        queue.put(ready)

        assert queue.get(timeout=0) is ready


class TestClose:
    def test_put_after_close_raises(self) -> None:
        queue = JobQueue()
        queue.close()

        with pytest.raises(QueueClosedError):
            queue.put(_job())

    def test_requeue_after_close_returns_false(self) -> None:
        queue = JobQueue()
        queue.close()

        assert queue.requeue(_job()) is False

    def test_get_returns_none_once_closed_and_empty(self) -> None:
        queue = JobQueue()
        queue.close()

        assert queue.get(timeout=5) is None

    def test_close_wakes_waiting_consumer(self) -> None:
        queue = JobQueue()
        results: list[Job | None] = []
        consumer = threading.Thread(target=lambda: results.append(queue.get(timeout=10)))
        consumer.start()

        queue.close()
        consumer.join(timeout=5)

        assert not consumer.is_alive()
        assert results == [None]

    def test_drain_returns_ready_and_delayed(self) -> None:
        clock = FakeClock()
        queue = JobQueue(clock=clock)
        ready, delayed = _job(), _job()
        queue.put(ready)
        queue.put(delayed, delay_seconds=30)

        drained = queue.drain()

        assert drained == [ready, delayed]
        assert len(queue) == 0


class TestConcurrentConsumers:
    def test_each_job_delivered_once(self) -> None:
        queue = JobQueue()
        jobs = [_job() for _ in range(200)]
        for job in jobs:
            queue.put(job)
        seen: list[str] = []
        lock = threading.Lock()

        def consume() -> None:
            while True:
                job = queue.get(timeout=0.05)
                if job is None:
                    return
                with lock:
                    seen.append(job.id)

        threads = [threading.Thread(target=consume) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert sorted(seen) == sorted(job.id for job in jobs)
