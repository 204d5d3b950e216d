from studyaid.jobs.models import Job, JobKind, JobStatus
from studyaid.jobs.store import JobStore


class TestJobStore:
    def test_records_latest_state(self) -> None:
        store = JobStore()
        job = Job.create(JobKind.NOTIFICATION)
        store.record(job)
        store.record(job.processing())

        current = store.get(job.id)

        assert current is not None
        assert current.status is JobStatus.PROCESSING

    def test_rejects_changes_after_terminal(self) -> None:
        store = JobStore()
        job = Job.create(JobKind.NOTIFICATION)
        store.record(job.completed())

        accepted = store.record(job.failed("late"))

        assert accepted is False
        assert store.get(job.id).status is JobStatus.COMPLETED  # type: ignore[union-attr]

    def test_counts_every_status(self) -> None:
        store = JobStore()
        store.record(Job.create(JobKind.NOTIFICATION))
        store.record(Job.create(JobKind.NOTIFICATION).failed("x"))

        counts = store.counts()

        assert counts[JobStatus.PENDING] == 1
        assert counts[JobStatus.FAILED] == 1
        assert counts[JobStatus.COMPLETED] == 0

    def test_has_unfinished(self) -> None:
        store = JobStore()
        job = Job.create(JobKind.NOTIFICATION)
        store.record(job)
        assert store.has_unfinished() is True

        store.record(job.completed())
        assert store.has_unfinished() is False

    def test_with_status(self) -> None:
        store = JobStore()
        failed = Job.create(JobKind.NOTIFICATION).failed("x")
        store.record(failed)
        store.record(Job.create(JobKind.NOTIFICATION))

        assert store.with_status(JobStatus.FAILED) == [failed]

    def test_unknown_id(self) -> None:
        assert JobStore().get("missing") is None


class TestJobStoreRetention:
    def test_drops_oldest_terminal_records(self) -> None:
        store = JobStore(max_terminal_records=2)
        finished = [Job.create(JobKind.NOTIFICATION).completed() for _ in range(3)]
        for job in finished:
            store.record(job)

        assert store.get(finished[0].id) is None
        assert store.get(finished[2].id) is not None
        assert len(store) == 2

    def test_unfinished_jobs_are_never_dropped(self) -> None:
        store = JobStore(max_terminal_records=1)
        pending = Job.create(JobKind.NOTIFICATION)
        store.record(pending)
        store.record(Job.create(JobKind.NOTIFICATION).completed())
        store.record(Job.create(JobKind.NOTIFICATION).failed("x"))

        assert store.get(pending.id) == pending
        assert store.has_unfinished()

    def test_counts_include_dropped_records(self) -> None:
        store = JobStore(max_terminal_records=1)
        store.record(Job.create(JobKind.NOTIFICATION).failed("x"))
        store.record(Job.create(JobKind.NOTIFICATION).completed())
        store.record(Job.create(JobKind.NOTIFICATION).completed())

        counts = store.counts()

        assert counts[JobStatus.FAILED] == 1
        assert counts[JobStatus.COMPLETED] == 2
        assert len(store) == 1
