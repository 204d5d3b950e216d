import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from studyaid.analysis.cache import AnalysisCache
from studyaid.analysis.factory import AnalysisClientFactory
from studyaid.analysis.service import AnalysisService
from studyaid.config.settings import Settings
from studyaid.database.connection import apply_schema, close_pool, init_pool
from studyaid.database.repositories.uploaded_files_repository import UploadedFilesRepository
from studyaid.extraction.factory import ExtractorFactory
from studyaid.jobs.exceptions import QueueClosedError
from studyaid.jobs.handlers import AIAnalysisHandler, ContentExtractionHandler, NotificationHandler
from studyaid.jobs.models import Job, JobKind, JobStatus
from studyaid.jobs.service import JobService
from studyaid.logging.logger import Log
from studyaid.notification.log_notifier import LogNotifier
from studyaid.processing.file_processor import FileProcessor


def build_pipeline(settings: Settings) -> JobService:
    """Wire extractors, analysis and handlers into a job service (not started)."""
    repository = UploadedFilesRepository()
    processor = FileProcessor(
        ExtractorFactory.create_router(settings),
        settings.max_upload_size_bytes,
        files_root=Path(settings.files_root),
    )
    analysis = AnalysisService(
        AnalysisClientFactory.create(settings),
        AnalysisCache(
            ttl_seconds=settings.analysis_cache_ttl_seconds,
            max_entries=settings.analysis_cache_max_entries,
        ),
        repository,
    )

    def report_failure(job: Job) -> None:
        if job.kind == JobKind.NOTIFICATION or "file_id" not in job.payload:
            return
        try:
            service.submit(
                JobKind.NOTIFICATION,
                file_id=job.payload["file_id"],
                user_id=job.payload.get("user_id"),
                message=f"Processing of file {job.payload['file_id']} failed: {job.error_message}",
            )
        except QueueClosedError:
            Log.warning(f"Could not queue failure notification for job {job.id}: service stopped")

    service = JobService(
        worker_count=settings.job_worker_count,
        max_job_attempts=settings.max_job_attempts,
        poll_interval_seconds=settings.job_poll_interval_seconds,
        retry_backoff_seconds=settings.job_retry_backoff_seconds,
        shutdown_grace_seconds=settings.job_shutdown_grace_seconds,
        max_terminal_records=settings.job_store_max_terminal_records,
        on_failed=report_failure,
    )
    service.register_handler(
        JobKind.CONTENT_EXTRACTION,
        ContentExtractionHandler(processor, repository, service.enqueue),
    )
    service.register_handler(JobKind.AI_ANALYSIS, AIAnalysisHandler(analysis, repository))
    service.register_handler(JobKind.NOTIFICATION, NotificationHandler(LogNotifier(), repository))
    service.add_shutdown_hook(analysis.close)
    return service


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="studyaid-worker",
        description="Extract and analyze uploaded study files in the background",
    )
    p.add_argument("file_ids", nargs="+", type=int, help="Uploaded file ids to process")
    p.add_argument("--workers", type=int, default=0, help="Override JOB_WORKER_COUNT")
    p.add_argument("--log-level", default=None, help="Python logging level (INFO, DEBUG, ...)")
    p.add_argument("--init-db", action="store_true", help="Create missing tables before processing")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> init pool -> run jobs until idle -> stop."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    if args.workers > 0:
        settings = settings.model_copy(update={"job_worker_count": args.workers})
    Log.configure(args.log_level or settings.log_level)
    init_pool(settings)

    try:
        if args.init_db:
            apply_schema()
        service = build_pipeline(settings)
        service.start()
        try:
            for file_id in args.file_ids:
                service.submit(JobKind.CONTENT_EXTRACTION, file_id=file_id)
            service.wait_idle()
        except KeyboardInterrupt:
            Log.warning("Interrupted, shutting down")
        finally:
            service.stop(settings.job_shutdown_grace_seconds)
        counts = service.counts()
        Log.info(
            "Finished: "
            + ", ".join(f"{status}={count}" for status, count in counts.items())
        )
        return 1 if counts[JobStatus.FAILED] else 0
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
