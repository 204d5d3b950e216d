from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from studyaid.analysis.context import AnalysisContext
from studyaid.analysis.service import AnalysisService
from studyaid.database.repositories.uploaded_files_repository import UploadedFilesRepository
from studyaid.jobs.models import Job, JobKind
from studyaid.logging.logger import Log
from studyaid.notification.base import BaseNotifier
from studyaid.processing.file_processor import FileProcessor
from studyaid.processing.models import ProcessingStatus


class BaseJobHandler(ABC):
    """Executes one kind of job. Raising means the attempt failed."""

    @abstractmethod
    def handle(self, job: Job) -> None:
        raise NotImplementedError


def require_int(payload: Any, key: str) -> int:
    """Read a positive integer id from a job payload."""
    value = payload.get(key)
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid '{key}' in job payload: {value!r}") from exc
    if number <= 0:
        raise ValueError(f"Invalid '{key}' in job payload: {value!r}")
    return number


class ContentExtractionHandler(BaseJobHandler):
    """Extracts a file and, once extraction is terminal, queues its analysis."""

    def __init__(
        self,
        processor: FileProcessor,
        repository: UploadedFilesRepository,
        submit: Callable[[Job], Job],
    ) -> None:
        self._processor = processor
        self._repository = repository
        self._submit = submit

    def handle(self, job: Job) -> None:
        file_id = require_int(job.payload, "file_id")
        uploaded = self._repository.find_by_id(file_id)

        processed = self._processor.process_file(uploaded)
        self._repository.save_processed_file(processed)
        Log.info(f"Job {job.id}: file {file_id} processed with status {processed.status}")

        if processed.status is ProcessingStatus.COMPLETED and processed.has_text:
            analysis_job = Job.create(
                JobKind.AI_ANALYSIS,
                file_id=file_id,
                user_id=uploaded.user_id,
            )
            self._submit(analysis_job)
            Log.info(f"Job {job.id}: queued analysis job {analysis_job.id} for file {file_id}")


class AIAnalysisHandler(BaseJobHandler):
    """Runs the model over extracted text and stores the parsed analysis."""

    def __init__(
        self,
        analysis_service: AnalysisService,
        repository: UploadedFilesRepository,
    ) -> None:
        self._analysis_service = analysis_service
        self._repository = repository

    def handle(self, job: Job) -> None:
        file_id = require_int(job.payload, "file_id")
        user_id = require_int(job.payload, "user_id")
        uploaded = self._repository.find_by_id(file_id)
        text = self._repository.get_extracted_text(file_id)
        if not text:
            Log.warning(f"Job {job.id}: file {file_id} has no extracted text, skipping analysis")
            return

        context = AnalysisContext(subject=job.payload.get("subject"))
        result = self._analysis_service.analyze_file(
            file_id=file_id,
            user_id=user_id,
            file_name=uploaded.file_name,
            text=text,
            context=context,
        )
        self._repository.save_analysis_result(result)
        self._repository.update_auto_detection(file_id, result.subject, result.topic)
        Log.info(
            f"Job {job.id}: analysis stored for file {file_id} "
            f"(subject='{result.subject}', topic='{result.topic}')"
        )


class NotificationHandler(BaseJobHandler):
    """Delivers a notification, resolving the file's owner when the payload names no user."""

    def __init__(
        self,
        notifier: BaseNotifier,
        repository: UploadedFilesRepository | None = None,
    ) -> None:
        self._notifier = notifier
        self._repository = repository

    def handle(self, job: Job) -> None:
        payload = dict(job.payload)
        if payload.get("user_id") is None and payload.get("file_id") is not None:
            if self._repository is None:
                raise ValueError(f"Cannot resolve the owner of file {payload['file_id']}")
            file_id = require_int(payload, "file_id")
            payload["user_id"] = self._repository.find_by_id(file_id).user_id
        self._notifier.notify(payload)
