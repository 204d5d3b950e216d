from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ProcessingStatus(StrEnum):
    COMPLETED = "completed"
    UNSUPPORTED = "unsupported"
    ERROR = "error"


@dataclass(frozen=True)
class UploadedFile:
    """Domain model for an uploaded file (subset of DB columns)."""

    id: int
    user_id: int
    file_name: str
    file_type: str
    file_path: str
    file_size_bytes: int


@dataclass(frozen=True)
class ProcessedFile:
    """Outcome of a single extraction attempt.

    Failures are carried as data: an ``error`` record holds the message and
    empty collections, ``unsupported`` holds nothing at all. ``completed``
    always carries a string (possibly empty) and may still hold the message
    of a secondary failure (image or metadata extraction).
    """

    file_id: int
    file_name: str
    file_type: str
    status: ProcessingStatus
    extracted_text: str = ""
    extracted_images: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    error_message: str | None = None
    processed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def completed(
        cls,
        file: UploadedFile,
        *,
        text: str,
        images: list[str],
        metadata: dict[str, Any],
        error_message: str | None = None,
    ) -> "ProcessedFile":
        return cls(
            file_id=file.id,
            file_name=file.file_name,
            file_type=file.file_type,
            status=ProcessingStatus.COMPLETED,
            extracted_text=text or "",
            extracted_images=list(images),
            metadata=dict(metadata),
            error_message=error_message,
        )

    @classmethod
    def unsupported(cls, file: UploadedFile) -> "ProcessedFile":
        return cls(
            file_id=file.id,
            file_name=file.file_name,
            file_type=file.file_type,
            status=ProcessingStatus.UNSUPPORTED,
        )

    @classmethod
    def error(cls, file: UploadedFile, message: str) -> "ProcessedFile":
        return cls(
            file_id=file.id,
            file_name=file.file_name,
            file_type=file.file_type,
            status=ProcessingStatus.ERROR,
            error_message=message or "Unknown extraction error",
        )

    @property
    def has_text(self) -> bool:
        return self.status is ProcessingStatus.COMPLETED and bool(self.extracted_text.strip())
