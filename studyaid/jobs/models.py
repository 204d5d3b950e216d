import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any


class JobKind(StrEnum):
    CONTENT_EXTRACTION = "content_extraction"
    AI_ANALYSIS = "ai_analysis"
    NOTIFICATION = "notification"


class JobStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Job:
    """Immutable job record. Every state change produces a new record."""

    kind: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: JobStatus = JobStatus.PENDING
    retry_count: int = 0
    error_message: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @classmethod
    def create(cls, kind: JobKind | str, **payload: Any) -> "Job":
        return cls(kind=str(kind), payload=payload)

    def processing(self) -> "Job":
        return replace(self, status=JobStatus.PROCESSING, updated_at=_now())

    def completed(self) -> "Job":
        return replace(self, status=JobStatus.COMPLETED, error_message=None, updated_at=_now())

    def retried(self, error: str) -> "Job":
        return replace(
            self,
            status=JobStatus.PENDING,
            retry_count=self.retry_count + 1,
            error_message=error,
            updated_at=_now(),
        )

    def failed(self, error: str, *, count_attempt: bool = False) -> "Job":
        return replace(
            self,
            status=JobStatus.FAILED,
            retry_count=self.retry_count + 1 if count_attempt else self.retry_count,
            error_message=error,
            updated_at=_now(),
        )
