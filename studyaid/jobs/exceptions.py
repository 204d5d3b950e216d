class JobError(Exception):
    """Base exception for job queue errors."""


class QueueClosedError(JobError):
    """Raised when a job is submitted to a queue that no longer accepts work."""
