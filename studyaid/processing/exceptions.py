class ProcessingError(Exception):
    """Base exception for all processing-related errors."""


class UploadedFileNotFoundError(ProcessingError):
    """Raised when an uploaded file cannot be found in the database."""
