class ExtractionError(Exception):
    """Raised when an extractor cannot read a file."""
