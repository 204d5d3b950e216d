class AnalysisError(Exception):
    """Raised when an analysis request fails."""


class AnalysisNetworkError(AnalysisError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class AnalysisTimeoutError(AnalysisError):
    """Raised when the AI provider does not answer within the configured timeout."""
