# embedkit/core/exceptions.py
from typing import Optional


class EmbeddingError(Exception):
    """Base exception for embedkit errors."""
    pass


class ConfigurationError(EmbeddingError):
    """Raised when settings cannot be turned into a working service."""
    pass


class ProviderError(EmbeddingError):
    """An embedding backend rejected a request or could not be reached."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"{provider} error ({status_code}): {message}")
        else:
            super().__init__(f"{provider} error: {message}")


class EmbeddingRequestError(EmbeddingError):
    """
    Raised by the embedding service when the pipeline fails a batch.

    Carries the backend name and the correlation id of the request so the failure
    can be matched against emitted hook events. The original error is chained
    as ``__cause__``.
    """

    def __init__(self, provider: str, request_id: str, cause: BaseException):
        self.provider = provider
        self.request_id = request_id
        self.cause = cause
        super().__init__(f"embedding request {request_id} via '{provider}' failed: {cause}")


class PipelineTimeoutError(EmbeddingError):
    """The wrapped pipeline stage did not finish within its deadline."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"embedding call exceeded timeout of {timeout_seconds}s")


class CircuitOpenError(EmbeddingError):
    """The circuit breaker is open and is rejecting calls."""

    def __init__(self, retry_after_seconds: float):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"circuit breaker is open, retry in {retry_after_seconds:.2f}s")


class VectorDimensionError(ValueError):
    """Vectors combined by pooling do not share one dimensionality."""
    pass
