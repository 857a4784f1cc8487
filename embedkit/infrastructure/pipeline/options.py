# embedkit/infrastructure/pipeline/options.py
from typing import Protocol, Sequence

from embedkit.application.ports.pipeline_port import Option, PipelineStage
from embedkit.infrastructure.pipeline.reliability import (
    RetryStage,
    TimeoutStage,
    CircuitBreakerStage,
    RateLimitStage,
    ErrorHandlerStage,
    ErrorHandler,
    FallbackStage,
)


class PipelineProvider(Protocol):
    """Anything exposing a pipeline that can serve as a fallback, e.g. another EmbeddingService."""

    @property
    def pipeline(self) -> PipelineStage:
        ...


def build_pipeline(terminal: PipelineStage, options: Sequence[Option]) -> PipelineStage:
    """Wraps `terminal` so that options[0] ends up as the outermost stage."""
    pipeline = terminal
    for option in reversed(options):
        pipeline = option(pipeline)
    return pipeline


def with_retry(max_attempts: int) -> Option:
    """Retries failed calls immediately, up to `max_attempts` attempts in total."""
    return lambda stage: RetryStage(stage, max_attempts)


def with_backoff(max_attempts: int, base_delay: float) -> Option:
    """Retries with a delay that starts at `base_delay` seconds and doubles after each failure."""
    return lambda stage: RetryStage(stage, max_attempts, base_delay=base_delay)


def with_timeout(seconds: float) -> Option:
    return lambda stage: TimeoutStage(stage, seconds)


def with_circuit_breaker(failures: int, recovery_seconds: float) -> Option:
    """After `failures` consecutive failures, rejects calls for `recovery_seconds`."""
    return lambda stage: CircuitBreakerStage(stage, failures, recovery_seconds)


def with_rate_limit(rps: float, burst: int) -> Option:
    return lambda stage: RateLimitStage(stage, rps, burst)


def with_error_handler(handler: ErrorHandler) -> Option:
    return lambda stage: ErrorHandlerStage(stage, handler)


def with_fallback(fallback: PipelineProvider) -> Option:
    """If the wrapped pipeline fails, the request is retried through `fallback.pipeline`."""
    return lambda stage: FallbackStage(stage, fallback.pipeline)
