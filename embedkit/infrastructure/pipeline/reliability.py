# embedkit/infrastructure/pipeline/reliability.py
"""
Reliability stages that wrap another pipeline stage.

Each stage forwards the request to the stage it wraps and adds one behaviour:
retrying, exponential backoff, a deadline, circuit breaking, rate limiting,
error observation or fallback to a second pipeline.
"""
import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, wait_none

from embedkit.application.ports.pipeline_port import PipelineStage
from embedkit.core.exceptions import CircuitOpenError, PipelineTimeoutError
from embedkit.domain.models import EmbeddingBatchRequest

log = structlog.get_logger(__name__)


class RetryStage(PipelineStage):
    """Retries failed calls up to `max_attempts` total attempts."""

    def __init__(
        self,
        next_stage: PipelineStage,
        max_attempts: int,
        base_delay: Optional[float] = None,
        max_delay: float = 60.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.next_stage = next_stage
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep or asyncio.sleep

    def _wait_strategy(self):
        if self.base_delay is None or self.base_delay <= 0:
            return wait_none()
        return wait_exponential(multiplier=self.base_delay, max=self.max_delay)

    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait_strategy(),
            sleep=self._sleep,
            reraise=True,
            before_sleep=lambda retry_state: log.warning(
                "Retrying embedding call",
                request_id=request.request_id,
                provider=request.provider,
                attempt_number=retry_state.attempt_number,
                wait_time=retry_state.next_action.sleep if retry_state.next_action else 0,
                error=str(retry_state.outcome.exception()) if retry_state.outcome else "Unknown error"
            ),
        )
        async for attempt in retrying:
            with attempt:
                request.error = None
                return await self.next_stage.process(request)
        return request  # unreachable: reraise=True raises the final error


class TimeoutStage(PipelineStage):
    def __init__(self, next_stage: PipelineStage, timeout_seconds: float):
        self.next_stage = next_stage
        self.timeout_seconds = timeout_seconds

    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        try:
            return await asyncio.wait_for(self.next_stage.process(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            error = PipelineTimeoutError(self.timeout_seconds)
            log.warning("Embedding call timed out", request_id=request.request_id, provider=request.provider, timeout_seconds=self.timeout_seconds)
            request.error = error
            raise error from e


class CircuitBreakerStage(PipelineStage):
    """
    Opens after `failure_threshold` consecutive failures and rejects calls with
    CircuitOpenError for `recovery_seconds`. After that a single trial call is
    let through: success closes the circuit, failure opens it again.
    """
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        next_stage: PipelineStage,
        failure_threshold: int,
        recovery_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.next_stage = next_stage
        self.failure_threshold = max(1, failure_threshold)
        self.recovery_seconds = recovery_seconds
        self._clock = clock
        self._state = self.CLOSED
        self._consecutive_failures = 0
        self._opened_at = 0.0
        self._trial_in_flight = False

    @property
    def state(self) -> str:
        return self._state

    def _reject(self, request: EmbeddingBatchRequest, retry_after: float):
        error = CircuitOpenError(retry_after)
        request.error = error
        raise error

    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        if self._state == self.OPEN:
            remaining = self._opened_at + self.recovery_seconds - self._clock()
            if remaining > 0:
                self._reject(request, remaining)
            log.info("Circuit breaker half-open, allowing trial call", provider=request.provider)
            self._state = self.HALF_OPEN

        if self._state == self.HALF_OPEN:
            if self._trial_in_flight:
                self._reject(request, 0.0)
            self._trial_in_flight = True

        try:
            result = await self.next_stage.process(request)
        except Exception:
            self._record_failure(request)
            raise
        finally:
            self._trial_in_flight = False

        self._record_success()
        return result

    def _record_failure(self, request: EmbeddingBatchRequest):
        self._consecutive_failures += 1
        if self._state == self.HALF_OPEN or self._consecutive_failures >= self.failure_threshold:
            if self._state != self.OPEN:
                log.warning(
                    "Circuit breaker opened",
                    provider=request.provider,
                    consecutive_failures=self._consecutive_failures,
                    recovery_seconds=self.recovery_seconds,
                )
            self._state = self.OPEN
            self._opened_at = self._clock()

    def _record_success(self):
        if self._state != self.CLOSED:
            log.info("Circuit breaker closed")
        self._state = self.CLOSED
        self._consecutive_failures = 0


class RateLimitStage(PipelineStage):
    """Token bucket: `rps` tokens per second, at most `burst` stored. Callers wait for a token."""

    def __init__(
        self,
        next_stage: PipelineStage,
        rps: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if rps <= 0:
            raise ValueError(f"Rate limit rps must be positive. Received: {rps}")
        self.next_stage = next_stage
        self.rps = rps
        self.burst = max(1, burst)
        self._clock = clock
        self._sleep = sleep or asyncio.sleep
        self._tokens = float(self.burst)
        self._updated_at = clock()
        self._lock = asyncio.Lock()

    async def _acquire(self):
        async with self._lock:
            while True:
                now = self._clock()
                self._tokens = min(self.burst, self._tokens + (now - self._updated_at) * self.rps)
                self._updated_at = now
                if self._tokens >= 1:
                    self._tokens -= 1
                    return
                await self._sleep((1 - self._tokens) / self.rps)

    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        await self._acquire()
        return await self.next_stage.process(request)


class PipelineFailure(BaseModel):
    """What an error handler receives when the wrapped stage fails."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    request: EmbeddingBatchRequest
    error: BaseException


ErrorHandler = Callable[[PipelineFailure], Union[None, Awaitable[Any]]]


class ErrorHandlerStage(PipelineStage):
    """Passes failures to `handler` for logging or alerting, then re-raises the original error."""

    def __init__(self, next_stage: PipelineStage, handler: ErrorHandler):
        self.next_stage = next_stage
        self.handler = handler

    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        try:
            return await self.next_stage.process(request)
        except Exception as e:
            try:
                outcome = self.handler(PipelineFailure(request=request, error=e))
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as handler_error:
                log.error("Pipeline error handler failed", request_id=request.request_id, error=str(handler_error))
            raise


class FallbackStage(PipelineStage):
    """On failure of the primary stage, sends the same request through `fallback`."""

    def __init__(self, primary: PipelineStage, fallback: PipelineStage):
        self.primary = primary
        self.fallback = fallback

    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        try:
            return await self.primary.process(request)
        except Exception as e:
            log.warning("Primary pipeline failed, trying fallback", request_id=request.request_id, provider=request.provider, error=str(e))
            request.error = None
            request.response = None
            return await self.fallback.process(request)
