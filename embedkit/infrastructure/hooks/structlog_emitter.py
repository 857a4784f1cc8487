# embedkit/infrastructure/hooks/structlog_emitter.py
import structlog

from embedkit.application.ports.hook_emitter_port import (
    HookEmitterPort,
    EMBED_STARTED,
    EMBED_COMPLETED,
    EMBED_FAILED,
    PROVIDER_CALL_FAILED,
)
from embedkit.core.metrics import (
    EMBED_REQUESTS_TOTAL,
    EMBED_REQUEST_DURATION_SECONDS,
    TEXTS_EMBEDDED_TOTAL,
    TOKENS_CONSUMED_TOTAL,
    PROVIDER_API_ERRORS_TOTAL,
)
from embedkit.domain.models import HookEvent

log = structlog.get_logger(__name__)

class StructlogHookEmitter(HookEmitterPort):
    """
    Default emitter: one structured log record per event, plus Prometheus
    counters for batch outcomes and token usage.
    """

    def __init__(self, record_metrics: bool = True):
        self._record_metrics = record_metrics

    def emit(self, event: HookEvent) -> None:
        event_log = log.bind(signal=event.signal, **event.fields)
        if event.severity == "error":
            event_log.error("Embedding hook event")
        else:
            event_log.debug("Embedding hook event")

        if self._record_metrics:
            self._update_metrics(event)

    def _update_metrics(self, event: HookEvent) -> None:
        provider = str(event.fields.get("provider", "unknown"))
        if event.signal == EMBED_STARTED:
            TEXTS_EMBEDDED_TOTAL.labels(provider=provider).inc(event.fields.get("input_count", 0))
        elif event.signal == EMBED_COMPLETED:
            EMBED_REQUESTS_TOTAL.labels(provider=provider, status="success").inc()
            EMBED_REQUEST_DURATION_SECONDS.labels(provider=provider).observe(event.fields.get("duration_ms", 0) / 1000)
            TOKENS_CONSUMED_TOTAL.labels(provider=provider, kind="prompt").inc(event.fields.get("prompt_tokens", 0))
            TOKENS_CONSUMED_TOTAL.labels(provider=provider, kind="total").inc(event.fields.get("total_tokens", 0))
        elif event.signal == EMBED_FAILED:
            EMBED_REQUESTS_TOTAL.labels(provider=provider, status="failure").inc()
            EMBED_REQUEST_DURATION_SECONDS.labels(provider=provider).observe(event.fields.get("duration_ms", 0) / 1000)
        elif event.signal == PROVIDER_CALL_FAILED:
            PROVIDER_API_ERRORS_TOTAL.labels(provider=provider, error_type=event.fields.get("error_type", "unknown")).inc()


class NoopHookEmitter(HookEmitterPort):
    def emit(self, event: HookEvent) -> None:
        return None
