# embedkit/application/ports/hook_emitter_port.py
import abc

import structlog

from embedkit.domain.models import HookEvent

log = structlog.get_logger(__name__)

EMBED_STARTED = "embedkit.embed.started"
EMBED_COMPLETED = "embedkit.embed.completed"
EMBED_FAILED = "embedkit.embed.failed"
PROVIDER_CALL_STARTED = "embedkit.provider.call.started"
PROVIDER_CALL_COMPLETED = "embedkit.provider.call.completed"
PROVIDER_CALL_FAILED = "embedkit.provider.call.failed"

class HookEmitterPort(abc.ABC):
    """
    Receiver for telemetry events. Emission is fire-and-forget: callers swallow
    and log anything raised here so the embedding result is never affected.
    """

    @abc.abstractmethod
    def emit(self, event: HookEvent) -> None:
        raise NotImplementedError


def emit_safely(emitter: HookEmitterPort, signal: str, severity: str = "info", **fields) -> None:
    """Builds and emits an event, logging and discarding any emitter failure."""
    try:
        emitter.emit(HookEvent(signal=signal, severity=severity, fields=fields))
    except Exception as e:
        log.warning("Hook emitter failed, event dropped", signal=signal, emitter=type(emitter).__name__, error=str(e))
