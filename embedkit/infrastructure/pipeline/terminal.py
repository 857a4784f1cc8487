# embedkit/infrastructure/pipeline/terminal.py
import time
import structlog

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.application.ports.hook_emitter_port import (
    HookEmitterPort,
    emit_safely,
    PROVIDER_CALL_STARTED,
    PROVIDER_CALL_COMPLETED,
    PROVIDER_CALL_FAILED,
)
from embedkit.application.ports.pipeline_port import PipelineStage
from embedkit.domain.models import EmbeddingBatchRequest

log = structlog.get_logger(__name__)

class TerminalStage(PipelineStage):
    """Innermost stage: hands the request texts to the embedding backend."""

    def __init__(self, provider: EmbeddingProviderPort, hooks: HookEmitterPort):
        self.provider = provider
        self.hooks = hooks

    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        provider_name = self.provider.name()
        start_time = time.perf_counter()
        emit_safely(self.hooks, PROVIDER_CALL_STARTED, provider=provider_name, input_count=len(request.texts))

        try:
            response = await self.provider.embed(request.texts)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            emit_safely(
                self.hooks, PROVIDER_CALL_FAILED, severity="error",
                provider=provider_name, duration_ms=duration_ms, error=str(e), error_type=type(e).__name__,
            )
            log.debug("Provider call failed", provider=provider_name, request_id=request.request_id, error=str(e))
            request.error = e
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        emit_safely(
            self.hooks, PROVIDER_CALL_COMPLETED,
            provider=provider_name,
            model=response.model,
            dimensions=response.dimensions,
            duration_ms=duration_ms,
            prompt_tokens=response.usage.prompt_tokens,
            total_tokens=response.usage.total_tokens,
        )
        request.error = None
        request.response = response
        return request
