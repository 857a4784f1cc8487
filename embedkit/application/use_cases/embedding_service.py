# embedkit/application/use_cases/embedding_service.py
import asyncio
import time
import uuid
import structlog
from typing import List, Optional

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort, QueryProviderFactory
from embedkit.application.ports.hook_emitter_port import (
    HookEmitterPort,
    emit_safely,
    EMBED_STARTED,
    EMBED_COMPLETED,
    EMBED_FAILED,
)
from embedkit.application.ports.pipeline_port import Option, PipelineStage
from embedkit.core.exceptions import EmbeddingRequestError
from embedkit.domain.models import EmbeddingBatchRequest, PoolingMode, Vector
from embedkit.domain.pooling import pool
from embedkit.domain.vector import normalize
from embedkit.infrastructure.chunkers.text_chunker import Chunker, chunk_texts
from embedkit.infrastructure.hooks.structlog_emitter import StructlogHookEmitter
from embedkit.infrastructure.pipeline.options import build_pipeline
from embedkit.infrastructure.pipeline.terminal import TerminalStage

log = structlog.get_logger(__name__)

class EmbeddingService:
    """
    Turns texts into one embedding vector each.

    Texts are chunked, all chunks are sent to the backend as a single batch
    through the reliability pipeline, and the chunk vectors are pooled back into
    one vector per input text (optionally L2-normalized). Output order always
    matches input order.

    Backends that embed queries differently from documents (they implement
    `for_query`) get a second pipeline used by `embed_query` / `batch_query`.
    Reconfiguration through the `with_*` methods must happen before the service
    is shared between concurrent callers.
    """

    def __init__(
        self,
        provider: EmbeddingProviderPort,
        *options: Option,
        hooks: Optional[HookEmitterPort] = None,
        chunker: Optional[Chunker] = None,
        pooling_mode: PoolingMode = PoolingMode.MEAN,
        normalize: bool = True,
    ):
        self._provider = provider
        self._hooks = hooks or StructlogHookEmitter()
        self._chunker = chunker or Chunker.default()
        self._pooling_mode = pooling_mode
        self._normalize = normalize

        self._pipeline = build_pipeline(TerminalStage(provider, self._hooks), options)

        self._query_provider: Optional[EmbeddingProviderPort] = None
        self._query_pipeline: Optional[PipelineStage] = None
        if isinstance(provider, QueryProviderFactory):
            self._query_provider = provider.for_query()
            self._query_pipeline = build_pipeline(TerminalStage(self._query_provider, self._hooks), options)

        log.info(
            "EmbeddingService initialized",
            provider=provider.name(),
            query_mode=self._query_provider is not None,
            num_options=len(options),
            chunk_strategy=self._chunker.strategy.value,
            pooling_mode=self._pooling_mode.value,
            normalize=self._normalize,
        )

    @property
    def pipeline(self) -> PipelineStage:
        """Document pipeline, exposed so other services can use it as a fallback."""
        return self._pipeline

    @property
    def provider(self) -> EmbeddingProviderPort:
        return self._provider

    @property
    def supports_query_mode(self) -> bool:
        return self._query_provider is not None

    def dimensions(self) -> int:
        return self._provider.dimensions()

    def with_chunker(self, chunker: Chunker) -> "EmbeddingService":
        self._chunker = chunker
        return self

    def with_pooling(self, mode: PoolingMode) -> "EmbeddingService":
        self._pooling_mode = mode
        return self

    def with_normalize(self, normalize: bool) -> "EmbeddingService":
        self._normalize = normalize
        return self

    async def embed(self, text: str) -> Optional[Vector]:
        """Embeds one text in document mode. Returns None if it produced no vector."""
        vectors = await self.batch([text])
        return vectors[0] if vectors else None

    async def embed_query(self, text: str) -> Optional[Vector]:
        """Embeds one search query. Same as `embed` for backends without a query mode."""
        vectors = await self.batch_query([text])
        return vectors[0] if vectors else None

    async def batch(self, texts: List[str]) -> List[Optional[Vector]]:
        return await self._execute(texts, self._provider, self._pipeline)

    async def batch_query(self, texts: List[str]) -> List[Optional[Vector]]:
        if self._query_provider is None or self._query_pipeline is None:
            return await self.batch(texts)
        return await self._execute(texts, self._query_provider, self._query_pipeline)

    async def _execute(
        self,
        texts: List[str],
        provider: EmbeddingProviderPort,
        pipeline: PipelineStage,
    ) -> List[Optional[Vector]]:
        """
        Runs one batch end to end.

        Returns:
            One slot per input text, in input order. Texts that produced no
            chunks hold None. An empty list is returned for empty input and when
            the backend returned no vectors at all.

        Raises:
            EmbeddingRequestError: If the pipeline fails; chained to the original error.
            asyncio.CancelledError: If the caller cancels while the backend is being called.
        """
        if not texts:
            log.debug("Batch called with no texts.")
            return []

        provider_name = provider.name()
        request_id = str(uuid.uuid4())
        batch_log = log.bind(request_id=request_id, provider=provider_name, num_texts=len(texts))
        start_time = time.perf_counter()

        emit_safely(self._hooks, EMBED_STARTED, request_id=request_id, provider=provider_name, input_count=len(texts))

        chunks, mapping = chunk_texts(self._chunker, texts)
        batch_log = batch_log.bind(num_chunks=len(chunks))
        batch_log.debug("Texts chunked, dispatching batch")

        request = EmbeddingBatchRequest(texts=chunks, request_id=request_id, provider=provider_name)
        try:
            processed = await pipeline.process(request)
            if processed.error is not None:
                raise processed.error
        except asyncio.CancelledError:
            self._emit_failed(request_id, provider_name, start_time, "cancelled")
            batch_log.warning("Embedding batch cancelled")
            raise
        except Exception as e:
            self._emit_failed(request_id, provider_name, start_time, str(e))
            batch_log.error("Embedding batch failed", error=str(e), error_type=type(e).__name__)
            raise EmbeddingRequestError(provider_name, request_id, e) from e

        response = processed.response
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        if response is None or not response.vectors:
            batch_log.info("Backend returned no vectors", duration_ms=duration_ms)
            return []

        if len(response.vectors) != len(chunks):
            batch_log.warning("Backend vector count differs from chunk count", expected=len(chunks), got=len(response.vectors))

        vectors = self._pool_chunks(len(texts), response.vectors, mapping)
        if self._normalize:
            vectors = [normalize(v) if v is not None else None for v in vectors]

        emit_safely(
            self._hooks, EMBED_COMPLETED,
            request_id=request_id,
            provider=provider_name,
            model=response.model,
            dimensions=response.dimensions,
            duration_ms=duration_ms,
            prompt_tokens=response.usage.prompt_tokens,
            total_tokens=response.usage.total_tokens,
        )
        batch_log.info("Embedding batch completed", model=response.model, duration_ms=duration_ms)
        return vectors

    def _pool_chunks(self, num_texts: int, chunk_vectors: List[Vector], mapping: List[int]) -> List[Optional[Vector]]:
        grouped: List[List[Vector]] = [[] for _ in range(num_texts)]
        for chunk_index, vector in enumerate(chunk_vectors):
            if chunk_index < len(mapping):
                grouped[mapping[chunk_index]].append(vector)
        return [pool(group, self._pooling_mode) if group else None for group in grouped]

    def _emit_failed(self, request_id: str, provider_name: str, start_time: float, error: str):
        emit_safely(
            self._hooks, EMBED_FAILED, severity="error",
            request_id=request_id,
            provider=provider_name,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
            error=error,
        )
