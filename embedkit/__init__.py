# embedkit/__init__.py
"""
embedkit: chunked, pooled and normalized text embeddings over pluggable backends.
"""
from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort, QueryProviderFactory
from embedkit.application.ports.hook_emitter_port import HookEmitterPort
from embedkit.application.ports.pipeline_port import Option, PipelineStage
from embedkit.application.use_cases.embedding_service import EmbeddingService
from embedkit.core.exceptions import (
    EmbeddingError,
    ProviderError,
    EmbeddingRequestError,
    PipelineTimeoutError,
    CircuitOpenError,
    VectorDimensionError,
    ConfigurationError,
)
from embedkit.domain.models import (
    Vector,
    ChunkStrategy,
    PoolingMode,
    SimilarityMetric,
    Usage,
    EmbeddingResponse,
    EmbeddingBatchRequest,
    HookEvent,
)
from embedkit.domain.pooling import pool
from embedkit.domain.vector import (
    norm,
    normalize,
    dot,
    cosine_similarity,
    euclidean_distance,
    similarity,
)
from embedkit.infrastructure.chunkers.text_chunker import Chunker
from embedkit.infrastructure.hooks.structlog_emitter import StructlogHookEmitter, NoopHookEmitter
from embedkit.infrastructure.pipeline.options import (
    build_pipeline,
    with_retry,
    with_backoff,
    with_timeout,
    with_circuit_breaker,
    with_rate_limit,
    with_error_handler,
    with_fallback,
)

__all__ = [
    "EmbeddingProviderPort", "QueryProviderFactory", "HookEmitterPort", "Option", "PipelineStage",
    "EmbeddingService",
    "EmbeddingError", "ProviderError", "EmbeddingRequestError", "PipelineTimeoutError",
    "CircuitOpenError", "VectorDimensionError", "ConfigurationError",
    "Vector", "ChunkStrategy", "PoolingMode", "SimilarityMetric", "Usage",
    "EmbeddingResponse", "EmbeddingBatchRequest", "HookEvent",
    "pool", "norm", "normalize", "dot", "cosine_similarity", "euclidean_distance", "similarity",
    "Chunker", "StructlogHookEmitter", "NoopHookEmitter",
    "build_pipeline", "with_retry", "with_backoff", "with_timeout", "with_circuit_breaker",
    "with_rate_limit", "with_error_handler", "with_fallback",
]
