# embedkit/dependencies.py
"""
Builds providers, pipeline options and the embedding service from Settings.
"""
from typing import List, Optional

import structlog

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.application.ports.hook_emitter_port import HookEmitterPort
from embedkit.application.ports.pipeline_port import Option
from embedkit.application.use_cases.embedding_service import EmbeddingService
from embedkit.core.config import Settings, settings as default_settings
from embedkit.core.exceptions import ConfigurationError
from embedkit.infrastructure.chunkers.text_chunker import Chunker
from embedkit.infrastructure.embedding_models.cohere_adapter import CohereAdapter
from embedkit.infrastructure.embedding_models.gemini_adapter import GeminiAdapter
from embedkit.infrastructure.embedding_models.openai_adapter import OpenAIAdapter
from embedkit.infrastructure.embedding_models.voyage_adapter import VoyageAdapter
from embedkit.infrastructure.pipeline.options import (
    with_backoff,
    with_circuit_breaker,
    with_rate_limit,
    with_retry,
    with_timeout,
)

log = structlog.get_logger(__name__)


def _require_key(provider: str, secret) -> str:
    key = secret.get_secret_value()
    if not key:
        raise ConfigurationError(f"API key for provider '{provider}' is not configured.")
    return key


def create_provider(config: Settings) -> EmbeddingProviderPort:
    provider = config.ACTIVE_PROVIDER
    timeout = config.PROVIDER_TIMEOUT_SECONDS
    if provider == "openai":
        return OpenAIAdapter(
            api_key=_require_key(provider, config.OPENAI_API_KEY),
            model=config.OPENAI_EMBEDDING_MODEL_NAME,
            base_url=config.OPENAI_API_BASE,
            dimensions_override=config.OPENAI_EMBEDDING_DIMENSIONS_OVERRIDE,
            timeout=timeout,
        )
    if provider == "cohere":
        return CohereAdapter(
            api_key=_require_key(provider, config.COHERE_API_KEY),
            model=config.COHERE_MODEL_NAME,
            base_url=config.COHERE_API_BASE,
            timeout=timeout,
        )
    if provider == "voyage":
        return VoyageAdapter(
            api_key=_require_key(provider, config.VOYAGE_API_KEY),
            model=config.VOYAGE_MODEL_NAME,
            base_url=config.VOYAGE_API_BASE,
            timeout=timeout,
        )
    if provider == "gemini":
        return GeminiAdapter(
            api_key=_require_key(provider, config.GEMINI_API_KEY),
            model=config.GEMINI_MODEL_NAME,
            base_url=config.GEMINI_API_BASE,
            timeout=timeout,
        )
    raise ConfigurationError(f"Unknown embedding provider '{provider}'.")


def create_pipeline_options(config: Settings) -> List[Option]:
    """
    Reliability options enabled in settings, outermost first:
    retry (or backoff), circuit breaker, rate limit, per-attempt timeout.
    """
    options: List[Option] = []
    if config.BACKOFF_MAX_ATTEMPTS > 0:
        options.append(with_backoff(config.BACKOFF_MAX_ATTEMPTS, config.BACKOFF_BASE_DELAY_SECONDS))
    elif config.RETRY_MAX_ATTEMPTS > 0:
        options.append(with_retry(config.RETRY_MAX_ATTEMPTS))
    if config.CIRCUIT_BREAKER_FAILURES > 0:
        options.append(with_circuit_breaker(config.CIRCUIT_BREAKER_FAILURES, config.CIRCUIT_BREAKER_RECOVERY_SECONDS))
    if config.RATE_LIMIT_RPS > 0:
        options.append(with_rate_limit(config.RATE_LIMIT_RPS, config.RATE_LIMIT_BURST))
    if config.TIMEOUT_SECONDS:
        options.append(with_timeout(config.TIMEOUT_SECONDS))
    return options


def create_embedding_service(
    config: Optional[Settings] = None,
    provider: Optional[EmbeddingProviderPort] = None,
    hooks: Optional[HookEmitterPort] = None,
) -> EmbeddingService:
    config = config or default_settings
    provider = provider or create_provider(config)
    options = create_pipeline_options(config)
    chunker = Chunker(
        strategy=config.CHUNK_STRATEGY,
        max_size=config.CHUNK_MAX_SIZE,
        overlap=config.CHUNK_OVERLAP,
        trim_space=config.CHUNK_TRIM_SPACE,
    )
    log.info("Creating embedding service from settings", provider=provider.name(), num_options=len(options))
    return EmbeddingService(
        provider,
        *options,
        hooks=hooks,
        chunker=chunker,
        pooling_mode=config.POOLING_MODE,
        normalize=config.NORMALIZE,
    )
