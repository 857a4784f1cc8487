# File: embedkit/core/config.py
import sys
import logging
from typing import Optional
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from embedkit.domain.models import ChunkStrategy, PoolingMode

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_prefix='EMBEDKIT_',
        case_sensitive=False,
        env_file_encoding='utf-8',
        extra='ignore'
    )

    PROJECT_NAME: str = "Embedkit Embedding Service"
    LOG_LEVEL: str = "INFO"

    # --- Active backend ---
    ACTIVE_PROVIDER: str = Field(default="openai", description="One of: openai, cohere, voyage, gemini.")
    PROVIDER_TIMEOUT_SECONDS: float = 30.0

    # --- OpenAI ---
    OPENAI_API_KEY: SecretStr = SecretStr("")
    OPENAI_EMBEDDING_MODEL_NAME: str = "text-embedding-3-small"
    OPENAI_API_BASE: Optional[str] = None
    OPENAI_EMBEDDING_DIMENSIONS_OVERRIDE: Optional[int] = None

    # --- Cohere ---
    COHERE_API_KEY: SecretStr = SecretStr("")
    COHERE_MODEL_NAME: str = "embed-english-v3.0"
    COHERE_API_BASE: str = "https://api.cohere.ai/v1"

    # --- Voyage AI ---
    VOYAGE_API_KEY: SecretStr = SecretStr("")
    VOYAGE_MODEL_NAME: str = "voyage-3"
    VOYAGE_API_BASE: str = "https://api.voyageai.com/v1"

    # --- Google Gemini ---
    GEMINI_API_KEY: SecretStr = SecretStr("")
    GEMINI_MODEL_NAME: str = "text-embedding-004"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"

    # --- Chunking / pooling ---
    CHUNK_STRATEGY: ChunkStrategy = ChunkStrategy.NONE
    CHUNK_MAX_SIZE: int = 512
    CHUNK_OVERLAP: int = 50
    CHUNK_TRIM_SPACE: bool = True
    POOLING_MODE: PoolingMode = PoolingMode.MEAN
    NORMALIZE: bool = True

    # --- Reliability pipeline (0 / None disables an option) ---
    RETRY_MAX_ATTEMPTS: int = 0
    BACKOFF_MAX_ATTEMPTS: int = 0
    BACKOFF_BASE_DELAY_SECONDS: float = 1.0
    TIMEOUT_SECONDS: Optional[float] = None
    CIRCUIT_BREAKER_FAILURES: int = 0
    CIRCUIT_BREAKER_RECOVERY_SECONDS: float = 30.0
    RATE_LIMIT_RPS: float = 0.0
    RATE_LIMIT_BURST: int = 1

    @field_validator('LOG_LEVEL')
    @classmethod
    def check_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid LOG_LEVEL '{v}'. Must be one of {valid_levels}")
        return v.upper()

    @field_validator('ACTIVE_PROVIDER')
    @classmethod
    def check_active_provider(cls, v: str) -> str:
        valid_providers = ["openai", "cohere", "voyage", "gemini"]
        if v.lower() not in valid_providers:
            raise ValueError(f"Invalid ACTIVE_PROVIDER '{v}'. Must be one of {valid_providers}")
        return v.lower()

temp_log = logging.getLogger("embedkit.config.loader")
if not temp_log.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    temp_log.addHandler(handler)
    temp_log.setLevel(logging.INFO)

try:
    temp_log.debug("Loading Embedkit settings...")
    settings = Settings()
    temp_log.debug(f"Embedkit settings loaded: provider={settings.ACTIVE_PROVIDER} log_level={settings.LOG_LEVEL}")
except Exception as e:
    temp_log.critical(f"FATAL: Error loading Embedkit settings: {e}")
    sys.exit("FATAL: Invalid configuration. Check logs.")
