# embedkit/domain/models.py
from enum import Enum
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, ConfigDict

# Stored element precision is float32; see embedkit.domain.vector.to_vector.
Vector = List[float]


class ChunkStrategy(str, Enum):
    NONE = "none"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"
    FIXED = "fixed"


class PoolingMode(str, Enum):
    MEAN = "mean"
    FIRST = "first"
    MAX = "max"


class SimilarityMetric(str, Enum):
    COSINE = "cosine"
    DOT = "dot"
    EUCLIDEAN = "euclidean"


class Usage(BaseModel):
    """Token consumption reported by a backend. Informational only."""
    prompt_tokens: int = 0
    total_tokens: int = 0


class EmbeddingResponse(BaseModel):
    """
    Result of one backend call.

    ``vectors`` is parallel to the texts that were sent: index i of the output
    belongs to index i of the input.
    """
    model: str
    vectors: List[Vector] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)
    dimensions: int = 0


class EmbeddingBatchRequest(BaseModel):
    """Unit of work flowing through the reliability pipeline."""
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=False)

    texts: List[str]
    request_id: str
    provider: str
    response: Optional[EmbeddingResponse] = None
    error: Optional[BaseException] = None


class HookEvent(BaseModel):
    """Structured telemetry event emitted around batch and provider calls."""
    signal: str
    severity: str = "info"
    fields: Dict[str, Any] = Field(default_factory=dict)
