# embedkit/infrastructure/embedding_models/gemini_adapter.py
from enum import Enum
from typing import Any, List, Optional

import httpx

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.domain.models import EmbeddingResponse, Usage
from embedkit.domain.vector import to_vector
from embedkit.infrastructure.embedding_models.base_http_adapter import BaseHTTPEmbeddingAdapter

DEFAULT_MODEL = "text-embedding-004"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DIMENSIONS_TEXT_EMBEDDING_004 = 768


class GeminiTaskType(str, Enum):
    RETRIEVAL_QUERY = "RETRIEVAL_QUERY"
    RETRIEVAL_DOCUMENT = "RETRIEVAL_DOCUMENT"
    SEMANTIC_SIMILARITY = "SEMANTIC_SIMILARITY"
    CLASSIFICATION = "CLASSIFICATION"
    CLUSTERING = "CLUSTERING"


class GeminiAdapter(BaseHTTPEmbeddingAdapter):
    """
    Adapter for Google Gemini's batchEmbedContents endpoint.

    The API key travels as a query parameter. Gemini does not report token
    usage, so usage counts the number of texts instead.
    """
    provider_name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        task_type: GeminiTaskType = GeminiTaskType.RETRIEVAL_DOCUMENT,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            dimensions=dimensions or DIMENSIONS_TEXT_EMBEDDING_004,
            timeout=timeout,
            client=client,
        )
        self._task_type = task_type

    @property
    def task_type(self) -> GeminiTaskType:
        return self._task_type

    def with_task_type(self, task_type: GeminiTaskType) -> "GeminiAdapter":
        return self._clone(_task_type=task_type)

    def for_query(self) -> EmbeddingProviderPort:
        return self.with_task_type(GeminiTaskType.RETRIEVAL_QUERY)

    def _extract_error_message(self, body: Any) -> Optional[str]:
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            return body["error"].get("message") or None
        return None

    async def embed(self, texts: List[str]) -> EmbeddingResponse:
        if not texts:
            return self._empty_response()

        payload = {
            "requests": [
                {
                    "model": f"models/{self._model}",
                    "content": {"parts": [{"text": text}]},
                    "taskType": self._task_type.value,
                }
                for text in texts
            ]
        }
        body = await self._post(
            f"/models/{self._model}:batchEmbedContents",
            json=payload,
            params={"key": self._api_key},
        )

        vectors = [to_vector(item.get("values") or []) for item in body.get("embeddings") or []]
        return self._build_response(
            vectors,
            model=self._model,
            usage=Usage(prompt_tokens=len(texts), total_tokens=len(texts)),
        )
