# embedkit/infrastructure/embedding_models/cohere_adapter.py
from enum import Enum
from typing import Any, List, Optional

import httpx

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.domain.models import EmbeddingResponse, Usage
from embedkit.domain.vector import to_vector
from embedkit.infrastructure.embedding_models.base_http_adapter import BaseHTTPEmbeddingAdapter

DEFAULT_MODEL = "embed-english-v3.0"
DEFAULT_BASE_URL = "https://api.cohere.ai/v1"
DIMENSIONS_EMBED_ENGLISH_V3 = 1024
DIMENSIONS_EMBED_MULTILINGUAL_V3 = 1024


class CohereInputType(str, Enum):
    SEARCH_DOCUMENT = "search_document"
    SEARCH_QUERY = "search_query"
    CLASSIFICATION = "classification"
    CLUSTERING = "clustering"


class CohereAdapter(BaseHTTPEmbeddingAdapter):
    """
    Adapter for Cohere's /embed endpoint.
    Embeds documents by default; `for_query()` returns a search_query variant.
    """
    provider_name = "cohere"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        input_type: CohereInputType = CohereInputType.SEARCH_DOCUMENT,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            dimensions=dimensions or DIMENSIONS_EMBED_ENGLISH_V3,
            timeout=timeout,
            client=client,
        )
        self._input_type = input_type

    @property
    def input_type(self) -> CohereInputType:
        return self._input_type

    def with_input_type(self, input_type: CohereInputType) -> "CohereAdapter":
        return self._clone(_input_type=input_type)

    def for_query(self) -> EmbeddingProviderPort:
        return self.with_input_type(CohereInputType.SEARCH_QUERY)

    def _extract_error_message(self, body: Any) -> Optional[str]:
        if isinstance(body, dict):
            return body.get("message") or None
        return None

    async def embed(self, texts: List[str]) -> EmbeddingResponse:
        if not texts:
            return self._empty_response()

        payload = {
            "model": self._model,
            "texts": texts,
            "input_type": self._input_type.value,
        }
        body = await self._post(
            "/embed",
            json=payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

        vectors = [to_vector(embedding) for embedding in body.get("embeddings") or []]
        input_tokens = ((body.get("meta") or {}).get("billed_units") or {}).get("input_tokens", 0)
        return self._build_response(
            vectors,
            model=self._model,
            usage=Usage(prompt_tokens=input_tokens, total_tokens=input_tokens),
        )
