# embedkit/infrastructure/embedding_models/voyage_adapter.py
from enum import Enum
from typing import Any, List, Optional

import httpx

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.domain.models import EmbeddingResponse, Usage
from embedkit.infrastructure.embedding_models.base_http_adapter import BaseHTTPEmbeddingAdapter

DEFAULT_MODEL = "voyage-3"
DEFAULT_BASE_URL = "https://api.voyageai.com/v1"

MODEL_DIMENSIONS = {
    "voyage-3": 1024,
    "voyage-3-lite": 512,
    "voyage-large-2": 1536,
}


class VoyageInputType(str, Enum):
    DOCUMENT = "document"
    QUERY = "query"


class VoyageAdapter(BaseHTTPEmbeddingAdapter):
    """Adapter for the Voyage AI embeddings API."""
    provider_name = "voyage"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        input_type: VoyageInputType = VoyageInputType.DOCUMENT,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            dimensions=dimensions or MODEL_DIMENSIONS.get(model, MODEL_DIMENSIONS[DEFAULT_MODEL]),
            timeout=timeout,
            client=client,
        )
        self._input_type = input_type

    @property
    def input_type(self) -> VoyageInputType:
        return self._input_type

    def with_input_type(self, input_type: VoyageInputType) -> "VoyageAdapter":
        return self._clone(_input_type=input_type)

    def for_query(self) -> EmbeddingProviderPort:
        return self.with_input_type(VoyageInputType.QUERY)

    def _extract_error_message(self, body: Any) -> Optional[str]:
        if isinstance(body, dict):
            return body.get("detail") or None
        return None

    async def embed(self, texts: List[str]) -> EmbeddingResponse:
        if not texts:
            return self._empty_response()

        payload = {
            "model": self._model,
            "input": texts,
            "input_type": self._input_type.value,
        }
        body = await self._post(
            "/embeddings",
            json=payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

        vectors = self._vectors_by_index(body.get("data") or [])
        total_tokens = (body.get("usage") or {}).get("total_tokens", 0)
        return self._build_response(
            vectors,
            model=body.get("model") or self._model,
            usage=Usage(prompt_tokens=total_tokens, total_tokens=total_tokens),
        )
