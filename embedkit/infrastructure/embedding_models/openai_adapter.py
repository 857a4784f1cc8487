# File: embedkit/infrastructure/embedding_models/openai_adapter.py
import structlog
from typing import List, Dict, Any, Optional
import httpx
from openai import AsyncOpenAI, APIConnectionError, APIStatusError, OpenAIError

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.core.exceptions import ProviderError
from embedkit.core.metrics import PROVIDER_API_DURATION_SECONDS
from embedkit.domain.models import EmbeddingResponse, Usage, Vector
from embedkit.domain.vector import to_vector

log = structlog.get_logger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"
MODEL_DIMENSIONS = {
    "text-embedding-ada-002": 1536,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
}

class OpenAIAdapter(EmbeddingProviderPort):
    """
    Adapter for OpenAI's Embedding API.
    OpenAI has no query/document distinction, so this adapter has no `for_query`.
    Retries are left to the pipeline; the SDK's own retries are disabled.
    """
    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        dimensions_override: Optional[int] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._model_name = model
        self._dimensions_override = dimensions_override
        self._embedding_dimension = dimensions_override or MODEL_DIMENSIONS.get(model, MODEL_DIMENSIONS[DEFAULT_MODEL])
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )
        log.info("OpenAIAdapter initialized", model_name=self._model_name, target_dimension=self._embedding_dimension)

    def name(self) -> str:
        return self.provider_name

    def dimensions(self) -> int:
        return self._embedding_dimension

    async def aclose(self):
        await self._client.close()

    async def embed(self, texts: List[str]) -> EmbeddingResponse:
        if not texts:
            return EmbeddingResponse(model=self._model_name, vectors=[], dimensions=self._embedding_dimension)

        embed_log = log.bind(adapter="OpenAIAdapter", num_texts=len(texts), model=self._model_name)
        embed_log.debug("Generating embeddings via OpenAI API...")

        api_params: Dict[str, Any] = {
            "model": self._model_name,
            "input": texts,
            "encoding_format": "float"
        }
        if self._dimensions_override is not None:
            api_params["dimensions"] = self._dimensions_override

        try:
            with PROVIDER_API_DURATION_SECONDS.labels(provider=self.provider_name, model_name=self._model_name).time():
                response = await self._client.embeddings.create(**api_params)
        except APIStatusError as e:
            embed_log.error("OpenAI API returned an error status", status_code=e.status_code, error=str(e))
            raise ProviderError(self.provider_name, e.message, status_code=e.status_code) from e
        except APIConnectionError as e:
            embed_log.error("OpenAI API Connection Error", error=str(e))
            raise ProviderError(self.provider_name, f"request failed: {e}") from e
        except OpenAIError as e:
            embed_log.error(f"OpenAI API Error: {type(e).__name__}", error=str(e))
            raise ProviderError(self.provider_name, str(e)) from e

        vectors: List[Optional[Vector]] = [None] * len(response.data)
        for item in response.data:
            if item.index < 0 or item.index >= len(vectors):
                raise ProviderError(self.provider_name, f"invalid index {item.index} from API")
            vectors[item.index] = to_vector(item.embedding)
        if any(v is None for v in vectors):
            raise ProviderError(self.provider_name, "response is missing embeddings for some inputs")

        dims = len(vectors[0]) if vectors and vectors[0] else self._embedding_dimension
        usage = Usage(prompt_tokens=response.usage.prompt_tokens, total_tokens=response.usage.total_tokens)
        return EmbeddingResponse(model=response.model, vectors=vectors, usage=usage, dimensions=dims)
