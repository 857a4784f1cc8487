# embedkit/infrastructure/embedding_models/base_http_adapter.py
import copy
import httpx
import structlog
from typing import Any, Dict, List, Optional

from embedkit.application.ports.embedding_provider_port import EmbeddingProviderPort
from embedkit.core.exceptions import ProviderError
from embedkit.core.metrics import PROVIDER_API_DURATION_SECONDS
from embedkit.domain.models import EmbeddingResponse, Usage, Vector
from embedkit.domain.vector import to_vector

log = structlog.get_logger(__name__)

class BaseHTTPEmbeddingAdapter(EmbeddingProviderPort):
    """Base asynchronous HTTP adapter for JSON embedding APIs."""

    provider_name: str = "http"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        dimensions: int,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._dimensions = dimensions
        self._client = client or httpx.AsyncClient(base_url=self._base_url, timeout=timeout)
        log.info(f"{type(self).__name__} initialized", model_name=self._model, target_dimension=self._dimensions)

    def name(self) -> str:
        return self.provider_name

    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model(self) -> str:
        return self._model

    def _clone(self, **overrides: Any) -> "BaseHTTPEmbeddingAdapter":
        """Shallow copy sharing the HTTP client, with some attributes replaced."""
        clone = copy.copy(self)
        for attr, value in overrides.items():
            setattr(clone, attr, value)
        return clone

    async def aclose(self):
        """Closes the HTTP client."""
        await self._client.aclose()
        log.info(f"{self.provider_name} client closed.")

    def _empty_response(self) -> EmbeddingResponse:
        return EmbeddingResponse(model=self._model, vectors=[], dimensions=self._dimensions)

    def _build_response(self, vectors: List[Vector], model: str, usage: Usage) -> EmbeddingResponse:
        dims = self._dimensions
        if vectors and vectors[0]:
            dims = len(vectors[0])
        return EmbeddingResponse(model=model, vectors=vectors, usage=usage, dimensions=dims)

    def _extract_error_message(self, body: Any) -> Optional[str]:
        """Pulls the human readable message out of an error payload."""
        return None

    async def _post(
        self,
        endpoint: str,
        json: Dict[str, Any],
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POSTs a JSON body and returns the decoded JSON response."""
        request_log = log.bind(provider=self.provider_name, endpoint=endpoint, model=self._model)
        request_log.debug(f"Requesting {self.provider_name}")
        try:
            with PROVIDER_API_DURATION_SECONDS.labels(provider=self.provider_name, model_name=self._model).time():
                response = await self._client.post(endpoint, json=json, params=params, headers=headers)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            request_log.error(f"Network error when calling {self.provider_name}", error=str(e))
            raise ProviderError(self.provider_name, f"request failed: {e}") from e
        except httpx.HTTPError as e:
            request_log.error(f"Unexpected HTTP error when calling {self.provider_name}", error=str(e))
            raise ProviderError(self.provider_name, f"request failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            try:
                message = self._extract_error_message(response.json())
            except ValueError:
                message = None
            request_log.error(f"HTTP error from {self.provider_name}", status_code=response.status_code, detail=message)
            raise ProviderError(self.provider_name, message or f"status {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.provider_name, f"failed to parse response: {e}") from e
        if not isinstance(data, dict):
            raise ProviderError(self.provider_name, f"unexpected response payload of type {type(data).__name__}")
        return data

    def _vectors_by_index(self, data: List[Dict[str, Any]]) -> List[Vector]:
        """Places `{"index", "embedding"}` items at their reported index."""
        vectors: List[Optional[Vector]] = [None] * len(data)
        for item in data:
            index = item.get("index", -1)
            if not isinstance(index, int) or index < 0 or index >= len(vectors):
                raise ProviderError(self.provider_name, f"invalid index {index} from API")
            vectors[index] = to_vector(item.get("embedding") or [])
        if any(v is None for v in vectors):
            raise ProviderError(self.provider_name, "response is missing embeddings for some inputs")
        return vectors
