# embedkit/application/ports/embedding_provider_port.py
import abc
from typing import List, Protocol, runtime_checkable

from embedkit.domain.models import EmbeddingResponse

class EmbeddingProviderPort(abc.ABC):
    """
    Abstract port defining the interface for an embedding backend.
    """

    @abc.abstractmethod
    async def embed(self, texts: List[str]) -> EmbeddingResponse:
        """
        Generates embeddings for a list of texts.

        Args:
            texts: A list of strings to embed.

        Returns:
            An EmbeddingResponse whose vectors are in the same order as `texts`.

        Raises:
            Exception: If embedding generation fails.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def name(self) -> str:
        """Returns the backend identifier, e.g. 'openai'."""
        raise NotImplementedError

    @abc.abstractmethod
    def dimensions(self) -> int:
        """Returns the output vector dimensionality."""
        raise NotImplementedError


@runtime_checkable
class QueryProviderFactory(Protocol):
    """
    Optional capability of backends that embed search queries differently from
    stored documents. Detected once, when the service is constructed.
    """

    def for_query(self) -> EmbeddingProviderPort:
        ...
