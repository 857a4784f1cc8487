# embedkit/application/ports/pipeline_port.py
import abc
from typing import Callable

from embedkit.domain.models import EmbeddingBatchRequest

class PipelineStage(abc.ABC):
    """
    Interface (Port) for one stage of the request pipeline.

    A pipeline is a terminal stage that calls the backend, wrapped by any number
    of reliability stages. The embedding service only ever sees the outermost
    stage through `process`.
    """

    @abc.abstractmethod
    async def process(self, request: EmbeddingBatchRequest) -> EmbeddingBatchRequest:
        """
        Runs the request through this stage.

        Returns:
            The request with `response` populated.

        Raises:
            Exception: If the stage fails. `request.error` is set before raising.
        """
        raise NotImplementedError


# An option wraps a stage in another stage.
Option = Callable[[PipelineStage], PipelineStage]
