from abc import ABC, abstractmethod
from .types import CompletionRequest, CompletionResponse


class CompletionBackend(ABC):
    """
    Abstract completion boundary.
    The router depends only on this interface; failures come back as a
    non-success CompletionResponse, never as an exception.
    """

    @abstractmethod
    def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Send a prompt to the language model and return its answer."""
        raise NotImplementedError
