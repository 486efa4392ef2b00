from abc import ABC, abstractmethod

from app.llm.models import ChatMessage, ModelResponse


class BaseVisionClient(ABC):
    """Contract for provider-specific vision-and-text chat clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
    ) -> ModelResponse:
        """Send chat messages (optionally with inline images) and return the answer.

        Raises:
            ModelNetworkError: on connection, DNS or timeout failures.
            ModelApiError: when the provider returns an error status.
            ModelResponseError: when the response carries no content.
        """
