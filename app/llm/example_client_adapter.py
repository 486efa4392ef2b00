"""Example vision client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseVisionClient and register the provider in VisionClientFactory.
"""

from typing import ClassVar

from app.llm.client_base import BaseVisionClient
from app.llm.models import ChatMessage, ModelResponse


class ExampleClientAdapter(BaseVisionClient):
    """Example adapter that answers every request with fixed text.

    No network calls. Useful for local development and dry runs of the
    pipeline: requests carrying an image get a fake transcription, plain text
    requests get a fake translation.
    """

    TRANSCRIPTION: ClassVar[str] = "Example transcription of the page."
    TRANSLATION: ClassVar[str] = "Example translation of the page."

    def create_chat_completion(
        self,
        *,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
    ) -> ModelResponse:
        last = messages[-1]["content"] if messages else ""
        text = self.TRANSCRIPTION if isinstance(last, list) else self.TRANSLATION
        return ModelResponse(
            text=text,
            finish_reason="stop",
            completion_tokens=len(text.split()),
        )
