import httpx
import openai

from app.llm.client_base import BaseVisionClient
from app.llm.exceptions import ModelApiError, ModelNetworkError, ModelResponseError
from app.llm.models import ChatMessage, ModelResponse


class OpenAIClientAdapter(BaseVisionClient):
    """Vision client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_chat_completion(
        self,
        *,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: float,
    ) -> ModelResponse:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ModelNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIStatusError as exc:
            raise ModelApiError(
                f"AI provider API error ({exc.status_code}): {exc}",
                status_code=exc.status_code,
            ) from exc
        except openai.APIError as exc:
            raise ModelApiError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ModelResponseError("AI returned no choices")
        choice = response.choices[0]
        content = choice.message.content
        if content is None:
            # Content filters end generation with no content.
            if not choice.finish_reason:
                raise ModelResponseError("AI returned empty response")
            content = ""

        completion_tokens = response.usage.completion_tokens if response.usage else None
        return ModelResponse(
            text=content.strip(),
            finish_reason=choice.finish_reason,
            completion_tokens=completion_tokens,
        )
