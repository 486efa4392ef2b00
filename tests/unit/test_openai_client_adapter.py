from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from app.llm.exceptions import ModelApiError, ModelNetworkError, ModelResponseError
from app.llm.models import text_message
from app.llm.openai_client_adapter import OpenAIClientAdapter


def _make_mock_response(
    content: str | None,
    finish_reason: str | None = "stop",
    completion_tokens: int | None = 12,
) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    choice.finish_reason = finish_reason
    response = MagicMock()
    response.choices = [choice]
    if completion_tokens is None:
        response.usage = None
    else:
        response.usage.completion_tokens = completion_tokens
    return response


def _make_adapter(mock_client: MagicMock) -> OpenAIClientAdapter:
    with patch(
        "app.llm.openai_client_adapter.openai.OpenAI",
        return_value=mock_client,
    ):
        return OpenAIClientAdapter(
            api_key="k",
            model="m",
            timeout_seconds=30,
            base_url=None,
        )


def _call(adapter: OpenAIClientAdapter):  # type: ignore[no-untyped-def]
    return adapter.create_chat_completion(
        messages=[text_message("user", "translate")],
        max_tokens=100,
        temperature=0.1,
    )


class TestOpenAIClientAdapter:
    def test_returns_text_and_metadata(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(
            "  translated text \n", finish_reason="length", completion_tokens=100
        )
        adapter = _make_adapter(mock_client)

        response = _call(adapter)

        assert response.text == "translated text"
        assert response.finish_reason == "length"
        assert response.completion_tokens == 100
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["max_tokens"] == 100

    def test_missing_usage_gives_unknown_tokens(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(
            "text", completion_tokens=None
        )
        assert _call(_make_adapter(mock_client)).completion_tokens is None

    def test_client_retries_disabled(self) -> None:
        with patch("app.llm.openai_client_adapter.openai.OpenAI") as mock_cls:
            OpenAIClientAdapter(api_key="k", model="m", timeout_seconds=30)
        assert mock_cls.call_args.kwargs["max_retries"] == 0

    def test_raises_error_for_empty_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(
            None, finish_reason=None
        )
        with pytest.raises(ModelResponseError, match="empty response"):
            _call(_make_adapter(mock_client))

    def test_filtered_response_keeps_finish_reason(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(
            None, finish_reason="content_filter", completion_tokens=0
        )

        response = _call(_make_adapter(mock_client))

        assert response.text == ""
        assert response.finish_reason == "content_filter"

    def test_raises_error_for_no_choices(self) -> None:
        mock_client = MagicMock()
        response = MagicMock()
        response.choices = []
        mock_client.chat.completions.create.return_value = response
        with pytest.raises(ModelResponseError, match="no choices"):
            _call(_make_adapter(mock_client))

    def test_raises_network_error_on_connection_failure(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=MagicMock()
        )
        with pytest.raises(ModelNetworkError, match="network error"):
            _call(_make_adapter(mock_client))

    def test_raises_network_error_on_timeout(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.TimeoutException("timeout")
        with pytest.raises(ModelNetworkError, match="network error"):
            _call(_make_adapter(mock_client))

    def test_status_error_keeps_status_code(self) -> None:
        request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.RateLimitError(
            message="slow down",
            response=httpx.Response(429, request=request),
            body=None,
        )
        with pytest.raises(ModelApiError) as exc_info:
            _call(_make_adapter(mock_client))
        assert exc_info.value.status_code == 429

    def test_raises_api_error_on_generic_api_error(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIError(
            message="server error",
            request=MagicMock(),
            body=None,
        )
        with pytest.raises(ModelApiError, match="API error"):
            _call(_make_adapter(mock_client))
