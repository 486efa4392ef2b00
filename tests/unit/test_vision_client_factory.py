from unittest.mock import patch

import pytest

from app.config.settings import Settings
from app.llm.example_client_adapter import ExampleClientAdapter
from app.llm.factory import VisionClientFactory
from app.llm.openai_client_adapter import OpenAIClientAdapter


class TestVisionClientFactory:
    def test_creates_example_adapter(self) -> None:
        client = VisionClientFactory.create(Settings(vision_provider="example"))
        assert isinstance(client, ExampleClientAdapter)

    def test_creates_openai_adapter(self) -> None:
        with patch("app.llm.openai_client_adapter.openai.OpenAI") as mock_cls:
            client = VisionClientFactory.create(
                Settings(vision_provider="openai", vision_openai_api_key="sk-test")
            )
        assert isinstance(client, OpenAIClientAdapter)
        assert mock_cls.call_args.kwargs["base_url"] is None
        assert mock_cls.call_args.kwargs["timeout"] == 120

    def test_openrouter_uses_default_base_url(self) -> None:
        with patch("app.llm.openai_client_adapter.openai.OpenAI") as mock_cls:
            VisionClientFactory.create(
                Settings(vision_provider="OpenRouter", vision_openrouter_api_key="k")
            )
        assert mock_cls.call_args.kwargs["base_url"] == "https://openrouter.ai/api/v1"

    def test_openai_compatible_requires_base_url(self) -> None:
        with pytest.raises(ValueError, match="base_url is required"):
            VisionClientFactory.create(Settings(vision_provider="openai_compatible"))

    def test_openai_compatible_uses_configured_url(self) -> None:
        with patch("app.llm.openai_client_adapter.openai.OpenAI") as mock_cls:
            VisionClientFactory.create(
                Settings(
                    vision_provider="openai_compatible",
                    vision_openai_compatible_base_url="http://localhost:8000/v1",
                    vision_openai_compatible_model_name="qwen-vl",
                )
            )
        assert mock_cls.call_args.kwargs["base_url"] == "http://localhost:8000/v1"

    def test_raises_for_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown vision provider"):
            VisionClientFactory.create(Settings(vision_provider="carrier-pigeon"))
