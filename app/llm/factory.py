from typing import ClassVar

from app.config.settings import Settings
from app.llm.client_base import BaseVisionClient
from app.llm.example_client_adapter import ExampleClientAdapter
from app.llm.openai_client_adapter import OpenAIClientAdapter


class VisionClientFactory:
    """Creates the configured vision client adapter."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseVisionClient:
        """Create a configured vision client from application settings."""
        provider = settings.vision_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        base_url = cls._resolve_base_url(provider, settings)
        if provider == "openai":
            return OpenAIClientAdapter(
                api_key=settings.vision_openai_api_key,
                model=settings.vision_openai_model_name,
                timeout_seconds=settings.vision_openai_timeout_seconds,
                base_url=base_url,
            )
        if provider == "openai_compatible":
            return OpenAIClientAdapter(
                api_key=settings.vision_openai_compatible_api_key,
                model=settings.vision_openai_compatible_model_name,
                timeout_seconds=settings.vision_openai_compatible_timeout_seconds,
                base_url=base_url,
            )
        return OpenAIClientAdapter(
            api_key=settings.vision_openrouter_api_key,
            model=settings.vision_openrouter_model_name,
            timeout_seconds=settings.vision_openrouter_timeout_seconds,
            base_url=base_url,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.vision_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "vision_openai_compatible_base_url is required for "
                    "vision_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown vision provider '{provider}'. Choose from: {supported}"
        )
