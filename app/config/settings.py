from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "ocr_translate"
    db_username: str = "ocr_translate"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_enabled: bool = False

    pdf_engine: str = "pymupdf"
    render_scale: float = 4.0
    min_render_px: int = 100

    vision_provider: str = "openai"
    vision_openai_api_key: str = ""
    vision_openai_model_name: str = "gpt-4o"
    vision_openai_timeout_seconds: int = 120
    vision_openai_compatible_base_url: str = ""
    vision_openai_compatible_api_key: str = ""
    vision_openai_compatible_model_name: str = ""
    vision_openai_compatible_timeout_seconds: int = 120
    vision_openrouter_api_key: str = ""
    vision_openrouter_model_name: str = "openai/gpt-4o"
    vision_openrouter_timeout_seconds: int = 120

    ocr_max_tokens: int = 2000
    ocr_temperature: float = 0.1
    translation_max_tokens: int = 2000
    translation_temperature: float = 0.1

    retry_max_attempts: int = 3
    retry_base_delay_ms: int = 1000
    fallback_max_attempts: int = 2
    fallback_base_delay_ms: int = 2000

    cancel_grace_seconds: float = 30.0

    images_root: Path = Path("uploads/images")
    images_public_prefix: str = "/uploads/images"
    image_max_age_seconds: int = 3600
