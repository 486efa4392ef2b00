from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_pdf_engine(self) -> None:
        s = Settings()
        assert s.pdf_engine == "pymupdf"

    def test_default_render_scale(self) -> None:
        s = Settings()
        assert s.render_scale == 4.0
        assert s.min_render_px == 100

    def test_default_vision_provider(self) -> None:
        s = Settings()
        assert s.vision_provider == "openai"

    def test_default_retry_policy(self) -> None:
        s = Settings()
        assert s.retry_max_attempts == 3
        assert s.retry_base_delay_ms == 1000
        assert s.fallback_max_attempts == 2
        assert s.fallback_base_delay_ms == 2000

    def test_default_cancel_grace(self) -> None:
        s = Settings()
        assert s.cancel_grace_seconds == 30.0


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_vision_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISION_OPENAI_MODEL_NAME", "gpt-4.1")
        s = Settings()
        assert s.vision_openai_model_name == "gpt-4.1"

    def test_loads_images_root(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IMAGES_ROOT", "/srv/images")
        s = Settings()
        assert s.images_root == Path("/srv/images")


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_retry_attempts_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "abc")
        with pytest.raises(ValidationError):
            Settings()
