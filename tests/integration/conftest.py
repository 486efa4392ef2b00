import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import apply_schema, close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "ocr_translate_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def translation_cleanup(integration_pool: None) -> Generator[list[int], None, None]:
    cleanup: list[int] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for translation_id in cleanup:
                cur.execute("DELETE FROM translations WHERE id = %s", (translation_id,))
        conn.commit()


@pytest.fixture
def example_settings(tmp_path: Path) -> Settings:
    """Settings wired to the offline example model and a scratch image root."""
    return Settings(
        vision_provider="example",
        images_root=tmp_path / "images",
        render_scale=1.0,
    )


@pytest.fixture
def upload_on_disk(tmp_path: Path, three_page_pdf_bytes: bytes) -> Path:
    path = tmp_path / "upload.pdf"
    path.write_bytes(three_page_pdf_bytes)
    return path
