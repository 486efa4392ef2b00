from unittest.mock import MagicMock, patch

import psycopg
import pytest

from app.database.exceptions import PersistenceError
from app.database.models import TranslationPageRecord, TranslationRecord
from app.database.repositories.translation_repository import TranslationRepository


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _make_record() -> TranslationRecord:
    return TranslationRecord(
        user_id=10,
        original_file_name="gita.pdf",
        language="sanskrit",
        file_size=2048,
        page_count=2,
        custom_ocr_prompt=None,
        custom_translation_prompt="Translate: {TEXT}",
        pages=[
            TranslationPageRecord(1, "text one", "translation one", "/uploads/images/s/page_1.png"),
            TranslationPageRecord(2, "text two", "translation two", "/uploads/images/s/page_2.png"),
        ],
    )


class TestSave:
    @patch("app.database.repositories.translation_repository.get_connection")
    def test_inserts_translation_and_pages(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (42,)

        translation_id = TranslationRepository().save(_make_record())

        assert translation_id == 42
        insert_params = mock_cursor.execute.call_args.args[1]
        assert insert_params[:5] == (10, "gita.pdf", "sanskrit", 2048, 2)
        page_rows = mock_cursor.executemany.call_args.args[1]
        assert page_rows == [
            (42, 1, "text one", "translation one", "/uploads/images/s/page_1.png"),
            (42, 2, "text two", "translation two", "/uploads/images/s/page_2.png"),
        ]
        mock_conn.commit.assert_called_once()

    @patch("app.database.repositories.translation_repository.get_connection")
    def test_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(PersistenceError, match="connection lost"):
            TranslationRepository().save(_make_record())
        mock_conn.commit.assert_not_called()


class TestListImagePaths:
    @patch("app.database.repositories.translation_repository.get_connection")
    def test_returns_distinct_paths(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [("/a/page_1.png",), ("/b/page_2.png",)]

        assert TranslationRepository().list_image_paths() == {"/a/page_1.png", "/b/page_2.png"}
