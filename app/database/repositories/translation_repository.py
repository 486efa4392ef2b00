import psycopg
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.exceptions import PersistenceError
from app.database.models import TranslationPageRecord, TranslationRecord


class TranslationRepository:
    """Database operations for the translations and translation_pages tables."""

    def save(self, record: TranslationRecord) -> int:
        """Insert a translation and all of its pages in one transaction.

        Returns:
            The new translation id.

        Raises:
            PersistenceError: if the database rejects the write.
        """
        prompts = {
            "custom_ocr_prompt": record.custom_ocr_prompt,
            "custom_translation_prompt": record.custom_translation_prompt,
        }
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO translations
                        (user_id, original_file_name, language, file_size, page_count, prompts)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        RETURNING id
                        """,
                        (
                            record.user_id,
                            record.original_file_name,
                            record.language,
                            record.file_size,
                            record.page_count,
                            Jsonb(prompts),
                        ),
                    )
                    row = cur.fetchone()
                    if row is None:
                        raise PersistenceError("Insert into translations returned no id")
                    translation_id = int(row[0])
                    cur.executemany(
                        """
                        INSERT INTO translation_pages
                        (translation_id, page_number, original_text, translated_text, image_path)
                        VALUES (%s, %s, %s, %s, %s)
                        """,
                        [
                            (
                                translation_id,
                                page.page_number,
                                page.original_text,
                                page.translated_text,
                                page.image_path,
                            )
                            for page in record.pages
                        ],
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to save translation: {exc}") from exc
        return translation_id

    def list_image_paths(self) -> set[str]:
        """Public image paths referenced by any stored page."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT DISTINCT image_path FROM translation_pages WHERE image_path IS NOT NULL"
                )
                rows = cur.fetchall()
        return {row[0] for row in rows}
