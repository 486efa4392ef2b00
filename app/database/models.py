from dataclasses import dataclass, field


@dataclass
class TranslationPageRecord:
    """Represents a row from the translation_pages table."""

    page_number: int
    original_text: str
    translated_text: str
    image_path: str | None = None


@dataclass
class TranslationRecord:
    """Represents a row from the translations table with its pages."""

    user_id: int
    original_file_name: str
    language: str
    file_size: int
    page_count: int
    pages: list[TranslationPageRecord] = field(default_factory=list)
    custom_ocr_prompt: str | None = None
    custom_translation_prompt: str | None = None
