from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CANCELLED_STATUS_CODE = 499


@dataclass(frozen=True)
class UploadRequest:
    """One uploaded PDF plus the options chosen for it."""

    source_path: Path
    original_name: str
    language: str = "hindi"
    page_ranges: str = ""
    custom_ocr_prompt: str | None = None
    custom_translation_prompt: str | None = None
    connection_id: str | None = None
    user_id: int | None = None


@dataclass(frozen=True)
class PageResult:
    page: int
    text: str
    translation: str
    image_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "text": self.text,
            "translation": self.translation,
            "imagePath": self.image_path,
        }


@dataclass
class PipelineResult:
    """Outcome of one pipeline run, serialized for the client by ``to_dict``."""

    success: bool
    message: str = ""
    original_name: str = ""
    file_size: int = 0
    page_count: int = 0
    pages: list[PageResult] = field(default_factory=list)
    progress: list[dict[str, Any]] = field(default_factory=list)
    language: str = ""
    auto_saved: bool = False
    saved_id: int | None = None
    cancelled: bool = False

    @property
    def status_code(self) -> int:
        if self.cancelled:
            return CANCELLED_STATUS_CODE
        return 200 if self.success else 500

    def to_dict(self) -> dict[str, Any]:
        if self.cancelled:
            return {
                "success": False,
                "cancelled": True,
                "status": CANCELLED_STATUS_CODE,
                "message": self.message,
                "progress": self.progress,
            }
        if not self.success:
            return {
                "success": False,
                "message": self.message,
                "progress": self.progress,
            }
        payload: dict[str, Any] = {
            "success": True,
            "originalName": self.original_name,
            "fileSize": self.file_size,
            "pageCount": self.page_count,
            "pages": [page.to_dict() for page in self.pages],
            "progress": self.progress,
            "language": self.language,
            "autoSaved": self.auto_saved,
        }
        if self.saved_id is not None:
            payload["savedId"] = self.saved_id
        return payload
