from dataclasses import dataclass
from enum import Enum


class OcrStatus(str, Enum):
    SUCCESS = "success"
    MASKED = "masked"
    MODERATED = "moderated"
    FAILED_EMPTY = "failed_empty"
    TECHNICAL_ERROR = "technical_error"


@dataclass(frozen=True)
class OcrOutcome:
    """Best-effort text of one page. Created once; a redo replaces it wholesale."""

    page_number: int
    text: str
    status: OcrStatus
    failure_type: str | None = None
    reason: str = ""
    image_path: str | None = None
