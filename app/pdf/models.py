from dataclasses import dataclass


@dataclass(frozen=True)
class RasterizedPage:
    """One rendered page image, ready for OCR."""

    page_number: int
    image_bytes: bytes
    width: int
    height: int
    is_placeholder: bool = False
    image_path: str | None = None
