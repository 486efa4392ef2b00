import io
from collections.abc import Iterator
from contextlib import contextmanager

import pdfplumber
from PIL import Image

from app.pdf.base import BasePdfRasterizer
from app.pdf.exceptions import PdfRasterizationError

POINTS_PER_INCH = 72


class PdfPlumberAdapter(BasePdfRasterizer):
    """Renders PDF pages to PNG using pdfplumber's page images."""

    @contextmanager
    def _open(self, pdf_bytes: bytes) -> Iterator[pdfplumber.PDF]:
        try:
            pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
        except Exception as exc:
            raise PdfRasterizationError(f"pdfplumber could not open document: {exc}") from exc
        try:
            yield pdf
        finally:
            pdf.close()

    def _page_count(self, document: pdfplumber.PDF) -> int:
        return len(document.pages)

    def _page_size(self, document: pdfplumber.PDF, page_number: int) -> tuple[float, float]:
        page = document.pages[page_number - 1]
        return float(page.width), float(page.height)

    def _render(
        self, document: pdfplumber.PDF, page_number: int, scale: float
    ) -> tuple[bytes, int, int]:
        page = document.pages[page_number - 1]
        image = page.to_image(resolution=POINTS_PER_INCH * scale).original
        if image.mode in ("RGBA", "LA", "P"):
            image = image.convert("RGBA")
            background = Image.new("RGB", image.size, "white")
            background.paste(image, mask=image.getchannel("A"))
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue(), image.width, image.height
