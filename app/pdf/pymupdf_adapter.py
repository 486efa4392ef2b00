from collections.abc import Iterator
from contextlib import contextmanager

import pymupdf

from app.pdf.base import BasePdfRasterizer
from app.pdf.exceptions import PdfRasterizationError


class PyMuPdfAdapter(BasePdfRasterizer):
    """Renders PDF pages to PNG using PyMuPDF."""

    @contextmanager
    def _open(self, pdf_bytes: bytes) -> Iterator[pymupdf.Document]:
        try:
            document = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise PdfRasterizationError(f"pymupdf could not open document: {exc}") from exc
        try:
            yield document
        finally:
            document.close()

    def _page_count(self, document: pymupdf.Document) -> int:
        return document.page_count

    def _page_size(self, document: pymupdf.Document, page_number: int) -> tuple[float, float]:
        rect = document[page_number - 1].rect
        return rect.width, rect.height

    def _render(
        self, document: pymupdf.Document, page_number: int, scale: float
    ) -> tuple[bytes, int, int]:
        page = document[page_number - 1]
        pixmap = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
        return pixmap.tobytes("png"), pixmap.width, pixmap.height
