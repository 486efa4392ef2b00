import io

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def _pdf_with_pages(texts: list[str], pagesize: tuple[float, float] = letter) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize)
    for text in texts:
        c.drawString(10, pagesize[1] / 2, text)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _pdf_with_pages(["Hello PDF World"])


@pytest.fixture()
def three_page_pdf_bytes() -> bytes:
    """Generate a three-page PDF with known text on each page."""
    return _pdf_with_pages(["Page one content", "Page two content", "Page three content"])


@pytest.fixture()
def tiny_page_pdf_bytes() -> bytes:
    """Generate a PDF whose page is only 10x10 points."""
    return _pdf_with_pages(["x"], pagesize=(10, 10))


@pytest.fixture()
def png_bytes() -> bytes:
    """A small but valid PNG image, large enough to pass OCR validation."""
    image = Image.new("RGB", (400, 400), "white")
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
