from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import Any

from app.logging.logger import Log
from app.pdf.models import RasterizedPage
from app.pdf.page_ranges import resolve_page_selection
from app.pdf.placeholder import PLACEHOLDER_SIZE, render_placeholder
from app.progress.progress_log import ScopedProgress

DEFAULT_SCALE = 4.0
MIN_DIMENSION_PX = 100


class BasePdfRasterizer(ABC):
    """Contract and shared page loop for all PDF rasterization adapters.

    Adapters only open documents and render single pages; scale selection,
    the minimum-size floor and placeholder substitution live here.
    """

    def __init__(self, scale: float = DEFAULT_SCALE, min_dimension_px: int = MIN_DIMENSION_PX) -> None:
        self._scale = scale
        self._min_dimension_px = min_dimension_px

    def rasterize(
        self,
        pdf_bytes: bytes,
        selection: Sequence[int] | None = None,
        progress: ScopedProgress | None = None,
    ) -> list[RasterizedPage]:
        """Render the selected pages to PNG images in ascending page order.

        Args:
            pdf_bytes: Raw PDF file content.
            selection: 1-based page numbers; None renders every page.
            progress: Stage-scoped progress reporter.

        Returns:
            One RasterizedPage per valid selected page; a placeholder image
            replaces any page that fails to render.

        Raises:
            PdfRasterizationError: if the document cannot be opened at all.
        """
        with self._open(pdf_bytes) as document:
            page_count = self._page_count(document)
            page_numbers = resolve_page_selection(selection, page_count)
            if not page_numbers:
                Log.warning(f"No valid pages selected (document has {page_count} pages)")
                if progress is not None:
                    progress.report("No valid pages selected for conversion.")
                return []

            Log.info(f"PDF loaded ({page_count} pages), converting pages {page_numbers}")
            if progress is not None:
                progress.begin(
                    f"PDF loaded successfully. Converting {len(page_numbers)} pages..."
                )

            pages: list[RasterizedPage] = []
            for index, page_number in enumerate(page_numbers):
                if progress is not None:
                    progress.report(
                        f"Converting page {page_number} to image...", index, len(page_numbers)
                    )
                try:
                    pages.append(self._rasterize_page(document, page_number))
                except Exception as exc:
                    Log.error(
                        f"Failed to convert page {page_number} "
                        f"({type(exc).__name__}: {exc}), using placeholder"
                    )
                    if progress is not None:
                        progress.report(
                            f"Failed to convert page {page_number} to image",
                            index,
                            len(page_numbers),
                        )
                    pages.append(self._placeholder(page_number))

        if progress is not None:
            progress.finish("All pages converted to images successfully.")
        return pages

    def scale_for(self, width_pt: float, height_pt: float) -> float:
        """Fixed scale, raised when needed so both sides reach the pixel floor."""
        scale = self._scale
        if round(width_pt * scale) < self._min_dimension_px or round(height_pt * scale) < self._min_dimension_px:
            scale = max(
                scale,
                self._min_dimension_px / width_pt,
                self._min_dimension_px / height_pt,
            )
        return scale

    def _rasterize_page(self, document: Any, page_number: int) -> RasterizedPage:
        width_pt, height_pt = self._page_size(document, page_number)
        scale = self.scale_for(width_pt, height_pt)
        if scale != self._scale:
            Log.info(f"Adjusted scale to {scale:.3f} for page {page_number} to reach minimum OCR size")
        image_bytes, width_px, height_px = self._render(document, page_number, scale)
        Log.debug(f"Page {page_number} rendered at {width_px}x{height_px} (scale {scale:.3f})")
        return RasterizedPage(
            page_number=page_number,
            image_bytes=image_bytes,
            width=width_px,
            height=height_px,
        )

    def _placeholder(self, page_number: int) -> RasterizedPage:
        return RasterizedPage(
            page_number=page_number,
            image_bytes=render_placeholder(page_number),
            width=PLACEHOLDER_SIZE,
            height=PLACEHOLDER_SIZE,
            is_placeholder=True,
        )

    @abstractmethod
    def _open(self, pdf_bytes: bytes) -> AbstractContextManager[Any]:
        """Open the document. Raises PdfRasterizationError on failure."""

    @abstractmethod
    def _page_count(self, document: Any) -> int:
        """Number of pages in the opened document."""

    @abstractmethod
    def _page_size(self, document: Any, page_number: int) -> tuple[float, float]:
        """Page width and height in PDF points."""

    @abstractmethod
    def _render(self, document: Any, page_number: int, scale: float) -> tuple[bytes, int, int]:
        """Render one page as PNG on a white background; returns (png, width_px, height_px)."""
