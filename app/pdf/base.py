from abc import ABC, abstractmethod
from pathlib import Path

from app.processor.cancellation import Deadline
from app.processor.models import RasterizedPage


class BasePdfInspector(ABC):
    """Contract for adapters that read PDF metadata without rendering."""

    @abstractmethod
    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages in the document.

        Raises:
            MalformedDocumentError: if the bytes cannot be parsed as a PDF.
        """


class BasePageRasterizer(ABC):
    """Contract for adapters that render a single PDF page to an image."""

    @abstractmethod
    def rasterize(
        self,
        pdf_path: Path,
        page_number: int,
        total_pages: int,
        output_path: Path,
        deadline: Deadline,
    ) -> RasterizedPage:
        """Render 1-indexed ``page_number`` of ``pdf_path`` into ``output_path``.

        Raises:
            MissingSystemDependencyError: if the rendering tool is not installed.
            RasterizationError: if rendering fails or produces no output.
            ExtractionCancelledError: if ``deadline`` fires while rendering.
        """
