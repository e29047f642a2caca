from app.config.settings import Settings
from app.pdf.base import BasePageRasterizer, BasePdfInspector
from app.pdf.ghostscript_rasterizer import GhostscriptRasterizer
from app.pdf.pdfplumber_adapter import PdfPlumberAdapter
from app.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfInspectorFactory:
    """Creates the correct PDF metadata reader based on settings."""

    ADAPTERS: dict[str, type[BasePdfInspector]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfInspector:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()


def build_rasterizer(settings: Settings) -> BasePageRasterizer:
    return GhostscriptRasterizer(command=settings.rasterizer_cmd, dpi=settings.raster_dpi)
