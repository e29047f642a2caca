from app.config.settings import PipelineConfig
from app.logging.logger import Log
from app.ocr.base import BaseOcrBackend
from app.pdf.base import BasePageRasterizer, BasePdfInspector
from app.processor import confidence
from app.processor.exceptions import (
    InvalidPageRequestError,
    OcrBackendError,
    PipelineError,
    RasterizationError,
    UnsupportedMediaTypeError,
)
from app.processor.pipeline import PipelineContext, PipelineStep

NO_TEXT_WARNING = "No text detected in document"


class ClassifyDocumentStep(PipelineStep):
    def __init__(self, config: PipelineConfig) -> None:
        self._config = config

    def run(self, context: PipelineContext) -> PipelineContext:
        media_type = context.document.media_type
        if media_type.mime not in self._config.accepted_media_types:
            raise UnsupportedMediaTypeError(f"Media type '{media_type.mime}' is not accepted")
        Log.info(
            f"Processing '{context.document.filename}' as {media_type.value} "
            f"({context.document.size_bytes} bytes)"
        )
        return context


class StageUploadStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.upload_path = context.tracker.stage_upload(context.document)
        return context


class ResolvePageStep(PipelineStep):
    """Counts PDF pages and validates the requested page; no-op for images."""

    def __init__(self, inspector: BasePdfInspector) -> None:
        self._inspector = inspector

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.is_pdf:
            return context
        total_pages = self._inspector.page_count(context.document.content)
        requested = context.page_selection if context.page_selection is not None else 1
        if not 1 <= requested <= total_pages:
            raise InvalidPageRequestError(requested, total_pages)
        context.total_pages = total_pages
        context.page_number = requested
        Log.info(f"Selected page {requested} of {total_pages}")
        return context


class RasterizeStep(PipelineStep):
    """Renders the selected PDF page; images pass through unchanged."""

    def __init__(self, rasterizer: BasePageRasterizer) -> None:
        self._rasterizer = rasterizer

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.is_pdf:
            context.image_bytes = context.document.content
            return context
        if context.upload_path is None or context.page_number is None:
            raise ValueError("PipelineContext must be staged and paged before rasterization")
        if context.total_pages is None:
            raise ValueError("PipelineContext.total_pages must be set before rasterization")

        context.deadline.raise_if_cancelled("rasterization")
        output_path = context.tracker.register(context.tracker.new_path(".png"))
        try:
            page = self._rasterizer.rasterize(
                context.upload_path,
                context.page_number,
                context.total_pages,
                output_path,
                context.deadline,
            )
            context.image_bytes = page.read_bytes()
        except PipelineError:
            raise
        except Exception as exc:
            raise RasterizationError(f"PDF rasterization failed: {exc}") from exc
        Log.info(f"Rasterized page {page.page_number} ({len(context.image_bytes)} bytes)")
        return context


class RecognizeTextStep(PipelineStep):
    def __init__(self, ocr_backend: BaseOcrBackend) -> None:
        self._ocr_backend = ocr_backend

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            context.text = self._ocr_backend.recognize(
                context.image_bytes, context.deadline, context.progress
            )
        except PipelineError:
            raise
        except Exception as exc:
            raise OcrBackendError(f"OCR processing failed: {exc}") from exc
        context.deadline.raise_if_cancelled("recognition")
        return context


class ScoreConfidenceStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.text.strip():
            context.text = ""
            context.confidence = 0
            context.warning = NO_TEXT_WARNING
            Log.warning("OCR found no text")
            return context
        context.confidence = confidence.score(context.text)
        Log.info(
            f"Extracted {len(context.text)} chars with confidence {context.confidence}"
        )
        return context
