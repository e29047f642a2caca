from app.config.settings import PipelineConfig, Settings
from app.logging.logger import Log
from app.ocr.base import BaseOcrBackend
from app.ocr.progress import ProgressStream
from app.ocr.tesseract_adapter import TesseractAdapter
from app.pdf.base import BasePageRasterizer, BasePdfInspector
from app.pdf.factory import PdfInspectorFactory, build_rasterizer
from app.processor.artifacts import ArtifactTracker
from app.processor.cancellation import Deadline
from app.processor.exceptions import PipelineError
from app.processor.models import ExtractionResult, UploadedDocument
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    ClassifyDocumentStep,
    RasterizeStep,
    RecognizeTextStep,
    ResolvePageStep,
    ScoreConfidenceStep,
    StageUploadStep,
)


class ExtractionOrchestrator:
    """Runs one document through the extraction pipeline.

    Pipeline: classify -> stage upload -> resolve page -> rasterize -> OCR -> score.
    Page resolution and rasterization only apply to PDFs. Every temp file is
    tracked per call and removed before ``extract`` returns or raises.
    """

    def __init__(
        self,
        config: PipelineConfig,
        inspector: BasePdfInspector,
        rasterizer: BasePageRasterizer,
        ocr_backend: BaseOcrBackend,
    ) -> None:
        self._config = config
        self._steps: list[PipelineStep] = [
            ClassifyDocumentStep(config),
            StageUploadStep(),
            ResolvePageStep(inspector),
            RasterizeStep(rasterizer),
            RecognizeTextStep(ocr_backend),
            ScoreConfidenceStep(),
        ]

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def extract(
        self,
        document: UploadedDocument,
        page_selection: int | None = None,
        deadline: Deadline | None = None,
        progress: ProgressStream | None = None,
    ) -> ExtractionResult:
        """Extract text and a confidence score from ``document``.

        Raises:
            PipelineError: any classified failure; temp files are already
                released when it propagates.
        """
        try:
            with ArtifactTracker(self._config.temp_dir_root) as tracker:
                context = PipelineContext(
                    document=document,
                    tracker=tracker,
                    deadline=deadline or Deadline.never(),
                    progress=progress,
                    page_selection=page_selection,
                )
                try:
                    for step in self._steps:
                        context = step.run(context)
                except PipelineError as exc:
                    if exc.client_error:
                        Log.warning(f"Rejected '{document.filename}': {exc.detail}")
                    else:
                        Log.error(
                            f"Extraction failed for '{document.filename}' "
                            f"({type(exc).__name__}): {exc.detail}"
                        )
                    raise
        finally:
            if progress is not None:
                progress.close()

        return ExtractionResult(
            text=context.text,
            confidence=context.confidence,
            page_processed=context.page_number if context.is_pdf else None,
            total_pages=context.total_pages if context.is_pdf else None,
            warning=context.warning,
        )


def build_orchestrator(settings: Settings) -> ExtractionOrchestrator:
    """Build an ExtractionOrchestrator with all required adapters."""
    return ExtractionOrchestrator(
        config=PipelineConfig.from_settings(settings),
        inspector=PdfInspectorFactory.create(settings),
        rasterizer=build_rasterizer(settings),
        ocr_backend=TesseractAdapter(
            language=settings.ocr_language,
            tesseract_cmd=settings.tesseract_cmd,
        ),
    )
