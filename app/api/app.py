import asyncio
import uuid

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from app.api.errors import register_error_handlers
from app.api.schemas import HealthResponse, OcrResponse
from app.config.settings import Settings
from app.logging.logger import Log
from app.ocr.progress import ProgressStream
from app.processor.cancellation import Deadline
from app.processor.models import ExtractionResult, MediaType, UploadedDocument
from app.processor.orchestrator import ExtractionOrchestrator, build_orchestrator

SERVICE_NAME = "docextract-ocr"


def _log_progress(stream: ProgressStream) -> None:
    for event in stream:
        Log.debug(f"OCR {event.status} ({event.progress:.0%})")


def _extract(
    orchestrator: ExtractionOrchestrator,
    document: UploadedDocument,
    page: int | None,
    deadline: Deadline,
    progress: ProgressStream,
) -> ExtractionResult:
    try:
        return orchestrator.extract(document, page, deadline, progress)
    finally:
        progress.close()


def create_app(
    settings: Settings | None = None,
    orchestrator: ExtractionOrchestrator | None = None,
) -> FastAPI:
    """Build the HTTP boundary around the extraction pipeline."""
    settings = settings or Settings()
    app = FastAPI(title="Document Text Extraction", version="0.1.0")
    app.state.settings = settings
    app.state.orchestrator = orchestrator or build_orchestrator(settings)

    origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/")
    def root() -> dict[str, object]:
        return {
            "message": "Document text extraction service is running",
            "endpoints": {"POST /ocr": "Upload file for OCR", "GET /health": "Health check"},
        }

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(service=SERVICE_NAME)

    @app.post(
        "/ocr",
        response_model=OcrResponse,
        response_model_exclude_none=True,
    )
    async def ocr(
        request: Request,
        file: UploadFile | None = File(None),
        page_form: int | None = Form(None, alias="page"),
        page_query: int | None = Query(None, alias="page"),
    ) -> OcrResponse:
        if file is None:
            raise HTTPException(status_code=400, detail="No file uploaded")

        with Log.request_context(uuid.uuid4().hex[:8]):
            media_type = MediaType.from_mime(file.content_type or "")
            orchestrator: ExtractionOrchestrator = request.app.state.orchestrator
            limit = orchestrator.config.max_upload_bytes
            content = await file.read(limit + 1)
            if len(content) > limit:
                Log.warning(f"Rejected '{file.filename}': exceeds {limit} bytes")
                raise HTTPException(
                    status_code=413, detail=f"File too large. Maximum size is {limit} bytes"
                )

            document = UploadedDocument(
                content=content, media_type=media_type, filename=file.filename or ""
            )
            Log.info(f"Processing file: {document.filename} ({media_type.mime})")

            deadline = Deadline(settings.request_timeout_seconds)
            progress = ProgressStream()
            page = page_form if page_form is not None else page_query
            try:
                result, _ = await asyncio.gather(
                    run_in_threadpool(
                        _extract, orchestrator, document, page, deadline, progress
                    ),
                    run_in_threadpool(_log_progress, progress),
                )
            except asyncio.CancelledError:
                deadline.cancel()
                progress.cancel()
                raise

        return OcrResponse(
            text=result.text,
            length=result.length,
            confidence=result.confidence,
            page_processed=result.page_processed,
            total_pages=result.total_pages,
            warning=result.warning,
        )

    return app
