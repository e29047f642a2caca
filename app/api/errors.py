from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.schemas import ErrorResponse
from app.logging.logger import Log
from app.processor.exceptions import (
    ExtractionCancelledError,
    PipelineError,
    UnsupportedMediaTypeError,
)


def status_for(exc: PipelineError) -> int:
    """HTTP status for a pipeline failure: 4xx for bad input, 5xx otherwise."""
    if isinstance(exc, UnsupportedMediaTypeError):
        return 415
    if isinstance(exc, ExtractionCancelledError):
        return 504
    if exc.client_error:
        return 400
    return 500


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(_request: Request, exc: PipelineError) -> JSONResponse:
        return error_response(status_for(exc), exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404:
            return error_response(404, "Endpoint not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        return error_response(400, f"Invalid request parameters: {fields}")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        Log.exception(f"Unhandled error: {exc}")
        return error_response(500, "Internal server error")
