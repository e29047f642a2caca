class PipelineError(Exception):
    """Base exception for every extraction pipeline failure.

    ``client_error`` separates bad input (reported verbatim, never retried)
    from environment or backend failures that need operator attention.
    """

    client_error: bool = False

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class UnsupportedMediaTypeError(PipelineError):
    """Raised when a payload's declared media type is not accepted."""

    client_error = True


class InvalidPageRequestError(PipelineError):
    """Raised when the requested page lies outside ``1..total_pages``."""

    client_error = True

    def __init__(self, requested: int, total_pages: int) -> None:
        super().__init__(
            f"Invalid page {requested}: document has {total_pages} page(s), "
            f"valid range is 1-{total_pages}"
        )
        self.requested = requested
        self.total_pages = total_pages


class MalformedDocumentError(PipelineError):
    """Raised when an upload cannot be parsed as the type it claims to be."""

    client_error = True


class RasterizationError(PipelineError):
    """Raised when a PDF page cannot be rendered to an image."""


class MissingSystemDependencyError(RasterizationError):
    """Raised when the rasterization tool is not installed on the host."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(_missing_tool_message(tool_name))
        self.tool_name = tool_name


class OcrBackendError(PipelineError):
    """Raised when text recognition fails."""


class MissingOcrEngineError(OcrBackendError):
    """Raised when the OCR engine binary is not installed on the host."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(_missing_tool_message(tool_name))
        self.tool_name = tool_name


class ExtractionCancelledError(PipelineError):
    """Raised when the request deadline passes or the caller cancels."""


def _missing_tool_message(tool_name: str) -> str:
    return (
        f"Required system tool '{tool_name}' was not found on PATH; "
        f"install '{tool_name}' on the host and restart the service"
    )
