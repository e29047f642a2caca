from abc import ABC, abstractmethod

from app.ocr.progress import ProgressStream
from app.processor.cancellation import Deadline


class BaseOcrBackend(ABC):
    """Contract for text recognition backends.

    Backends only ever receive raster image bytes; PDFs are rendered to an
    image before they reach this layer.
    """

    @abstractmethod
    def recognize(
        self,
        image_bytes: bytes,
        deadline: Deadline,
        progress: ProgressStream | None = None,
    ) -> str:
        """Return the text recognized in ``image_bytes`` (possibly empty).

        Raises:
            MalformedDocumentError: if ``image_bytes`` cannot be decoded.
            OcrBackendError: if recognition fails.
            MissingOcrEngineError: if the OCR engine is not installed.
            ExtractionCancelledError: if ``deadline`` fires first.
        """
