from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from app.processor.exceptions import UnsupportedMediaTypeError


class MediaType(str, Enum):
    """Payload kinds the extraction pipeline understands."""

    PDF = "pdf"
    JPEG = "jpeg"
    PNG = "png"

    @classmethod
    def from_mime(cls, mime_type: str) -> "MediaType":
        """Map a declared content type to a media type.

        Raises:
            UnsupportedMediaTypeError: for anything but PDF, JPEG or PNG.
        """
        normalized = (mime_type or "").split(";")[0].strip().lower()
        media_type = _MIME_TO_MEDIA_TYPE.get(normalized)
        if media_type is None:
            raise UnsupportedMediaTypeError(
                f"Invalid file type '{mime_type}'. Only PDF, JPG, PNG allowed."
            )
        return media_type

    @property
    def mime(self) -> str:
        return _MEDIA_TYPE_TO_MIME[self]

    @property
    def is_image(self) -> bool:
        return self is not MediaType.PDF

    @property
    def suffix(self) -> str:
        return {"pdf": ".pdf", "jpeg": ".jpg", "png": ".png"}[self.value]


_MEDIA_TYPE_TO_MIME = {
    MediaType.PDF: "application/pdf",
    MediaType.JPEG: "image/jpeg",
    MediaType.PNG: "image/png",
}

_MIME_TO_MEDIA_TYPE = {
    "application/pdf": MediaType.PDF,
    "image/jpeg": MediaType.JPEG,
    "image/jpg": MediaType.JPEG,
    "image/png": MediaType.PNG,
}


@dataclass(frozen=True)
class UploadedDocument:
    """Uploaded payload as received by the boundary.

    ``filename`` is kept for diagnostics only.
    """

    content: bytes
    media_type: MediaType
    filename: str = ""

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class RasterizedPage:
    """One PDF page rendered to PNG, written to a request-owned temp file."""

    path: Path
    page_number: int
    total_pages: int

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class ExtractionResult:
    """Terminal value of one extraction request.

    ``page_processed`` and ``total_pages`` are only set for PDF input.
    ``warning`` is set, with confidence 0, when no text was recognized.
    """

    text: str
    confidence: int
    page_processed: int | None = None
    total_pages: int | None = None
    warning: str | None = None

    @property
    def length(self) -> int:
        return len(self.text)
