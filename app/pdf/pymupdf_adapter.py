import pymupdf

from app.pdf.base import BasePdfInspector
from app.processor.exceptions import MalformedDocumentError


class PyMuPdfAdapter(BasePdfInspector):
    """Reads PDF page count using PyMuPDF."""

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                if doc.needs_pass:
                    raise MalformedDocumentError("PDF is encrypted")
                count = doc.page_count
        except MalformedDocumentError:
            raise
        except Exception as exc:
            raise MalformedDocumentError(f"Cannot read PDF metadata: {exc}") from exc
        if count < 1:
            raise MalformedDocumentError("PDF contains no pages")
        return count
