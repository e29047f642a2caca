import io

import pdfplumber

from app.pdf.base import BasePdfInspector
from app.processor.exceptions import MalformedDocumentError


class PdfPlumberAdapter(BasePdfInspector):
    """Reads PDF page count using pdfplumber."""

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                count = len(pdf.pages)
        except Exception as exc:
            raise MalformedDocumentError(f"Cannot read PDF metadata: {exc}") from exc
        if count < 1:
            raise MalformedDocumentError("PDF contains no pages")
        return count
