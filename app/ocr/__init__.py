from app.ocr.base import BaseOcrBackend
from app.ocr.progress import ProgressEvent, ProgressStream
from app.ocr.tesseract_adapter import TesseractAdapter

__all__ = ["BaseOcrBackend", "ProgressEvent", "ProgressStream", "TesseractAdapter"]
