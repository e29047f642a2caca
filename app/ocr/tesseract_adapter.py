import io
import subprocess

import pytesseract
from PIL import Image, UnidentifiedImageError

from app.logging.logger import Log
from app.ocr.base import BaseOcrBackend
from app.ocr.progress import ProgressStream
from app.processor.cancellation import Deadline, communicate_until
from app.processor.exceptions import (
    MalformedDocumentError,
    MissingOcrEngineError,
    OcrBackendError,
)


class TesseractAdapter(BaseOcrBackend):
    """Recognizes text by running the Tesseract CLI as a killable subprocess.

    The image is piped through stdin and the text read back from stdout, so
    nothing extra touches the disk. pytesseract is only consulted to tell a
    missing engine apart from an engine failure.
    """

    def __init__(self, language: str = "eng", tesseract_cmd: str = "tesseract") -> None:
        self._language = language
        self._tesseract_cmd = tesseract_cmd
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def build_command(self) -> list[str]:
        return [self._tesseract_cmd, "stdin", "stdout", "-l", self._language]

    def recognize(
        self,
        image_bytes: bytes,
        deadline: Deadline,
        progress: ProgressStream | None = None,
    ) -> str:
        deadline.raise_if_cancelled("recognition")
        self._notify(progress, "loading image", 0.0)
        self._check_image(image_bytes)

        self._notify(progress, "recognizing text", 0.1)
        deadline.raise_if_cancelled("recognition")
        try:
            proc = subprocess.Popen(
                self.build_command(),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            self._raise_if_engine_missing()
            raise OcrBackendError(f"Failed to start {self._tesseract_cmd}: {exc}") from exc

        stdout, stderr = communicate_until(proc, deadline, "recognition", input=image_bytes)

        if proc.returncode != 0:
            self._raise_if_engine_missing()
            detail = stderr.decode("utf-8", errors="replace").strip()
            Log.error(f"{self._tesseract_cmd} exited with code {proc.returncode}: {detail}")
            raise OcrBackendError(f"Tesseract failed (exit code {proc.returncode}): {detail}")

        self._notify(progress, "done", 1.0)
        return stdout.decode("utf-8", errors="replace")

    @staticmethod
    def _check_image(image_bytes: bytes) -> None:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                image.load()
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise MalformedDocumentError(f"Cannot decode image for OCR: {exc}") from exc

    def _raise_if_engine_missing(self) -> None:
        try:
            pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as exc:
            Log.error(f"OCR engine '{self._tesseract_cmd}' not found on PATH")
            raise MissingOcrEngineError(self._tesseract_cmd) from exc

    @staticmethod
    def _notify(progress: ProgressStream | None, status: str, value: float) -> None:
        if progress is not None:
            progress.publish(status, value)
