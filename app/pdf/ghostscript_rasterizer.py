import shutil
import subprocess
from pathlib import Path

from app.logging.logger import Log
from app.pdf.base import BasePageRasterizer
from app.processor.cancellation import Deadline, communicate_until
from app.processor.exceptions import (
    MissingSystemDependencyError,
    RasterizationError,
)
from app.processor.models import RasterizedPage


class GhostscriptRasterizer(BasePageRasterizer):
    """Renders one PDF page to PNG by running Ghostscript as a subprocess.

    Arguments are passed as a discrete argv list, never through a shell, so
    paths derived from uploads cannot inject commands.
    """

    DEVICE = "png16m"

    def __init__(self, command: str = "gs", dpi: int = 150) -> None:
        self._command = command
        self._dpi = dpi

    def build_command(self, pdf_path: Path, page_number: int, output_path: Path) -> list[str]:
        return [
            self._command,
            "-dSAFER",
            "-dBATCH",
            "-dNOPAUSE",
            "-dQUIET",
            f"-sDEVICE={self.DEVICE}",
            f"-r{self._dpi}",
            f"-dFirstPage={page_number}",
            f"-dLastPage={page_number}",
            f"-sOutputFile={output_path}",
            str(pdf_path),
        ]

    def rasterize(
        self,
        pdf_path: Path,
        page_number: int,
        total_pages: int,
        output_path: Path,
        deadline: Deadline,
    ) -> RasterizedPage:
        cmd = self.build_command(pdf_path, page_number, output_path)
        Log.info(f"Rasterizing page {page_number}/{total_pages} at {self._dpi} DPI")
        deadline.raise_if_cancelled("rasterization")

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as exc:
            self._raise_if_tool_missing()
            raise RasterizationError(f"Failed to start {self._command}: {exc}") from exc

        stdout, stderr = communicate_until(proc, deadline, "rasterization")

        if proc.returncode != 0:
            self._raise_if_tool_missing()
            detail = (stderr or stdout or "").strip()
            Log.error(
                f"{self._command} exited with code {proc.returncode} "
                f"on page {page_number}: {detail}"
            )
            raise RasterizationError(
                f"PDF rasterization failed (exit code {proc.returncode}): {detail}"
            )

        if not output_path.exists() or output_path.stat().st_size == 0:
            Log.error(f"{self._command} produced no output for page {page_number}")
            raise RasterizationError(
                f"PDF rasterization produced no image for page {page_number}"
            )

        return RasterizedPage(
            path=output_path, page_number=page_number, total_pages=total_pages
        )

    def _raise_if_tool_missing(self) -> None:
        if shutil.which(self._command) is None:
            Log.error(f"Rasterization tool '{self._command}' not found on PATH")
            raise MissingSystemDependencyError(self._command)
