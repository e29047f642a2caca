import io
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image, ImageDraw
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.config.settings import PipelineConfig


def _pdf_with_pages(lines: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for line in lines:
        c.setFont("Helvetica", 28)
        c.drawString(72, 680, line)
        c.showPage()
    c.save()
    return buf.getvalue()


def _png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _pdf_with_pages(["Hello PDF World"])


@pytest.fixture()
def three_page_pdf_bytes() -> bytes:
    """Generate a three-page PDF with distinct text on each page."""
    return _pdf_with_pages(["PAGE ONE NAME", "PAGE TWO EMAIL", "PAGE THREE ADDRESS"])


@pytest.fixture()
def text_png_bytes() -> bytes:
    """Render large black text on a white canvas."""
    image = Image.new("RGB", (1400, 300), "white")
    draw = ImageDraw.Draw(image)
    draw.text((40, 100), "APPLICATION FORM NAME EMAIL", fill="black", font_size=64)
    return _png(image)


@pytest.fixture()
def blank_png_bytes() -> bytes:
    return _png(Image.new("RGB", (400, 300), "white"))


@pytest.fixture()
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(
        max_upload_bytes=10 * 1024 * 1024,
        accepted_media_types=("application/pdf", "image/jpeg", "image/png"),
        raster_dpi=150,
        temp_dir_root=tmp_path / "work",
    )


@pytest.fixture()
def leftover_files() -> Callable[[Path], list[Path]]:
    """Return a helper listing everything left under a temp root."""

    def _list(root: Path) -> list[Path]:
        if not root.exists():
            return []
        return list(root.rglob("*"))

    return _list
