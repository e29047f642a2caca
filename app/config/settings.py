import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 3000
    cors_allow_origins: str = "*"

    max_upload_bytes: PositiveInt = 10 * 1024 * 1024
    accepted_media_types: list[str] = [
        "application/pdf",
        "image/jpeg",
        "image/png",
    ]
    temp_dir_root: Path = Path(tempfile.gettempdir()) / "docextract"
    request_timeout_seconds: float | None = None

    pdf_engine: str = "pdfplumber"
    rasterizer_cmd: str = "gs"
    raster_dpi: PositiveInt = 150

    ocr_language: str = "eng"
    tesseract_cmd: str = "tesseract"


@dataclass(frozen=True)
class PipelineConfig:
    """Explicit configuration handed to the extraction orchestrator."""

    max_upload_bytes: int
    accepted_media_types: tuple[str, ...]
    raster_dpi: int
    temp_dir_root: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        return cls(
            max_upload_bytes=settings.max_upload_bytes,
            accepted_media_types=tuple(settings.accepted_media_types),
            raster_dpi=settings.raster_dpi,
            temp_dir_root=Path(settings.temp_dir_root),
        )
