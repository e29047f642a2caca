import shutil
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api.app import create_app
from app.config.settings import Settings


def _require(tool: str) -> None:
    if shutil.which(tool) is None:
        pytest.skip(f"'{tool}' is not installed on this host")


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(temp_dir_root=tmp_path / "work")


@pytest.fixture()
def ocr_client(test_settings: Settings) -> TestClient:
    """Client wired to real Ghostscript and Tesseract."""
    _require("gs")
    _require("tesseract")
    return TestClient(create_app(test_settings))


@pytest.fixture()
def client_without_ghostscript(tmp_path: Path) -> TestClient:
    settings = Settings(
        temp_dir_root=tmp_path / "work",
        rasterizer_cmd="gs-not-installed-on-this-host",
    )
    return TestClient(create_app(settings))
