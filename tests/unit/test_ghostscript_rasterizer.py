import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from app.pdf.ghostscript_rasterizer import GhostscriptRasterizer
from app.processor.cancellation import Deadline
from app.processor.exceptions import (
    ExtractionCancelledError,
    MissingSystemDependencyError,
    RasterizationError,
)


def _make_proc(returncode: int = 0, stderr: str = "") -> MagicMock:
    proc = MagicMock()
    proc.pid = 4242
    proc.returncode = returncode
    proc.communicate.return_value = ("", stderr)
    return proc


def _writes_output(output: Path, content: bytes, proc: MagicMock):  # type: ignore[no-untyped-def]
    def _popen(*_args, **_kwargs):  # type: ignore[no-untyped-def]
        output.write_bytes(content)
        return proc

    return _popen


class TestBuildCommand:
    def test_restricts_output_to_one_page(self) -> None:
        rasterizer = GhostscriptRasterizer(command="gs", dpi=150)

        cmd = rasterizer.build_command(Path("/w/in.pdf"), 2, Path("/w/out.png"))

        assert cmd[0] == "gs"
        assert "-dFirstPage=2" in cmd
        assert "-dLastPage=2" in cmd
        assert "-r150" in cmd
        assert "-dSAFER" in cmd
        assert "-sOutputFile=/w/out.png" in cmd
        assert cmd[-1] == "/w/in.pdf"

    def test_hostile_path_stays_a_single_argument(self) -> None:
        rasterizer = GhostscriptRasterizer()
        hostile = Path("/w/x; rm -rf ~.pdf")

        cmd = rasterizer.build_command(hostile, 1, Path("/w/out.png"))

        assert cmd[-1] == str(hostile)


class TestRasterizeSuccess:
    def test_returns_rasterized_page(self, tmp_path: Path) -> None:
        output = tmp_path / "out.png"
        proc = _make_proc()
        rasterizer = GhostscriptRasterizer()

        with patch(
            "app.pdf.ghostscript_rasterizer.subprocess.Popen",
            side_effect=_writes_output(output, b"\x89PNG-data", proc),
        ) as mock_popen:
            page = rasterizer.rasterize(tmp_path / "in.pdf", 2, 3, output, Deadline.never())

        assert page.path == output
        assert page.page_number == 2
        assert page.total_pages == 3
        assert page.read_bytes() == b"\x89PNG-data"
        args, kwargs = mock_popen.call_args
        assert isinstance(args[0], list)
        assert kwargs.get("shell", False) is False


class TestRasterizeFailures:
    def test_missing_tool_on_spawn(self, tmp_path: Path) -> None:
        rasterizer = GhostscriptRasterizer(command="gs")

        with (
            patch(
                "app.pdf.ghostscript_rasterizer.subprocess.Popen",
                side_effect=FileNotFoundError("gs"),
            ),
            patch("app.pdf.ghostscript_rasterizer.shutil.which", return_value=None),
        ):
            with pytest.raises(MissingSystemDependencyError, match="'gs'") as exc_info:
                rasterizer.rasterize(
                    tmp_path / "in.pdf", 1, 1, tmp_path / "out.png", Deadline.never()
                )

        assert exc_info.value.tool_name == "gs"
        assert not exc_info.value.client_error

    def test_spawn_error_with_tool_present(self, tmp_path: Path) -> None:
        rasterizer = GhostscriptRasterizer()

        with (
            patch(
                "app.pdf.ghostscript_rasterizer.subprocess.Popen",
                side_effect=PermissionError("denied"),
            ),
            patch("app.pdf.ghostscript_rasterizer.shutil.which", return_value="/usr/bin/gs"),
        ):
            with pytest.raises(RasterizationError, match="Failed to start"):
                rasterizer.rasterize(
                    tmp_path / "in.pdf", 1, 1, tmp_path / "out.png", Deadline.never()
                )

    def test_nonzero_exit_reports_stderr(self, tmp_path: Path) -> None:
        rasterizer = GhostscriptRasterizer()
        proc = _make_proc(returncode=1, stderr="Error: /syntaxerror in pdf")

        with (
            patch("app.pdf.ghostscript_rasterizer.subprocess.Popen", return_value=proc),
            patch("app.pdf.ghostscript_rasterizer.shutil.which", return_value="/usr/bin/gs"),
        ):
            with pytest.raises(RasterizationError, match="exit code 1.*syntaxerror"):
                rasterizer.rasterize(
                    tmp_path / "in.pdf", 1, 1, tmp_path / "out.png", Deadline.never()
                )

    def test_nonzero_exit_with_tool_gone_is_missing_dependency(self, tmp_path: Path) -> None:
        rasterizer = GhostscriptRasterizer()
        proc = _make_proc(returncode=127)

        with (
            patch("app.pdf.ghostscript_rasterizer.subprocess.Popen", return_value=proc),
            patch("app.pdf.ghostscript_rasterizer.shutil.which", return_value=None),
        ):
            with pytest.raises(MissingSystemDependencyError):
                rasterizer.rasterize(
                    tmp_path / "in.pdf", 1, 1, tmp_path / "out.png", Deadline.never()
                )

    def test_missing_output_is_failure(self, tmp_path: Path) -> None:
        rasterizer = GhostscriptRasterizer()

        with patch(
            "app.pdf.ghostscript_rasterizer.subprocess.Popen", return_value=_make_proc()
        ):
            with pytest.raises(RasterizationError, match="no image"):
                rasterizer.rasterize(
                    tmp_path / "in.pdf", 1, 1, tmp_path / "out.png", Deadline.never()
                )

    def test_empty_output_is_failure(self, tmp_path: Path) -> None:
        output = tmp_path / "out.png"
        rasterizer = GhostscriptRasterizer()

        with patch(
            "app.pdf.ghostscript_rasterizer.subprocess.Popen",
            side_effect=_writes_output(output, b"", _make_proc()),
        ):
            with pytest.raises(RasterizationError, match="no image"):
                rasterizer.rasterize(tmp_path / "in.pdf", 1, 1, output, Deadline.never())


class TestRasterizeCancellation:
    def test_already_cancelled_skips_tool(self, tmp_path: Path) -> None:
        rasterizer = GhostscriptRasterizer()
        deadline = Deadline.never()
        deadline.cancel()

        with patch("app.pdf.ghostscript_rasterizer.subprocess.Popen") as mock_popen:
            with pytest.raises(ExtractionCancelledError, match="rasterization"):
                rasterizer.rasterize(
                    tmp_path / "in.pdf", 1, 1, tmp_path / "out.png", deadline
                )

        mock_popen.assert_not_called()

    def test_keeps_waiting_while_deadline_open(self, tmp_path: Path) -> None:
        output = tmp_path / "out.png"
        rasterizer = GhostscriptRasterizer()
        proc = _make_proc()
        proc.communicate.side_effect = [
            subprocess.TimeoutExpired(cmd="gs", timeout=0.2),
            subprocess.TimeoutExpired(cmd="gs", timeout=0.2),
            ("", ""),
        ]

        with patch(
            "app.pdf.ghostscript_rasterizer.subprocess.Popen",
            side_effect=_writes_output(output, b"png", proc),
        ):
            page = rasterizer.rasterize(tmp_path / "in.pdf", 1, 1, output, Deadline.never())

        assert page.page_number == 1
        proc.kill.assert_not_called()

    def test_kills_process_when_deadline_fires(self, tmp_path: Path) -> None:
        rasterizer = GhostscriptRasterizer()
        proc = _make_proc()
        deadline = Deadline.never()

        def _slow_communicate(input=None, timeout=None):  # type: ignore[no-untyped-def]
            if timeout is None:
                return ("", "")
            deadline.cancel()
            raise subprocess.TimeoutExpired(cmd="gs", timeout=timeout)

        proc.communicate.side_effect = _slow_communicate

        with patch("app.pdf.ghostscript_rasterizer.subprocess.Popen", return_value=proc):
            with pytest.raises(ExtractionCancelledError, match="rasterization"):
                rasterizer.rasterize(
                    tmp_path / "in.pdf", 1, 1, tmp_path / "out.png", deadline
                )

        proc.kill.assert_called_once()
