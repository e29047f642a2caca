import uuid
from pathlib import Path
from types import TracebackType

from app.logging.logger import Log
from app.processor.models import UploadedDocument


class ArtifactTracker:
    """Owns every temporary file created while serving one request.

    Files live under a per-request directory named with a random suffix so
    concurrent requests never collide. ``release()`` removes everything that
    was registered exactly once; removal failures are logged, never raised,
    so they cannot replace the result or error being returned.

    Usable as a context manager::

        with ArtifactTracker(root) as tracker:
            path = tracker.stage_upload(document)
            ...
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._request_dir: Path | None = None
        self._artifacts: list[Path] = []
        self._released = False

    def __enter__(self) -> "ArtifactTracker":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    @property
    def artifacts(self) -> list[Path]:
        return list(self._artifacts)

    @property
    def request_dir(self) -> Path:
        if self._request_dir is None:
            self._request_dir = self._root / f"req-{uuid.uuid4().hex}"
            self._request_dir.mkdir(parents=True, exist_ok=False)
        return self._request_dir

    def new_path(self, suffix: str) -> Path:
        """Return a unique, not yet existing path inside the request directory."""
        if self._released:
            raise RuntimeError("ArtifactTracker already released")
        return self.request_dir / f"{uuid.uuid4().hex}{suffix}"

    def register(self, path: Path) -> Path:
        self._artifacts.append(path)
        Log.debug(f"Registered artifact {path.name}")
        return path

    def stage_upload(self, document: UploadedDocument) -> Path:
        """Write the uploaded payload to disk and register it."""
        path = self.new_path(document.media_type.suffix)
        self.register(path)
        path.write_bytes(document.content)
        Log.debug(f"Staged upload '{document.filename}' ({document.size_bytes} bytes)")
        return path

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        for path in self._artifacts:
            try:
                path.unlink()
            except FileNotFoundError:
                Log.warning(f"Artifact {path.name} was already removed")
            except OSError as exc:
                Log.warning(f"Failed to remove artifact {path}: {exc}")
        if self._request_dir is not None:
            try:
                self._request_dir.rmdir()
            except OSError as exc:
                Log.warning(f"Failed to remove request dir {self._request_dir}: {exc}")
        Log.debug(f"Released {len(self._artifacts)} artifact(s)")
