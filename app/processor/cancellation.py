import subprocess
import threading
import time
from typing import AnyStr

from app.logging.logger import Log
from app.processor.exceptions import ExtractionCancelledError

POLL_INTERVAL_SECONDS = 0.2


class Deadline:
    """Cancellation signal shared between a request and its blocking calls.

    Fires either when ``cancel()`` is called or when ``timeout_seconds`` have
    elapsed since construction. ``None`` means no time limit.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._expires_at = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )

    @classmethod
    def never(cls) -> "Deadline":
        return cls(None)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def remaining(self) -> float | None:
        """Seconds left before expiry, ``0`` once fired, ``None`` if unbounded."""
        if self._event.is_set():
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def raise_if_cancelled(self, stage: str) -> None:
        if self.cancelled:
            raise ExtractionCancelledError(f"Extraction cancelled during {stage}")


def communicate_until(
    proc: "subprocess.Popen[AnyStr]",
    deadline: Deadline,
    stage: str,
    input: AnyStr | None = None,
) -> tuple[AnyStr, AnyStr]:
    """Wait for ``proc`` to finish, killing it as soon as ``deadline`` fires.

    ``input`` is written to stdin on the first wait only; later polls resume
    the same exchange.
    """
    pending = input
    while True:
        if deadline.cancelled:
            Log.warning(f"Deadline fired, killing pid {proc.pid} during {stage}")
            proc.kill()
            proc.communicate()
            raise ExtractionCancelledError(f"Extraction cancelled during {stage}")
        try:
            return proc.communicate(input=pending, timeout=POLL_INTERVAL_SECONDS)
        except subprocess.TimeoutExpired:
            pending = None
