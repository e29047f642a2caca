import queue
import threading
from collections.abc import Iterator
from dataclasses import dataclass

from app.logging.logger import Log


@dataclass(frozen=True)
class ProgressEvent:
    status: str
    progress: float


class ProgressStream:
    """Observable, cancellable stream of OCR progress events.

    Producers call ``publish`` which never blocks; when the buffer is full the
    event is dropped. Consumers iterate the stream from another thread until
    the producer calls ``close`` or the consumer calls ``cancel``. Nothing in
    the pipeline depends on events being delivered.
    """

    def __init__(self, maxsize: int = 64) -> None:
        self._queue: queue.Queue[ProgressEvent] = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()
        self._cancelled = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def publish(self, status: str, progress: float) -> None:
        if self.closed or self.cancelled:
            return
        try:
            self._queue.put_nowait(ProgressEvent(status=status, progress=progress))
        except queue.Full:
            Log.debug(f"Progress buffer full, dropped '{status}'")

    def close(self) -> None:
        self._closed.set()

    def cancel(self) -> None:
        self._cancelled.set()

    def __iter__(self) -> Iterator[ProgressEvent]:
        while not self.cancelled:
            try:
                yield self._queue.get(timeout=0.1)
            except queue.Empty:
                if self.closed:
                    return
