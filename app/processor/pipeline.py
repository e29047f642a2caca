from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from app.ocr.progress import ProgressStream
from app.processor.artifacts import ArtifactTracker
from app.processor.cancellation import Deadline
from app.processor.models import UploadedDocument


@dataclass(slots=True)
class PipelineContext:
    document: UploadedDocument
    tracker: ArtifactTracker
    deadline: Deadline = field(default_factory=Deadline.never)
    progress: ProgressStream | None = None
    page_selection: int | None = None
    upload_path: Path | None = None
    total_pages: int | None = None
    page_number: int | None = None
    image_bytes: bytes = b""
    text: str = ""
    confidence: int = 0
    warning: str | None = None

    @property
    def is_pdf(self) -> bool:
        return not self.document.media_type.is_image


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
