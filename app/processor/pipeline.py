from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from app.cancellation.cancellation_token import CancellationToken
from app.logging.logger import Log
from app.ocr.models import OcrOutcome
from app.pdf.models import RasterizedPage
from app.processor.exceptions import PipelineStateError
from app.processor.models import PageResult, UploadRequest
from app.progress.progress_log import ProgressLog
from app.translation.models import TranslationOutcome


class PipelineState(str, Enum):
    IDLE = "idle"
    RASTERIZING = "rasterizing"
    EXTRACTING_TEXT = "extracting_text"
    TRANSLATING = "translating"
    FINALIZING = "finalizing"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.CANCELLED, PipelineState.FAILED})

_FORWARD: dict[PipelineState, PipelineState] = {
    PipelineState.IDLE: PipelineState.RASTERIZING,
    PipelineState.RASTERIZING: PipelineState.EXTRACTING_TEXT,
    PipelineState.EXTRACTING_TEXT: PipelineState.TRANSLATING,
    PipelineState.TRANSLATING: PipelineState.FINALIZING,
    PipelineState.FINALIZING: PipelineState.DONE,
}


@dataclass(slots=True)
class PipelineContext:
    request: UploadRequest
    progress: ProgressLog
    cancellation: CancellationToken
    session_id: str | None = None
    state: PipelineState = PipelineState.IDLE
    pdf_bytes: bytes = b""
    file_size: int = 0
    pages: list[RasterizedPage] = field(default_factory=list)
    ocr_outcomes: list[OcrOutcome] = field(default_factory=list)
    translations: list[TranslationOutcome] = field(default_factory=list)
    results: list[PageResult] = field(default_factory=list)
    saved_id: int | None = None
    auto_saved: bool = False
    error_message: str = ""

    def transition(self, target: PipelineState) -> None:
        """Move to ``target``; stages only advance forward, terminal states absorb.

        Raises:
            PipelineStateError: on any other transition.
        """
        if self.state in TERMINAL_STATES:
            raise PipelineStateError(
                f"Pipeline already {self.state.value}, cannot move to {target.value}"
            )
        allowed = target in (PipelineState.CANCELLED, PipelineState.FAILED) or (
            _FORWARD.get(self.state) is target
        )
        if not allowed:
            raise PipelineStateError(
                f"Invalid pipeline transition {self.state.value} -> {target.value}"
            )
        Log.debug(f"Pipeline {self.session_id}: {self.state.value} -> {target.value}")
        self.state = target


class PipelineStep(ABC):
    state: PipelineState

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
