from typing import Protocol

from app.logging.logger import Log
from app.progress.models import ProgressEvent


class ProgressSink(Protocol):
    """Live progress consumer (e.g. a client socket). Fire-and-forget."""

    def emit(self, connection_id: str, event: ProgressEvent) -> None: ...


class LoggingProgressSink:
    """Sink that writes progress to the application log; used by the CLI."""

    def emit(self, connection_id: str, event: ProgressEvent) -> None:
        step = f"{event.step}%" if event.step is not None else "-"
        Log.info(f"[{connection_id}] [{step}] {event.message}")
