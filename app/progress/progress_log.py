from collections.abc import Callable
from datetime import datetime, timezone

from app.logging.logger import Log
from app.progress.models import ProgressEvent
from app.progress.sink import ProgressSink


class ProgressLog:
    """Append-only, ordered progress log for one pipeline run.

    Steps are clamped so the recorded value never decreases. Every event is
    kept for the final response; delivery to the live sink is best-effort and
    skipped when ``should_emit`` says the client is gone.
    """

    def __init__(
        self,
        connection_id: str | None = None,
        sink: ProgressSink | None = None,
        should_emit: Callable[[], bool] | None = None,
        total: int = 100,
    ) -> None:
        self._connection_id = connection_id
        self._sink = sink
        self._should_emit = should_emit
        self._total = total
        self._events: list[ProgressEvent] = []
        self._last_step = 0

    @property
    def events(self) -> list[ProgressEvent]:
        return list(self._events)

    @property
    def last_step(self) -> int:
        return self._last_step

    def report(self, message: str, step: int | None = None) -> ProgressEvent:
        """Append an event and notify the sink. Returns the recorded event."""
        if step is not None:
            step = max(self._last_step, min(step, self._total))
            self._last_step = step
        event = ProgressEvent(
            message=message,
            step=step,
            total=self._total if step is not None else None,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self._events.append(event)
        Log.info(f"[progress] {message}")
        self._notify(event)
        return event

    def scoped(self, start: int, end: int) -> "ScopedProgress":
        return ScopedProgress(self, start, end)

    def to_list(self) -> list[dict[str, object]]:
        return [event.to_dict() for event in self._events]

    def _notify(self, event: ProgressEvent) -> None:
        if self._sink is None or not self._connection_id:
            return
        if self._should_emit is not None and not self._should_emit():
            Log.debug(f"Client {self._connection_id} disconnected, progress not emitted")
            return
        try:
            self._sink.emit(self._connection_id, event)
        except Exception as exc:
            Log.warning(f"Progress emit to {self._connection_id} failed: {exc}")


class ScopedProgress:
    """Maps ``done/count`` fractions of one stage onto a reserved step range."""

    def __init__(self, log: ProgressLog, start: int, end: int) -> None:
        self._log = log
        self.start = start
        self.end = end

    def step_for(self, done: int, count: int) -> int:
        if count <= 0:
            return self.start
        return round(self.start + (done / count) * (self.end - self.start))

    def report(self, message: str, done: int | None = None, count: int | None = None) -> None:
        if done is None or count is None:
            self._log.report(message)
        else:
            self._log.report(message, self.step_for(done, count))

    def begin(self, message: str) -> None:
        self._log.report(message, self.start)

    def finish(self, message: str) -> None:
        self._log.report(message, self.end)
