import threading
from enum import Enum

from app.cancellation.exceptions import OperationCancelledError


class CancelReason(str, Enum):
    """Why an operation was cancelled; drives how the pipeline unwinds."""

    USER = "user"
    DISCONNECT = "disconnect"


class CancellationToken:
    """Per-operation cancellation flag, polled by the pipeline.

    A user-initiated cancel makes the next ``check()`` raise. A disconnect
    only marks the progress sink as dead; work continues to completion.
    """

    def __init__(self, connection_id: str | None = None) -> None:
        self.connection_id = connection_id
        self._lock = threading.Lock()
        self._reason: CancelReason | None = None

    def cancel(self, reason: CancelReason = CancelReason.USER) -> None:
        with self._lock:
            # A later user cancel upgrades an earlier disconnect, never the reverse.
            if self._reason is None or reason is CancelReason.USER:
                self._reason = reason

    @property
    def reason(self) -> CancelReason | None:
        with self._lock:
            return self._reason

    @property
    def cancelled(self) -> bool:
        return self.reason is not None

    @property
    def user_initiated(self) -> bool:
        return self.reason is CancelReason.USER

    @property
    def should_emit_progress(self) -> bool:
        return self.reason is not CancelReason.DISCONNECT

    def check(self) -> None:
        """Raise OperationCancelledError if the user asked to stop."""
        if self.user_initiated:
            raise OperationCancelledError(self.connection_id)
