import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from app.cancellation.cancellation_token import CancellationToken, CancelReason
from app.logging.logger import Log

CancelCallback = Callable[[CancelReason], None]


class _Timer(Protocol):
    daemon: bool

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], _Timer]


@dataclass
class _Registration:
    cancel_fn: CancelCallback
    grace_timer: _Timer | None = None


class CancellationCoordinator:
    """Maps connection ids to cancel callbacks for in-flight operations.

    Explicit user cancellation fires immediately. A lost connection only
    fires after ``grace_seconds`` and only if the operation is still
    registered by then, so short network blips never abort running work.
    """

    def __init__(
        self,
        grace_seconds: float = 30.0,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self._grace_seconds = grace_seconds
        self._timer_factory: TimerFactory = timer_factory or (
            lambda delay, fn: threading.Timer(delay, fn)
        )
        self._lock = threading.Lock()
        self._registrations: dict[str, _Registration] = {}

    def register(self, connection_id: str, cancel_fn: CancelCallback) -> None:
        """Register (or replace) the cancel callback for a connection."""
        with self._lock:
            previous = self._registrations.pop(connection_id, None)
            self._registrations[connection_id] = _Registration(cancel_fn=cancel_fn)
        if previous is not None and previous.grace_timer is not None:
            previous.grace_timer.cancel()
        Log.debug(f"Registered operation for connection {connection_id}")

    def open_token(self, connection_id: str) -> CancellationToken:
        """Register a fresh CancellationToken for the connection and return it."""
        token = CancellationToken(connection_id)
        self.register(connection_id, token.cancel)
        return token

    def cancel(self, connection_id: str, user_initiated: bool = True) -> bool:
        """Cancel the connection's operation now. Returns False if none is registered."""
        with self._lock:
            registration = self._registrations.pop(connection_id, None)
        if registration is None:
            Log.debug(f"No operation registered for connection {connection_id}")
            return False
        if registration.grace_timer is not None:
            registration.grace_timer.cancel()
        reason = CancelReason.USER if user_initiated else CancelReason.DISCONNECT
        Log.info(f"Cancelling operation for connection {connection_id} ({reason.value})")
        registration.cancel_fn(reason)
        return True

    def connection_lost(self, connection_id: str) -> None:
        """Start the grace timer for a disconnected client."""
        with self._lock:
            registration = self._registrations.get(connection_id)
            if registration is None or registration.grace_timer is not None:
                return
            timer = self._timer_factory(
                self._grace_seconds,
                lambda: self._expire_grace(connection_id, registration),
            )
            timer.daemon = True
            registration.grace_timer = timer
        Log.info(
            f"Connection {connection_id} lost, cancelling in {self._grace_seconds}s "
            "unless the operation finishes first"
        )
        timer.start()

    def unregister(self, connection_id: str) -> None:
        with self._lock:
            registration = self._registrations.pop(connection_id, None)
        if registration is not None and registration.grace_timer is not None:
            registration.grace_timer.cancel()

    def is_registered(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._registrations

    def _expire_grace(self, connection_id: str, armed_for: _Registration) -> None:
        with self._lock:
            registration = self._registrations.get(connection_id)
            # Timers armed for a replaced registration are stale.
            if registration is not armed_for or registration.grace_timer is None:
                return
            del self._registrations[connection_id]
        Log.warning(f"Grace period expired for connection {connection_id}")
        registration.cancel_fn(CancelReason.DISCONNECT)
