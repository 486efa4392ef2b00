from app.cancellation.cancellation_token import CancellationToken, CancelReason
from app.cancellation.coordinator import CancellationCoordinator
from app.cancellation.exceptions import OperationCancelledError

__all__ = [
    "CancelReason",
    "CancellationCoordinator",
    "CancellationToken",
    "OperationCancelledError",
]
