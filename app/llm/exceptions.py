class ModelError(Exception):
    """Base exception for vision/text model calls."""


class ModelNetworkError(ModelError):
    """Raised when the model provider cannot be reached (connection, DNS, timeout)."""


class ModelApiError(ModelError):
    """Raised when the model provider answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ModelResponseError(ModelError):
    """Raised when the provider response has no usable content."""
