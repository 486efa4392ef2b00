class OperationCancelledError(Exception):
    """Raised at a suspension point when the user cancelled the operation."""

    def __init__(self, connection_id: str | None = None) -> None:
        message = (
            f"Operation cancelled by user (connection {connection_id})"
            if connection_id
            else "Operation cancelled by user"
        )
        super().__init__(message)
        self.connection_id = connection_id
