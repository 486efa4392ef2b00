from pathlib import Path

from app.logging.logger import Log
from app.processor.exceptions import InputFileError


class FileLoader:
    """Reads uploaded source files and removes them once processed."""

    def load(self, path: Path) -> bytes:
        """Read the uploaded file.

        Raises:
            InputFileError: if the file does not exist or cannot be read.
        """
        if not path.exists():
            raise InputFileError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise InputFileError(f"Failed to read {path}: {exc}") from exc

    def remove(self, path: Path) -> None:
        """Delete the uploaded file; a missing file is not an error."""
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            Log.warning(f"Failed to remove uploaded file {path}: {exc}")
            return
        Log.debug(f"Removed uploaded file {path}")
