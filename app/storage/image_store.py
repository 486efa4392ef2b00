import re
import threading
import time
import uuid
from collections.abc import Callable, Iterable
from pathlib import Path

from app.logging.logger import Log
from app.storage.exceptions import ImageStoreError

_PAGE_FILE_RE = re.compile(r"^page_(\d+)\.png$")


class PageImageStore:
    """Staging area for rendered page images, one directory per session.

    Images are addressed by the public path handed to clients
    (``{public_prefix}/{session_id}/page_{n}.png``). Sessions marked active are
    never swept, and neither is any image listed as preserved.
    """

    def __init__(
        self,
        root: Path,
        public_prefix: str = "/uploads/images",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = root
        self._public_prefix = public_prefix.rstrip("/")
        self._clock = clock
        self._lock = threading.Lock()
        self._active_sessions: set[str] = set()

    @property
    def root(self) -> Path:
        return self._root

    def open_session(self) -> str:
        """Create a new active session directory and return its id."""
        session_id = uuid.uuid4().hex
        try:
            (self._root / session_id).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ImageStoreError(
                f"Failed to create image session under {self._root}: {exc}"
            ) from exc
        with self._lock:
            self._active_sessions.add(session_id)
        return session_id

    def close_session(self, session_id: str) -> None:
        """Mark the session inactive; its images become eligible for age-based sweeps."""
        with self._lock:
            self._active_sessions.discard(session_id)

    def discard_session(self, session_id: str) -> None:
        """Delete every image of a session, e.g. after a cancelled run."""
        directory = self._root / session_id
        if not directory.is_dir():
            return
        for image in directory.glob("page_*.png"):
            image.unlink(missing_ok=True)
        if not any(directory.iterdir()):
            directory.rmdir()
        Log.info(f"Discarded page images of session {session_id}")

    def save(self, session_id: str, page_number: int, image_bytes: bytes) -> str:
        """Write a page image and return its public path."""
        directory = self._root / session_id
        try:
            directory.mkdir(parents=True, exist_ok=True)
            (directory / f"page_{page_number}.png").write_bytes(image_bytes)
        except OSError as exc:
            raise ImageStoreError(f"Failed to store image for page {page_number}: {exc}") from exc
        return f"{self._public_prefix}/{session_id}/page_{page_number}.png"

    def resolve(self, public_path: str) -> Path:
        """Map a public image path back to its file on disk.

        Raises:
            ImageStoreError: if the path is outside this store.
        """
        prefix = f"{self._public_prefix}/"
        if not public_path.startswith(prefix):
            raise ImageStoreError(f"Image path '{public_path}' is not served by this store")
        relative = public_path[len(prefix):]
        parts = relative.split("/")
        if len(parts) != 2 or any(part in ("", ".", "..") for part in parts):
            raise ImageStoreError(f"Invalid image path '{public_path}'")
        if not _PAGE_FILE_RE.match(parts[1]):
            raise ImageStoreError(f"Invalid image file name in '{public_path}'")
        return self._root / parts[0] / parts[1]

    def load(self, public_path: str) -> bytes:
        """Read a stored page image; missing files yield empty bytes."""
        path = self.resolve(public_path)
        if not path.exists():
            Log.warning(f"Image file not found: {path}")
            return b""
        return path.read_bytes()

    @staticmethod
    def page_number_of(public_path: str) -> int:
        match = _PAGE_FILE_RE.match(public_path.rsplit("/", 1)[-1])
        if match is None:
            raise ImageStoreError(f"Cannot determine page number from '{public_path}'")
        return int(match.group(1))

    def sweep(self, max_age_seconds: float, preserved: Iterable[str] = ()) -> int:
        """Delete images older than ``max_age_seconds`` outside active sessions.

        Returns:
            Number of image files removed.
        """
        if not self._root.exists():
            return 0
        preserved_paths = set(preserved)
        cutoff = self._clock() - max_age_seconds
        with self._lock:
            active = set(self._active_sessions)

        removed = 0
        for session_dir in self._root.iterdir():
            if not session_dir.is_dir() or session_dir.name in active:
                continue
            for image in session_dir.glob("page_*.png"):
                public_path = f"{self._public_prefix}/{session_dir.name}/{image.name}"
                if public_path in preserved_paths:
                    continue
                try:
                    if image.stat().st_mtime < cutoff:
                        image.unlink()
                        removed += 1
                except FileNotFoundError:
                    continue
            if not any(session_dir.iterdir()):
                session_dir.rmdir()

        if removed:
            Log.info(f"Image cleanup removed {removed} expired page images")
        return removed
