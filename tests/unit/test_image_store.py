import os
import time
from pathlib import Path

import pytest

from app.storage.exceptions import ImageStoreError
from app.storage.image_store import PageImageStore


def _age(path: Path, seconds: float) -> None:
    old = time.time() - seconds
    os.utime(path, (old, old))


class TestSaveAndResolve:
    def test_save_returns_public_path(self, tmp_path: Path) -> None:
        store = PageImageStore(tmp_path, "/uploads/images")
        session = store.open_session()

        public_path = store.save(session, 3, b"png-bytes")

        assert public_path == f"/uploads/images/{session}/page_3.png"
        assert store.resolve(public_path) == tmp_path / session / "page_3.png"
        assert store.load(public_path) == b"png-bytes"

    def test_page_number_from_path(self) -> None:
        assert PageImageStore.page_number_of("/uploads/images/abc/page_12.png") == 12

    @pytest.mark.parametrize(
        "public_path",
        [
            "/elsewhere/abc/page_1.png",
            "/uploads/images/../secret/page_1.png",
            "/uploads/images/abc/../../page_1.png",
            "/uploads/images/abc/notes.txt",
        ],
    )
    def test_rejects_foreign_paths(self, tmp_path: Path, public_path: str) -> None:
        store = PageImageStore(tmp_path, "/uploads/images")
        with pytest.raises(ImageStoreError):
            store.resolve(public_path)

    def test_missing_image_loads_empty(self, tmp_path: Path) -> None:
        store = PageImageStore(tmp_path, "/uploads/images")
        assert store.load("/uploads/images/gone/page_1.png") == b""

    def test_open_session_on_file_root_raises(self, tmp_path: Path) -> None:
        root = tmp_path / "images"
        root.write_bytes(b"")
        store = PageImageStore(root)
        with pytest.raises(ImageStoreError, match="Failed to create image session"):
            store.open_session()


class TestSweep:
    def test_removes_expired_images_of_closed_sessions(self, tmp_path: Path) -> None:
        store = PageImageStore(tmp_path)
        session = store.open_session()
        path = store.resolve(store.save(session, 1, b"x"))
        store.close_session(session)
        _age(path, 7200)

        assert store.sweep(3600) == 1
        assert not path.exists()
        assert not (tmp_path / session).exists()

    def test_keeps_fresh_images(self, tmp_path: Path) -> None:
        store = PageImageStore(tmp_path)
        session = store.open_session()
        path = store.resolve(store.save(session, 1, b"x"))
        store.close_session(session)

        assert store.sweep(3600) == 0
        assert path.exists()

    def test_never_touches_active_sessions(self, tmp_path: Path) -> None:
        store = PageImageStore(tmp_path)
        session = store.open_session()
        path = store.resolve(store.save(session, 1, b"x"))
        _age(path, 7200)

        assert store.sweep(3600) == 0
        assert path.exists()

    def test_preserves_persisted_images(self, tmp_path: Path) -> None:
        store = PageImageStore(tmp_path)
        session = store.open_session()
        kept = store.save(session, 1, b"x")
        dropped = store.save(session, 2, b"y")
        store.close_session(session)
        _age(store.resolve(kept), 7200)
        _age(store.resolve(dropped), 7200)

        assert store.sweep(3600, preserved={kept}) == 1
        assert store.resolve(kept).exists()
        assert not store.resolve(dropped).exists()

    def test_missing_root_is_noop(self, tmp_path: Path) -> None:
        assert PageImageStore(tmp_path / "nowhere").sweep(0) == 0

    def test_discard_session_removes_images(self, tmp_path: Path) -> None:
        store = PageImageStore(tmp_path)
        session = store.open_session()
        store.save(session, 1, b"x")

        store.discard_session(session)

        assert not (tmp_path / session).exists()
