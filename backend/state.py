"""Process-wide Storage instance shared by the route handlers."""

from pathlib import Path

from storyline.storage import Storage

_storage: Storage | None = None


def init_storage(data_dir: Path) -> Storage:
    global _storage
    _storage = Storage(data_dir)
    return _storage


def get_storage() -> Storage:
    assert _storage is not None, "Call init_storage() before using storage"
    return _storage
