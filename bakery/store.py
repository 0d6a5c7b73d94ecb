"""Durable key-value byte stores that hold the serialized database image.

The application only ever keeps one value here (the whole database), but the
interface stays key based so a backup slot or a second image can be added
without changing callers.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Optional

from bakery.errors import StorageWriteError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not key or not _KEY_RE.match(key):
        raise ValueError(f"Invalid store key: {key!r}")
    return key


class FileStore:
    """One file per key inside ``directory``.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace`` so a crash never leaves a half-written image behind.
    """

    suffix = ".bin"

    def __init__(self, directory):
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}{self.suffix}"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, data: bytes) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=str(self.directory))
            with os.fdopen(fd, "wb") as fh:
                fh.write(bytes(data))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StorageWriteError(f"Could not write {path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug("Stored %d bytes under %s", len(data), key)

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageWriteError(f"Could not remove {path}: {exc}") from exc


class MemoryStore:
    """Process-local store, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self._data: dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(_check_key(key))

    def set(self, key: str, data: bytes) -> None:
        with self._lock:
            self._data[_check_key(key)] = bytes(data)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(_check_key(key), None)
