"""A JSON array on disk, shared by the file-backed repositories.

Read-modify-write cycles run under ``locked()``, which holds both a
thread lock and an OS-level lock file (``<name>.lock`` next to the data
file). Several CLI processes pointed at the same data directory therefore
take turns instead of overwriting each other's changes. Writes go to a
temporary file that replaces the original, so readers never see a
half-written array.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from stockroom.domain.exceptions import ConflictError


class JsonFile:

    def __init__(self, file_path: Path, lock_timeout: float = 10.0) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = FileLock(f"{file_path}.lock", timeout=lock_timeout)
        self._ensure_file()

    @property
    def lock_path(self) -> Path:
        return Path(self._file_lock.lock_file)

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as exc:
                raise ConflictError(
                    f"Timed out waiting for another process to release {self._file_path.name}"
                ) from exc
            try:
                yield
            finally:
                self._file_lock.release()

    def load(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, records: list[dict]) -> None:
        with self.locked():
            fd, tmp_name = tempfile.mkstemp(
                dir=self._file_path.parent, prefix=f".{self._file_path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(json.dumps(records, indent=2) + "\n")
                os.replace(tmp_name, self._file_path)
            except BaseException:
                os.unlink(tmp_name)
                raise

    def _ensure_file(self) -> None:
        with self.locked():
            if not self._file_path.exists():
                self._file_path.write_text("[]", encoding="utf-8")
