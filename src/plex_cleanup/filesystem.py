from __future__ import annotations

import time
from pathlib import Path

from .errors import DeletionError
from .models import FileStat


class LocalFileStats:
    """Size and age of local files, with age measured from a fixed start time."""

    def __init__(self, *, now: float | None = None):
        self._now = float(now if now is not None else time.time())

    def stat(self, path: str) -> FileStat:
        info = Path(path).stat()
        age = int(self._now - info.st_mtime)
        return FileStat(size_bytes=int(info.st_size), age_seconds=max(age, 0))


class LocalFileDeleter:
    def remove(self, path: str) -> bool:
        try:
            Path(path).unlink()
        except OSError as exc:
            raise DeletionError(exc.errno, exc.strerror or str(exc), path) from exc
        return True
