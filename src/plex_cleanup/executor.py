from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from .errors import DeletionError
from .logs import VERBOSE
from .models import FileRecord
from .units import format_human_bytes


LOGGER = logging.getLogger(__name__)


class FileAction(str, Enum):
    KEEP = "keep"
    DELETE = "delete"


class FileDeleter(Protocol):
    def remove(self, path: str) -> bool:
        ...


class FileActionExecutor:
    """Carries out keep/delete decisions, or only logs them in dry-run mode."""

    def __init__(self, *, deleter: FileDeleter, dry_run: bool):
        self._deleter = deleter
        self._dry_run = bool(dry_run)

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def apply(self, action: FileAction, record: FileRecord) -> bool:
        deleted = False
        if action is FileAction.DELETE:
            deleted = self._delete(record)
        else:
            LOGGER.debug("  Keeping file %s", record.path)

        LOGGER.debug(
            "    rating = %s, age = %s, size = %s (%s), views = %s",
            _format_rating(record.user_rating),
            record.age_seconds,
            record.size_bytes,
            format_human_bytes(record.size_bytes),
            record.view_count,
        )
        return deleted

    def _delete(self, record: FileRecord) -> bool:
        if self._dry_run:
            LOGGER.log(VERBOSE, "  TEST: would delete file %s", record.path)
            return True

        LOGGER.log(VERBOSE, "  Deleting file %s", record.path)
        try:
            removed = bool(self._deleter.remove(record.path))
        except DeletionError as exc:
            LOGGER.error("  ERROR: failed to delete file '%s': %s", record.path, exc.strerror or exc)
            return False
        if not removed:
            LOGGER.error("  ERROR: failed to delete file '%s'", record.path)
        return removed


def _format_rating(rating: float | None) -> str:
    if rating is None:
        return "0"
    if float(rating) == int(rating):
        return str(int(rating))
    return str(rating)
