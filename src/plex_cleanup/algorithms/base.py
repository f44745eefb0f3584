from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from ..executor import FileAction, FileActionExecutor
from ..models import DeletionOutcome, FileRecord, LibraryPolicy, PolicyMode
from .utils import is_eligible


LOGGER = logging.getLogger("plex_cleanup.algorithms")


class RetentionAlgorithm(ABC):
    mode: PolicyMode

    @abstractmethod
    def evaluate(
        self,
        files: Mapping[str, FileRecord],
        policy: LibraryPolicy,
        executor: FileActionExecutor,
    ) -> DeletionOutcome:
        """Walk the files in deletion order and return how many were deleted."""

    def _visit(
        self,
        record: FileRecord,
        *,
        wants_delete: bool,
        policy: LibraryPolicy,
        executor: FileActionExecutor,
        outcome: DeletionOutcome,
    ) -> bool:
        """Keep or delete one file. Returns False when the library must be abandoned."""
        action = FileAction.DELETE if wants_delete and is_eligible(record, policy) else FileAction.KEEP
        deleted = executor.apply(action, record)
        if action is not FileAction.DELETE:
            return True

        if deleted:
            outcome.record_deletion(record)
            return True

        if policy.continue_on_error:
            return True

        LOGGER.warning(
            "  Failed to delete %s. Not attempting to delete any more files in this library, "
            "set continue_on_error=True to override this.",
            record.path,
        )
        outcome.aborted = True
        return False
