from __future__ import annotations

from collections.abc import Mapping

from ..executor import FileAction, FileActionExecutor
from ..models import DeletionOutcome, FileRecord, LibraryPolicy, PolicyMode
from .base import LOGGER, RetentionAlgorithm
from .utils import order_for_deletion


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


class ByCountAlgorithm(RetentionAlgorithm):
    mode = PolicyMode.COUNT

    def evaluate(
        self,
        files: Mapping[str, FileRecord],
        policy: LibraryPolicy,
        executor: FileActionExecutor,
    ) -> DeletionOutcome:
        max_count = int(policy.count)
        outcome = DeletionOutcome(dry_run=executor.dry_run)

        file_count = len(files)
        excess = file_count - max_count
        if excess <= 0:
            LOGGER.info(
                "  Nothing to delete, library has %s file%s (<= %s).",
                file_count,
                _plural(file_count),
                max_count,
            )
            return outcome

        LOGGER.info("  Library has %s (> %s), want to delete %s.", file_count, max_count, excess)

        # Only confirmed deletions use up the budget; files kept by
        # watched_only are visited but never counted.
        for path in order_for_deletion(files):
            record = files[path]
            if outcome.files_deleted >= excess:
                executor.apply(FileAction.KEEP, record)
                continue

            keep_going = self._visit(
                record,
                wants_delete=True,
                policy=policy,
                executor=executor,
                outcome=outcome,
            )
            if not keep_going:
                break

        return outcome
