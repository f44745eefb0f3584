from __future__ import annotations

from collections.abc import Mapping

from ..executor import FileActionExecutor
from ..models import DeletionOutcome, FileRecord, LibraryPolicy, PolicyMode
from .base import LOGGER, RetentionAlgorithm
from .utils import order_for_deletion


class ByAgeAlgorithm(RetentionAlgorithm):
    mode = PolicyMode.AGE

    def evaluate(
        self,
        files: Mapping[str, FileRecord],
        policy: LibraryPolicy,
        executor: FileActionExecutor,
    ) -> DeletionOutcome:
        max_age = int(policy.age_seconds)
        outcome = DeletionOutcome(dry_run=executor.dry_run)
        LOGGER.info("  Deleting any files older than %s seconds.", max_age)

        # Visit every file rather than stopping at the first young one, so
        # verbose output comes out in the same order for every mode.
        for path in order_for_deletion(files):
            record = files[path]
            keep_going = self._visit(
                record,
                wants_delete=record.age_seconds > max_age,
                policy=policy,
                executor=executor,
                outcome=outcome,
            )
            if not keep_going:
                break

        return outcome
