from __future__ import annotations

from collections.abc import Mapping

from ..executor import FileAction, FileActionExecutor
from ..models import DeletionOutcome, FileRecord, LibraryPolicy, PolicyMode
from ..units import format_human_bytes
from .base import LOGGER, RetentionAlgorithm
from .utils import order_for_deletion, total_size


def _describe(num_bytes: int) -> str:
    return f"{num_bytes} ({format_human_bytes(num_bytes)})"


class BySizeAlgorithm(RetentionAlgorithm):
    mode = PolicyMode.SIZE

    def evaluate(
        self,
        files: Mapping[str, FileRecord],
        policy: LibraryPolicy,
        executor: FileActionExecutor,
    ) -> DeletionOutcome:
        max_bytes = int(policy.size_bytes)
        outcome = DeletionOutcome(dry_run=executor.dry_run)

        current_size = total_size(files)
        if current_size <= max_bytes:
            LOGGER.info(
                "  Nothing to delete, library size %s <= max size %s.",
                _describe(current_size),
                _describe(max_bytes),
            )
            return outcome

        LOGGER.info(
            "  Library size %s > max size %s.  Some files will be deleted.",
            _describe(current_size),
            _describe(max_bytes),
        )

        for path in order_for_deletion(files):
            record = files[path]
            deficit = current_size - max_bytes - outcome.bytes_freed
            if deficit <= 0:
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
