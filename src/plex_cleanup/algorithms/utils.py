from __future__ import annotations

from collections.abc import Mapping

from ..models import FileRecord, LibraryPolicy


def order_for_deletion(files: Mapping[str, FileRecord]) -> list[str]:
    """Return paths with the most deletable file first.

    Lowest rating goes first (unrated counts as 0), then the oldest file.
    """
    return sorted(files, key=lambda path: (files[path].rating, -files[path].age_seconds))


def is_eligible(record: FileRecord, policy: LibraryPolicy) -> bool:
    return record.watched or not policy.watched_only


def total_size(files: Mapping[str, FileRecord]) -> int:
    return sum(int(record.size_bytes) for record in files.values())
