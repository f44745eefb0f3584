from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from .errors import ConfigurationError
from .units import parse_age, parse_boolish, parse_size


LOGGER = logging.getLogger(__name__)


class PolicyMode(str, Enum):
    AGE = "age"
    SIZE = "size"
    COUNT = "count"


@dataclass(frozen=True)
class FileRecord:
    path: str
    size_bytes: int
    age_seconds: int
    user_rating: float | None = None
    view_count: int = 0
    title: str = ""

    @property
    def rating(self) -> float:
        return self.user_rating if self.user_rating is not None else 0.0

    @property
    def watched(self) -> bool:
        return self.view_count > 0


@dataclass
class VideoSummary:
    rating_key: str
    title: str
    view_count: int = 0
    files: list[str] = field(default_factory=list)
    user_rating: float | None = None


@dataclass(frozen=True)
class VideoDetail:
    user_rating: float | None = None


@dataclass(frozen=True)
class FileStat:
    size_bytes: int
    age_seconds: int


class FileStatSource(Protocol):
    def stat(self, path: str) -> FileStat:
        ...


_POLICY_KEYS = {"age", "size", "count", "watched_only", "continue_on_error"}


@dataclass(frozen=True)
class LibraryPolicy:
    age_seconds: int | None = None
    size_bytes: int | None = None
    count: int | None = None
    watched_only: bool = False
    continue_on_error: bool = False

    @property
    def mode(self) -> PolicyMode:
        modes = [
            mode
            for mode, value in (
                (PolicyMode.AGE, self.age_seconds),
                (PolicyMode.SIZE, self.size_bytes),
                (PolicyMode.COUNT, self.count),
            )
            if value is not None
        ]
        if len(modes) != 1:
            raise ConfigurationError("must have exactly one of: age, size, or count")
        return modes[0]

    @property
    def threshold(self) -> int:
        mode = self.mode
        if mode is PolicyMode.AGE:
            return int(self.age_seconds)
        if mode is PolicyMode.SIZE:
            return int(self.size_bytes)
        return int(self.count)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "LibraryPolicy":
        """Build a policy from a raw library config section.

        ``age`` and ``size`` accept human-readable units; booleans accept the
        usual yes/no spellings. Raises :class:`ConfigurationError` on any
        malformed or unknown value.
        """
        if mapping is None:
            mapping = {}
        if not isinstance(mapping, Mapping):
            raise ConfigurationError("library settings must be a mapping")

        unknown = sorted(str(key) for key in mapping if str(key) not in _POLICY_KEYS)
        if unknown:
            raise ConfigurationError(f"unknown setting(s): {', '.join(unknown)}")

        age_seconds = parse_age(mapping["age"]) if mapping.get("age") is not None else None
        size_bytes = parse_size(mapping["size"]) if mapping.get("size") is not None else None
        count = None
        if mapping.get("count") is not None:
            try:
                count = int(str(mapping["count"]).strip())
            except ValueError:
                raise ConfigurationError(f"Invalid count '{mapping['count']}': must be an integer")
            if count < 0:
                raise ConfigurationError(f"Invalid count '{count}': must be >= 0")

        return cls(
            age_seconds=age_seconds,
            size_bytes=size_bytes,
            count=count,
            watched_only=parse_boolish(mapping.get("watched_only")),
            continue_on_error=parse_boolish(mapping.get("continue_on_error")),
        )


@dataclass
class DeletionOutcome:
    files_deleted: int = 0
    bytes_freed: int = 0
    dry_run: bool = False
    aborted: bool = False

    def record_deletion(self, record: FileRecord) -> None:
        self.files_deleted += 1
        self.bytes_freed += record.size_bytes


def flatten_videos(videos: Iterable[VideoSummary], stat_source: FileStatSource) -> dict[str, FileRecord]:
    """Turn per-video summaries into one record per physical file.

    Files of a multi-part video share the video's rating and view count.
    Files that vanished since the server listed them, or cannot be
    inspected, are logged and left out.
    """
    files: dict[str, FileRecord] = {}
    for video in videos:
        for path in video.files:
            try:
                stat = stat_source.stat(path)
            except FileNotFoundError:
                LOGGER.warning("[CLEANUP]: File %s of '%s' no longer exists, ignoring it", path, video.title)
                continue
            except OSError as exc:
                LOGGER.warning(
                    "[CLEANUP]: Cannot stat file %s of '%s', ignoring it: %s",
                    path,
                    video.title,
                    exc.strerror or exc,
                )
                continue
            files[path] = FileRecord(
                path=path,
                size_bytes=stat.size_bytes,
                age_seconds=stat.age_seconds,
                user_rating=video.user_rating,
                view_count=video.view_count,
                title=video.title,
            )
    return files
