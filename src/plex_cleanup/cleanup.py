from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from .algorithms import get_algorithm
from .errors import ConfigurationError, LibraryNotFoundError
from .executor import FileActionExecutor
from .models import DeletionOutcome, FileStatSource, LibraryPolicy, VideoDetail, VideoSummary, flatten_videos


LOGGER = logging.getLogger(__name__)


class MetadataSource(Protocol):
    def list_libraries(self) -> dict[str, str]:
        ...

    def list_videos(self, library_id: str) -> list[VideoSummary]:
        ...

    def get_video_detail(self, rating_key: str) -> VideoDetail:
        ...


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


class LibraryCleaner:
    """Runs the configured retention policy against each library, one at a time.

    Configuration problems and unknown libraries skip only the library
    concerned. A :class:`~plex_cleanup.errors.FetchError` from the metadata
    source is not caught and ends the whole run.
    """

    def __init__(
        self,
        *,
        source: MetadataSource,
        stat_source: FileStatSource,
        executor: FileActionExecutor,
    ):
        self._source = source
        self._stat_source = stat_source
        self._executor = executor
        self._libraries: dict[str, str] | None = None

    def _server_libraries(self) -> dict[str, str]:
        if self._libraries is None:
            self._libraries = self._source.list_libraries()
        return self._libraries

    def run_once(
        self,
        libraries: Mapping[str, Any],
        *,
        only: Iterable[str] | None = None,
    ) -> dict[str, DeletionOutcome]:
        selected = set(only) if only else None
        if selected:
            for name in sorted(selected - set(libraries)):
                LOGGER.warning("[CLEANUP]: WARNING: library '%s' is not in the config file, skipping.", name)

        self._server_libraries()

        results: dict[str, DeletionOutcome] = {}
        for name in sorted(libraries):
            if selected is not None and name not in selected:
                continue
            try:
                results[name] = self.cleanup_library(name, libraries[name])
            except LibraryNotFoundError:
                LOGGER.warning("[CLEANUP]: WARNING: can't find library '%s' on PMS, skipping.", name)
            except ConfigurationError as exc:
                LOGGER.error(
                    "[CLEANUP]: ERROR: library '%s': %s.  Skipping cleanup of this library.",
                    name,
                    exc,
                )
        return results

    def cleanup_library(self, name: str, settings: Mapping[str, Any] | None) -> DeletionOutcome:
        library_id = self._server_libraries().get(name)
        if library_id is None:
            raise LibraryNotFoundError(name)

        policy = LibraryPolicy.from_mapping(settings)
        algorithm = get_algorithm(policy)

        LOGGER.info("[CLEANUP]: Cleaning up library %s (%s limit %s)", name, policy.mode.value, policy.threshold)
        videos = self._source.list_videos(library_id)
        LOGGER.info("[CLEANUP]:   Found %d videos, gathering metadata...", len(videos))

        for video in videos:
            video.user_rating = self._source.get_video_detail(video.rating_key).user_rating

        files = flatten_videos(videos, self._stat_source)
        outcome = algorithm.evaluate(files, policy, self._executor)
        if outcome.aborted:
            LOGGER.warning("[CLEANUP]: Cleanup of library '%s' stopped after a failed delete", name)

        LOGGER.info(
            "[CLEANUP]: Done cleaning up '%s', %sdeleted %d file%s",
            name,
            "would have " if outcome.dry_run else "",
            outcome.files_deleted,
            _plural(outcome.files_deleted),
        )
        return outcome
