from __future__ import annotations

import errno
import logging

import pytest

from plex_cleanup.errors import ConfigurationError
from plex_cleanup.models import FileRecord, FileStat, LibraryPolicy, PolicyMode, VideoSummary, flatten_videos


class _FakeStats:
    def __init__(self, stats: dict[str, FileStat], unreadable: tuple[str, ...] = ()):
        self._stats = stats
        self._unreadable = set(unreadable)

    def stat(self, path: str) -> FileStat:
        if path in self._unreadable:
            raise PermissionError(errno.EACCES, "Permission denied", path)
        if path not in self._stats:
            raise FileNotFoundError(path)
        return self._stats[path]


def test_policy_from_mapping_converts_units_and_booleans() -> None:
    policy = LibraryPolicy.from_mapping({"size": "10G", "watched_only": "yes", "continue_on_error": "on"})

    assert policy.mode is PolicyMode.SIZE
    assert policy.size_bytes == 10 * 1024**3
    assert policy.threshold == 10 * 1024**3
    assert policy.watched_only is True
    assert policy.continue_on_error is True


def test_policy_defaults_are_false() -> None:
    policy = LibraryPolicy.from_mapping({"age": "3 days"})

    assert policy.mode is PolicyMode.AGE
    assert policy.age_seconds == 259200
    assert policy.watched_only is False
    assert policy.continue_on_error is False


def test_policy_count_must_be_integer() -> None:
    assert LibraryPolicy.from_mapping({"count": "12"}).count == 12

    with pytest.raises(ConfigurationError, match="Invalid count"):
        LibraryPolicy.from_mapping({"count": "a dozen"})


@pytest.mark.parametrize(
    "settings",
    [
        {},
        {"watched_only": True},
        {"age": "1d", "size": "1G"},
        {"age": "1d", "size": "1G", "count": 3},
    ],
)
def test_policy_mode_requires_exactly_one_setting(settings: dict) -> None:
    policy = LibraryPolicy.from_mapping(settings)
    with pytest.raises(ConfigurationError, match="exactly one of"):
        _ = policy.mode


def test_policy_rejects_unknown_keys_and_non_mappings() -> None:
    with pytest.raises(ConfigurationError, match="unknown setting"):
        LibraryPolicy.from_mapping({"age": "1d", "max_age": "2d"})
    with pytest.raises(ConfigurationError, match="mapping"):
        LibraryPolicy.from_mapping("age=1d")


def test_policy_rejects_malformed_size() -> None:
    with pytest.raises(ConfigurationError):
        LibraryPolicy.from_mapping({"size": "lots"})


def test_file_record_rating_defaults_to_zero() -> None:
    record = FileRecord(path="/m/a.mkv", size_bytes=1, age_seconds=1)
    assert record.rating == 0.0
    assert record.watched is False


def test_flatten_videos_creates_one_record_per_file() -> None:
    videos = [
        VideoSummary(rating_key="1", title="Two Parter", view_count=2, files=["/m/a1.mkv", "/m/a2.mkv"], user_rating=7.0),
        VideoSummary(rating_key="2", title="Single", files=["/m/b.mkv"]),
    ]
    stats = _FakeStats(
        {
            "/m/a1.mkv": FileStat(size_bytes=100, age_seconds=10),
            "/m/a2.mkv": FileStat(size_bytes=200, age_seconds=20),
            "/m/b.mkv": FileStat(size_bytes=300, age_seconds=30),
        }
    )

    files = flatten_videos(videos, stats)

    assert sorted(files) == ["/m/a1.mkv", "/m/a2.mkv", "/m/b.mkv"]
    assert files["/m/a2.mkv"].user_rating == 7.0
    assert files["/m/a2.mkv"].view_count == 2
    assert files["/m/a2.mkv"].size_bytes == 200
    assert files["/m/b.mkv"].user_rating is None
    assert files["/m/b.mkv"].view_count == 0


def test_flatten_videos_skips_missing_files() -> None:
    videos = [VideoSummary(rating_key="1", title="Gone", files=["/m/gone.mkv", "/m/here.mkv"])]
    stats = _FakeStats({"/m/here.mkv": FileStat(size_bytes=1, age_seconds=1)})

    files = flatten_videos(videos, stats)

    assert list(files) == ["/m/here.mkv"]


def test_flatten_videos_skips_files_it_cannot_stat(caplog) -> None:
    caplog.set_level(logging.INFO, logger="plex_cleanup")
    videos = [VideoSummary(rating_key="1", title="Locked", files=["/m/locked.mkv", "/m/open.mkv"])]
    stats = _FakeStats({"/m/open.mkv": FileStat(size_bytes=1, age_seconds=1)}, unreadable=("/m/locked.mkv",))

    files = flatten_videos(videos, stats)

    assert list(files) == ["/m/open.mkv"]
    assert "Cannot stat file /m/locked.mkv of 'Locked', ignoring it: Permission denied" in caplog.text
