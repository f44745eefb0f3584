from __future__ import annotations

import argparse
import os
from pathlib import Path

import pytest

from plex_cleanup import app, config
from plex_cleanup.errors import FetchError
from plex_cleanup.models import VideoDetail, VideoSummary


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in (config.ENV_CONFIG_PATH, config.ENV_PLEX_HOST, config.ENV_PLEX_PORT, config.ENV_PLEX_TOKEN):
        monkeypatch.delenv(key, raising=False)


def _fake_client_factory(media_dir: Path, *, fail: bool = False):
    created: list[dict] = []

    class _FakeClient:
        def __init__(self, **kwargs):
            created.append(kwargs)
            self.base_url = kwargs["base_url"]
            self.closed = False

        def list_libraries(self) -> dict[str, str]:
            if fail:
                raise FetchError("status 401 trying to download: library/sections/")
            return {"Movies": "1"}

        def list_videos(self, library_id: str) -> list[VideoSummary]:
            return [
                VideoSummary(rating_key="1", title="Old", view_count=1, files=[str(media_dir / "old.mkv")]),
                VideoSummary(rating_key="2", title="New", view_count=1, files=[str(media_dir / "new.mkv")]),
            ]

        def get_video_detail(self, rating_key: str) -> VideoDetail:
            return VideoDetail(user_rating=None)

        def close(self) -> None:
            self.closed = True

    return _FakeClient, created


def _setup(tmp_path: Path) -> tuple[Path, Path]:
    media_dir = tmp_path / "media"
    media_dir.mkdir()
    for name, mtime in (("old.mkv", 1_000_000), ("new.mkv", 2_000_000)):
        target = media_dir / name
        target.write_bytes(b"x" * 10)
        os.utime(target, (mtime, mtime))

    config_path = tmp_path / "plex-cleanup.yaml"
    config_path.write_text("plex:\n  host: nas\nlibraries:\n  Movies:\n    count: 1\n", encoding="utf-8")
    return media_dir, config_path


def test_main_live_run_deletes_files(tmp_path: Path, monkeypatch) -> None:
    media_dir, config_path = _setup(tmp_path)
    fake_client, created = _fake_client_factory(media_dir)
    monkeypatch.setattr(app, "PlexClient", fake_client)

    exit_code = app.main(["--config", str(config_path), "--live", "--port", "32500"])

    assert exit_code == 0
    assert (media_dir / "old.mkv").exists() is False
    assert (media_dir / "new.mkv").exists() is True
    assert created[0]["base_url"] == "http://nas:32500"


def test_main_dry_run_keeps_files(tmp_path: Path, monkeypatch) -> None:
    media_dir, config_path = _setup(tmp_path)
    fake_client, _ = _fake_client_factory(media_dir)
    monkeypatch.setattr(app, "PlexClient", fake_client)

    exit_code = app.main(["-c", str(config_path), "--dry-run", "-vv"])

    assert exit_code == 0
    assert (media_dir / "old.mkv").exists() is True
    assert (media_dir / "new.mkv").exists() is True


def test_main_returns_1_on_fetch_error(tmp_path: Path, monkeypatch) -> None:
    media_dir, config_path = _setup(tmp_path)
    fake_client, _ = _fake_client_factory(media_dir, fail=True)
    monkeypatch.setattr(app, "PlexClient", fake_client)

    assert app.main(["-c", str(config_path), "--live"]) == app.EXIT_FETCH_ERROR
    assert (media_dir / "old.mkv").exists() is True


def test_main_returns_2_on_missing_config(tmp_path: Path) -> None:
    assert app.main(["-c", str(tmp_path / "missing.yaml"), "--dry-run"]) == app.EXIT_CONFIG_ERROR


def test_resolve_dry_run_follows_flags_then_tty(monkeypatch) -> None:
    class _Stdin:
        def __init__(self, tty: bool):
            self._tty = tty

        def isatty(self) -> bool:
            return self._tty

    assert app.resolve_dry_run(argparse.Namespace(dry_run=True, live=False)) is True
    assert app.resolve_dry_run(argparse.Namespace(dry_run=False, live=True)) is False

    monkeypatch.setattr(app.sys, "stdin", _Stdin(True))
    assert app.resolve_dry_run(argparse.Namespace(dry_run=False, live=False)) is True

    monkeypatch.setattr(app.sys, "stdin", _Stdin(False))
    assert app.resolve_dry_run(argparse.Namespace(dry_run=False, live=False)) is False


def test_dry_run_and_live_are_mutually_exclusive() -> None:
    with pytest.raises(SystemExit):
        app.build_parser().parse_args(["--dry-run", "--live"])
