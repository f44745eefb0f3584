"""Minimal Plex Media Server client.

Talks to the PMS JSON API (``Accept: application/json``) and turns the
responses into :class:`~plex_cleanup.models.VideoSummary` records.  Any
non-2xx status, transport failure or unexpected payload raises
:class:`~plex_cleanup.errors.FetchError`; nothing here retries.
"""
from __future__ import annotations

import logging
from typing import Any

import requests
import urllib3

from .errors import FetchError
from .models import VideoDetail, VideoSummary


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 32400
DEFAULT_SCHEME = "http"
DEFAULT_TIMEOUT_SECONDS = 30
LOG_PREFIX = "[PLEX]"


logger = logging.getLogger(__name__)


def build_base_url(*, host: str, port: int | str, scheme: str = DEFAULT_SCHEME) -> str:
    return f"{scheme}://{host}:{int(port)}"


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_rating(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class PlexClient:
    def __init__(
        self,
        *,
        base_url: str,
        token: str = "",
        verify_ssl: bool = True,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = float(timeout_seconds)
        self._session = session if session is not None else requests.Session()
        self._session.headers["Accept"] = "application/json"
        if token:
            self._session.headers["X-Plex-Token"] = token
        self._session.verify = bool(verify_ssl)
        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._session.close()

    def _get_container(self, path: str) -> dict[str, Any]:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self._session.get(url, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise FetchError(f"Request to {url} failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise FetchError(f"status {response.status_code} trying to download: {url}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"Malformed response from {url}: {exc}") from exc

        container = payload.get("MediaContainer") if isinstance(payload, dict) else None
        if not isinstance(container, dict):
            raise FetchError(f"Malformed response from {url}: missing MediaContainer")
        return container

    def list_libraries(self) -> dict[str, str]:
        """Map library title to its section key."""
        container = self._get_container("library/sections/")
        out: dict[str, str] = {}
        for directory in container.get("Directory") or []:
            title = str(directory.get("title") or "")
            key = str(directory.get("key") or "")
            if title and key:
                out[title] = key
        logger.debug("%s Found %d libraries on %s", LOG_PREFIX, len(out), self._base_url)
        return out

    def list_videos(self, library_id: str) -> list[VideoSummary]:
        container = self._get_container(f"library/sections/{library_id}/all/")
        videos: list[VideoSummary] = []
        for item in container.get("Metadata") or []:
            media = item.get("Media")
            if not media:
                # Shows, seasons and other non-video entries carry no media parts.
                continue
            files = [
                str(part["file"])
                for media_item in media
                for part in (media_item.get("Part") or [])
                if part.get("file")
            ]
            videos.append(
                VideoSummary(
                    rating_key=str(item.get("ratingKey") or ""),
                    title=str(item.get("title") or ""),
                    view_count=_to_int(item.get("viewCount")),
                    files=files,
                )
            )
        return videos

    def get_video_detail(self, rating_key: str) -> VideoDetail:
        container = self._get_container(f"library/metadata/{rating_key}")
        metadata = container.get("Metadata") or []
        if not metadata:
            raise FetchError(f"No metadata returned for item {rating_key}")
        return VideoDetail(user_rating=_to_rating(metadata[0].get("userRating")))
