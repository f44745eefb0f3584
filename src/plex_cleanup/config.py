"""Load the YAML config for plex-cleanup.

Connection settings are resolved in this order: CLI flag -> environment
variable -> ``.env`` next to the config file -> YAML ``plex`` section ->
built-in default.  Library sections are returned raw; each one is validated
separately so a bad library does not stop the others.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

from .errors import ConfigurationError
from .plex import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SCHEME, DEFAULT_TIMEOUT_SECONDS
from .units import parse_boolish


ENV_CONFIG_PATH = "PLEX_CLEANUP_CONFIG"
ENV_PLEX_HOST = "PLEX_HOST"
ENV_PLEX_PORT = "PLEX_PORT"
ENV_PLEX_TOKEN = "PLEX_TOKEN"

DEFAULT_CONFIG_PATH = Path("~/.config/plex-cleanup.yaml")


@dataclass(frozen=True)
class PlexSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    scheme: str = DEFAULT_SCHEME
    token: str = ""
    verify_ssl: bool = True
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class AppConfig:
    plex: PlexSettings = field(default_factory=PlexSettings)
    libraries: dict[str, Any] = field(default_factory=dict)


def resolve_config_path(cli_value: str | None = None) -> Path:
    raw = str(cli_value or "").strip() or str(os.getenv(ENV_CONFIG_PATH) or "").strip()
    if raw:
        return Path(raw).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"failed to open config file '{path}' for reading: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"failed to parse config file '{path}': {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"config file '{path}' must contain a mapping")
    return payload


def _read_dotenv(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    return {key: str(value) for key, value in dotenv_values(path).items() if value is not None}


def _first(*values: Any) -> str:
    for value in values:
        text = str(value if value is not None else "").strip()
        if text:
            return text
    return ""


def _build_plex_settings(
    section: Mapping[str, Any],
    *,
    dotenv: Mapping[str, str],
    overrides: Mapping[str, Any],
) -> PlexSettings:
    host = _first(
        overrides.get("host"),
        os.getenv(ENV_PLEX_HOST),
        dotenv.get(ENV_PLEX_HOST),
        section.get("host"),
    ) or DEFAULT_HOST
    port_raw = _first(
        overrides.get("port"),
        os.getenv(ENV_PLEX_PORT),
        dotenv.get(ENV_PLEX_PORT),
        section.get("port"),
    ) or str(DEFAULT_PORT)
    token = _first(
        overrides.get("token"),
        os.getenv(ENV_PLEX_TOKEN),
        dotenv.get(ENV_PLEX_TOKEN),
        section.get("token"),
    )

    try:
        port = int(port_raw)
        timeout_seconds = float(section.get("timeout_seconds") or DEFAULT_TIMEOUT_SECONDS)
    except ValueError as exc:
        raise ConfigurationError(f"invalid plex connection setting: {exc}") from exc

    return PlexSettings(
        host=host,
        port=port,
        scheme=_first(section.get("scheme")) or DEFAULT_SCHEME,
        token=token,
        verify_ssl=parse_boolish(section.get("verify_ssl"), default=True),
        timeout_seconds=timeout_seconds,
    )


def load_config(
    path: Path,
    *,
    env_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    payload = _read_yaml(path)

    plex_section = payload.get("plex") or {}
    if not isinstance(plex_section, dict):
        raise ConfigurationError("'plex' section must be a mapping")

    libraries = payload.get("libraries") or {}
    if not isinstance(libraries, dict):
        raise ConfigurationError("'libraries' section must be a mapping of library name to settings")

    dotenv = _read_dotenv(env_file if env_file is not None else path.parent / ".env")
    plex = _build_plex_settings(plex_section, dotenv=dotenv, overrides=overrides or {})

    return AppConfig(plex=plex, libraries={str(name): value for name, value in libraries.items()})
