from __future__ import annotations

import math
import re

from .errors import ConfigurationError


AGE_UNITS: dict[str, int] = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
}

# Suffix position is the power of 1024.
SIZE_SUFFIXES = "bKMGTPEZY"

_AGE_PATTERN = re.compile(r"^\s*([0-9]+(?:\.[0-9]*)?|\.[0-9]+)\s*([A-Za-z]*)\s*$")
_SIZE_PATTERN = re.compile(rf"^\s*([0-9]+)\s*([{SIZE_SUFFIXES}]?)\s*$", re.IGNORECASE)


def parse_age(value: str | int | float) -> int:
    """Convert an age such as ``"3 days"`` or ``"1.5h"`` into seconds."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid age '{value}'")
    if isinstance(value, (int, float)):
        return _finite_seconds(value, value)

    match = _AGE_PATTERN.match(str(value))
    if not match:
        raise ConfigurationError(f"Invalid age '{value}': expected <number>[unit]")

    number = float(match.group(1))
    unit = (match.group(2) or "seconds").lower()
    if unit not in AGE_UNITS:
        raise ConfigurationError(
            f"Invalid age unit '{match.group(2)}' in '{value}'. Allowed units: {sorted(set(AGE_UNITS))}"
        )
    return _finite_seconds(number * AGE_UNITS[unit], value)


def _finite_seconds(seconds: int | float, original: object) -> int:
    if isinstance(seconds, float) and not math.isfinite(seconds):
        raise ConfigurationError(f"Invalid age '{original}': must be a finite number")
    if seconds < 0:
        raise ConfigurationError(f"Age must be >= 0: '{original}'")
    return int(seconds)


def parse_size(value: str | int) -> int:
    """Convert a size such as ``"10G"`` into bytes using powers of 1024."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid size '{value}'")
    if isinstance(value, int):
        if value < 0:
            raise ConfigurationError(f"Size must be >= 0: '{value}'")
        return value

    match = _SIZE_PATTERN.match(str(value))
    if not match:
        raise ConfigurationError(
            f"Invalid size '{value}': expected <integer>[suffix] with suffix one of '{SIZE_SUFFIXES}'"
        )

    exponent = SIZE_SUFFIXES.upper().index(match.group(2).upper()) if match.group(2) else 0
    return int(match.group(1)) * 1024**exponent


def format_human_bytes(num_bytes: int | float) -> str:
    num = float(num_bytes)
    unit = 0
    while num >= 1000 and unit < len(SIZE_SUFFIXES) - 1:
        num /= 1024
        unit += 1

    suffix = SIZE_SUFFIXES[unit]
    if num >= 10 or num == int(num):
        return f"{int(num)}{suffix}"
    if num >= 1:
        return f"{num:.1f}{suffix}"
    return f"{num:.2f}{suffix}"


_TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}


def parse_boolish(value: object, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if not normalized:
        return default
    return normalized in _TRUE_VALUES
