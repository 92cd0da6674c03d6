"""Centralised configuration with environment overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Mapping, TypeVar

from .errors import ConfigError

log = logging.getLogger(__name__)

T = TypeVar("T", float, int)

__all__ = [
    "ConfigError",
    "PlatformConfig",
    "load_platform_config",
    "SCOREBOARD_PORT",
    "SCOREBOARD_HTTP_TIMEOUT_S",
    "SCOREBOARD_HTTP_MAX_CONNECTIONS",
    "PLATFORM_NAME",
    "PLUGIN_NAME",
]


def _get_env(name: str, default: T, caster: Callable[[str], T]) -> T:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return caster(value)
    except (TypeError, ValueError):
        log.warning("Invalid value for %s: %r (using default %r)", name, value, default)
        return default


SCOREBOARD_PORT: int = _get_env("SCOREBOARD_PORT", 5005, int)
SCOREBOARD_HTTP_TIMEOUT_S: float = _get_env("SCOREBOARD_HTTP_TIMEOUT_S", 5.0, float)
SCOREBOARD_HTTP_MAX_CONNECTIONS: int = _get_env("SCOREBOARD_HTTP_MAX_CONNECTIONS", 8, int)

PLATFORM_NAME = "SchmidtScoreboard"
PLUGIN_NAME = "scoreboard-bridge"


@dataclass(frozen=True)
class PlatformConfig:
    """Platform block as handed over by the accessory host."""

    name: str = PLATFORM_NAME
    scoreboards: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PlatformConfig":
        raw = data.get("scoreboards", [])
        if not isinstance(raw, list):
            raise ConfigError(f"'scoreboards' must be a list, got {type(raw).__name__}")
        tokens: List[str] = []
        for index, entry in enumerate(raw):
            if not isinstance(entry, str):
                raise ConfigError(f"scoreboards[{index}] must be a string, got {entry!r}")
            tokens.append(entry.strip())
        name = data.get("name") or PLATFORM_NAME
        return cls(name=str(name), scoreboards=tokens)


def load_platform_config(path: Path) -> PlatformConfig:
    """Read a JSON platform block from *path*."""

    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"{path}: cannot read platform config ({exc})") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object")
    return PlatformConfig.from_mapping(data)
