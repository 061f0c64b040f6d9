"""Configuration loading with YAML + environment overrides."""

from __future__ import annotations

import copy
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

ENV_PREFIX = "UPDATE_LOG_SYNC__"


@dataclass(frozen=True)
class Config:
    """Normalized application configuration."""

    raw: dict[str, Any]

    @property
    def logging_level(self) -> str:
        return str(self.raw.get("logging", {}).get("level", "INFO")).upper()

    @property
    def cache_backend(self) -> str:
        return str(self.raw.get("cache", {}).get("backend", "local_path"))

    @property
    def github_api_url(self) -> str:
        return str(self.raw.get("github", {}).get("api_url", "https://api.github.com")).rstrip("/")

    @property
    def github_data_path(self) -> str:
        return str(self.raw.get("github", {}).get("data_path", "data/logs.json")).strip("/")

    @property
    def github_timeout(self) -> float:
        return float(self.raw.get("github", {}).get("timeout", 30))


DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {"level": "INFO"},
    "cache": {
        "backend": "local_path",
        "local_path": {"root": ".update_log_sync"},
        "memory": {"max_bytes": 0},
    },
    "github": {
        "api_url": "https://api.github.com",
        "data_path": "data/logs.json",
        "timeout": 30,
    },
}


def load_config(path: str | Path = "config.yaml") -> Config:
    """Load app config from a YAML file and apply env var overrides.

    Environment overrides use UPDATE_LOG_SYNC__ with `__` as a nested separator.
    Example: UPDATE_LOG_SYNC__LOGGING__LEVEL=DEBUG.
    """

    path = Path(path)
    data = copy.deepcopy(DEFAULT_CONFIG)
    if path.exists():
        deep_merge(data, _load_yaml(path))

    apply_env_overrides(data)
    return Config(raw=data)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return loaded


def deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> None:
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def apply_env_overrides(
    config: dict[str, Any], environ: Mapping[str, str] | None = None
) -> None:
    """Apply UPDATE_LOG_SYNC__ variables; a scalar on the way to a nested key is replaced."""
    for key, raw_value in sorted((os.environ if environ is None else environ).items()):
        if not key.startswith(ENV_PREFIX):
            continue

        dotted = key.removeprefix(ENV_PREFIX).lower().split("__")
        target = config
        for part in dotted[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[dotted[-1]] = parse_env_value(raw_value)


def parse_env_value(raw: str) -> Any:
    lowered = raw.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"

    for caster in (int, float):
        try:
            return caster(raw)
        except ValueError:
            pass

    return raw
