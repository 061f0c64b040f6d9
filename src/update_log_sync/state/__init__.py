"""Local cache store factory and exports."""

from __future__ import annotations

from typing import Protocol

from update_log_sync.config import Config
from update_log_sync.state.local_path import LocalPathSettings, LocalPathStore
from update_log_sync.state.memory import MemorySettings, MemoryStore


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


def build_cache_store(config: Config) -> KeyValueStore:
    """Build the configured cache store from the loaded config object."""

    cache_config = config.raw.get("cache", {})
    backend_name = config.cache_backend

    if backend_name == "local_path":
        return LocalPathStore(LocalPathSettings.from_dict(cache_config.get("local_path", {})))

    if backend_name == "memory":
        return MemoryStore(MemorySettings.from_dict(cache_config.get("memory", {})))

    raise ValueError(f"Unknown cache backend: {backend_name}")


__all__ = [
    "build_cache_store",
    "KeyValueStore",
    "LocalPathSettings",
    "LocalPathStore",
    "MemorySettings",
    "MemoryStore",
]
