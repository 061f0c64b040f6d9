"""In-process key-value cache, mainly for tests and ephemeral sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from update_log_sync.errors import LocalStoreFailure


@dataclass(frozen=True)
class MemorySettings:
    """A max_bytes of 0 disables the quota."""

    max_bytes: int = 0

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "MemorySettings":
        return MemorySettings(max_bytes=int(d.get("max_bytes", 0) or 0))


class MemoryStore:
    def __init__(
        self,
        settings: MemorySettings | None = None,
        initial: dict[str, str] | None = None,
    ):
        self.settings = settings or MemorySettings()
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.settings.max_bytes:
            used = sum(len(v.encode("utf-8")) for k, v in self.values.items() if k != key)
            if used + len(value.encode("utf-8")) > self.settings.max_bytes:
                raise LocalStoreFailure(f"Quota exceeded writing cache key {key!r}")
        self.values[key] = value
