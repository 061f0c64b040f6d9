from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from update_log_sync.errors import LocalStoreFailure

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalPathSettings:
    root: Path

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "LocalPathSettings":
        return LocalPathSettings(root=Path(d.get("root", ".update_log_sync")))


class LocalPathStore:
    """
    Durable key-value cache on disk.
    Each key is one JSON text file under the root directory, e.g. `updateLogs.json`.
    """

    def __init__(self, settings: LocalPathSettings):
        self.settings = settings

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self.settings.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LocalStoreFailure(f"Could not read cache key {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write then rename so a crash never leaves a truncated cache file
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            LOGGER.debug("Cache write to %s failed: %s", path, exc)
            raise LocalStoreFailure(f"Could not write cache key {key!r}: {exc}") from exc
