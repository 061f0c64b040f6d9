"""Update log storage backed by a GitHub repository file with a local cache fallback.

Reads prefer the remote file when GitHub is configured and fall back to the
local cache on any failure. Writes go to the remote file when configured and
are always mirrored into the local cache, whatever the remote outcome.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from update_log_sync.config import Config
from update_log_sync.errors import (
    ConfigMissing,
    DecodeFailure,
    LocalStoreFailure,
    UpdateLogSyncError,
)
from update_log_sync.github_contents import DEFAULT_API_URL, GitHubContentsClient, GitHubSettings
from update_log_sync.notify import LoggingNotifier, Notifier
from update_log_sync.state import KeyValueStore, build_cache_store

LOGGER = logging.getLogger(__name__)

CONFIG_KEY = "github_config"
LOGS_KEY = "updateLogs"
DEFAULT_DATA_PATH = "data/logs.json"
COMMIT_MESSAGE_PREFIX = "Update log data"

LogCollection = list[Any]
ClientFactory = Callable[..., GitHubContentsClient]

T = TypeVar("T")


@dataclass(frozen=True)
class ConfigInfo:
    """Display-safe view of the GitHub settings; never carries the token."""

    username: str
    repo: str
    branch: str
    repo_url: str


@dataclass(frozen=True)
class SyncResult(Generic[T]):
    """Outcome of an explicit sync request: a value, or the reason it could not run."""

    value: T | None = None
    error: ConfigMissing | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class UpdateLogStorage:
    """Load and save the update log collection."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        client_factory: ClientFactory = GitHubContentsClient,
        notifier: Notifier | None = None,
        data_path: str = DEFAULT_DATA_PATH,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.notifier = notifier or LoggingNotifier()
        self.data_path = data_path
        self.clock = clock or datetime.now
        self.settings = self._load_config()
        self.client: GitHubContentsClient | None = None
        if self.is_configured():
            self.client = client_factory(self.settings, api_url=api_url, timeout=timeout)

    def _load_config(self) -> GitHubSettings | None:
        try:
            raw = self.store.get(CONFIG_KEY)
        except LocalStoreFailure as exc:
            LOGGER.error("Failed to read %s from cache store: %s", CONFIG_KEY, exc)
            return None
        if raw is None:
            return None
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as exc:
            LOGGER.error("Failed to parse %s from cache store: %s", CONFIG_KEY, exc)
            return None
        if not isinstance(parsed, dict):
            LOGGER.error(
                "Ignoring %s: expected a JSON object, got %s", CONFIG_KEY, type(parsed).__name__
            )
            return None
        return GitHubSettings.from_dict(parsed)

    def is_configured(self) -> bool:
        return self.settings is not None and self.settings.is_complete()

    def _require_client(self) -> GitHubContentsClient:
        if self.client is None:
            raise ConfigMissing("GitHub is not configured")
        return self.client

    def api_url(self) -> str:
        return self._require_client().file_url(self.data_path)

    def headers(self) -> dict[str, str]:
        return self._require_client().headers()

    def load(self) -> LogCollection:
        if not self.is_configured():
            LOGGER.warning("GitHub is not configured, using local cache")
            return self.load_local()

        client = self._require_client()
        try:
            remote = client.get_file(self.data_path)
            if remote is None:
                # 404 leaves the local cache untouched
                LOGGER.info("Remote data file %s does not exist yet", self.data_path)
                return []

            logs = _decode_collection(remote.content)
            self.save_local(logs)
            return logs
        except UpdateLogSyncError as exc:
            LOGGER.error("Loading from GitHub failed: %s", exc)
            LOGGER.info("Falling back to local cache")
            return self.load_local()

    def save(self, logs: LogCollection) -> bool:
        if not self.is_configured():
            LOGGER.warning("GitHub is not configured, saving to local cache only")
            return self.save_local(logs)

        client = self._require_client()
        try:
            sha: str | None = None
            try:
                current = client.get_file(self.data_path)
                if current is not None:
                    sha = current.sha
            except UpdateLogSyncError as exc:
                LOGGER.info("Could not read current revision, creating a new file: %s", exc)

            content = json.dumps(logs, indent=2, ensure_ascii=False).encode("utf-8")
            client.put_file(self.data_path, content, self.commit_message(), sha=sha)
        except (UpdateLogSyncError, TypeError, ValueError, RecursionError) as exc:
            LOGGER.error("Saving to GitHub failed: %s", exc)
            self.notifier.warn(
                "Syncing update logs to GitHub failed!\n\n"
                f"Error: {exc}\n\n"
                "The data was saved to the local cache, please retry the sync later."
            )
            self.save_local(logs)
            return False

        self.save_local(logs)
        LOGGER.info("Synced %d update log records to GitHub", len(logs))
        return True

    def commit_message(self) -> str:
        return f"{COMMIT_MESSAGE_PREFIX} - {self.clock().strftime('%Y-%m-%d %H:%M:%S')}"

    def load_local(self) -> LogCollection:
        try:
            raw = self.store.get(LOGS_KEY)
        except LocalStoreFailure as exc:
            LOGGER.error("Local cache entry %s is unreadable: %s", LOGS_KEY, exc)
            return []
        if raw is None:
            return []
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as exc:
            LOGGER.error("Local cache entry %s is not valid JSON: %s", LOGS_KEY, exc)
            return []

    def save_local(self, logs: LogCollection) -> bool:
        try:
            self.store.set(LOGS_KEY, json.dumps(logs, ensure_ascii=False))
        except LocalStoreFailure as exc:
            LOGGER.error("Local cache is full or unwritable: %s", exc)
            return False
        except (TypeError, ValueError, RecursionError) as exc:
            LOGGER.error("Saving to local cache failed: %s", exc)
            return False
        return True

    def pull(self) -> SyncResult[LogCollection]:
        if not self.is_configured():
            return SyncResult(error=ConfigMissing("Configure the GitHub connection first"))
        return SyncResult(value=self.load())

    def push(self) -> SyncResult[bool]:
        if not self.is_configured():
            return SyncResult(error=ConfigMissing("Configure the GitHub connection first"))
        return SyncResult(value=self.save(self.load_local()))

    def sync_from_github(self) -> LogCollection:
        return self.pull().unwrap()

    def sync_to_github(self) -> bool:
        return self.push().unwrap()

    def get_config_info(self) -> ConfigInfo | None:
        if not self.is_configured() or self.settings is None:
            return None
        return ConfigInfo(
            username=self.settings.username,
            repo=self.settings.repo,
            branch=self.settings.branch,
            repo_url=self.settings.repo_url,
        )


def _decode_collection(content: bytes) -> LogCollection:
    try:
        return json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise DecodeFailure(f"Remote data file is not valid UTF-8 JSON: {exc}") from exc


def build_storage(config: Config, notifier: Notifier | None = None) -> UpdateLogStorage:
    """Build a storage adapter from the loaded config object."""

    return UpdateLogStorage(
        build_cache_store(config),
        notifier=notifier,
        data_path=config.github_data_path,
        api_url=config.github_api_url,
        timeout=config.github_timeout,
    )
