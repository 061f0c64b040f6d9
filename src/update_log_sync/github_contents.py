"""GitHub Contents API client for a single JSON file in a repository."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any

import requests

from update_log_sync.errors import (
    ConfigMissing,
    DecodeFailure,
    RemoteRejected,
    RemoteUnavailable,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
ACCEPT_MEDIA_TYPE = "application/vnd.github.v3+json"


@dataclass(frozen=True)
class GitHubSettings:
    """Connection settings stored under the `github_config` cache key."""

    username: str
    repo: str
    token: str
    branch: str = "main"

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "GitHubSettings":
        return GitHubSettings(
            username=str(d.get("username") or "").strip(),
            repo=str(d.get("repo") or "").strip(),
            token=str(d.get("token") or "").strip(),
            branch=str(d.get("branch") or "main").strip() or "main",
        )

    def is_complete(self) -> bool:
        return bool(self.username and self.repo and self.token)

    @property
    def repo_url(self) -> str:
        return f"https://github.com/{self.username}/{self.repo}"


@dataclass(frozen=True)
class RemoteFile:
    content: bytes
    sha: str


class GitHubContentsClient:
    """Read and create-or-replace one file through the Contents API."""

    def __init__(
        self,
        settings: GitHubSettings,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.settings = settings
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def validate(self) -> None:
        if not self.settings.is_complete():
            raise ConfigMissing("GitHub client requires username, repo and token settings.")

    def file_url(self, path: str) -> str:
        self.validate()
        return (
            f"{self.api_url}/repos/{self.settings.username}/{self.settings.repo}"
            f"/contents/{path.strip('/')}"
        )

    def headers(self) -> dict[str, str]:
        self.validate()
        return {
            "Authorization": f"token {self.settings.token}",
            "Accept": ACCEPT_MEDIA_TYPE,
            "Content-Type": "application/json",
        }

    def get_file(self, path: str) -> RemoteFile | None:
        """Fetch a file; returns None when it does not exist yet (HTTP 404)."""

        response = self._request(
            "GET", self.file_url(path), params={"ref": self.settings.branch}
        )
        if response.status_code == 404:
            return None
        if not response.ok:
            raise RemoteRejected(response.status_code, f"GitHub API error: {response.status_code}")

        try:
            payload = response.json()
            encoded = payload["content"]
            sha = payload["sha"]
            # The API wraps Base64 content at 60 columns
            content = base64.b64decode("".join(str(encoded).split()), validate=True)
        except (ValueError, KeyError, TypeError, binascii.Error) as exc:
            raise DecodeFailure(f"Malformed Contents API response for {path}: {exc}") from exc

        return RemoteFile(content=content, sha=str(sha))

    def put_file(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.settings.branch,
        }
        if sha:
            body["sha"] = sha

        response = self._request("PUT", self.file_url(path), json=body)
        if not response.ok:
            raise RemoteRejected(response.status_code, _error_message(response))

        LOGGER.debug("PUT %s -> %s", path, response.status_code)
        try:
            return response.json()
        except ValueError:
            return {}

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self.session.request(
                method, url, headers=self.headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise RemoteUnavailable(f"{method} {url} failed: {exc}") from exc


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return "GitHub API error"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return "GitHub API error"
