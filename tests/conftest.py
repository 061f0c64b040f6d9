from __future__ import annotations

import base64
import hashlib
import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest
import requests

from update_log_sync.github_contents import GitHubContentsClient
from update_log_sync.state.memory import MemoryStore
from update_log_sync.storage import CONFIG_KEY, UpdateLogStorage

CONTENTS_URL = "https://api.github.com/repos/octo/notes/contents/data/logs.json"


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self.payload = payload

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self.payload is None:
            raise ValueError("no JSON body")
        return self.payload


class FakeGitHub:
    """In-memory Contents API that enforces the SHA check on PUT."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, str]] = {}
        self.calls: list[dict[str, Any]] = []
        self.fail_get_with: int | None = None
        self.fail_put_with: tuple[int, Any] | None = None
        self.raise_on_get = False
        self.raise_on_put = False
        self.after_get: Callable[[], Any] | None = None

    def seed(self, url: str, content: bytes) -> str:
        sha = hashlib.sha1(content).hexdigest()
        self.files[url] = (content, sha)
        return sha

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if method == "GET":
            return self._get(url)
        if method == "PUT":
            return self._put(url, kwargs["json"])
        return FakeResponse(405, {"message": "Method not allowed"})

    def _get(self, url: str) -> FakeResponse:
        if self.raise_on_get:
            raise requests.ConnectionError("network down")
        if self.fail_get_with is not None:
            return FakeResponse(self.fail_get_with, {"message": "Server error"})
        if url not in self.files:
            return FakeResponse(404, {"message": "Not Found"})
        content, sha = self.files[url]
        encoded = base64.encodebytes(content).decode("ascii")
        if self.after_get is not None:
            hook, self.after_get = self.after_get, None
            hook()
        return FakeResponse(200, {"content": encoded, "sha": sha, "encoding": "base64"})

    def _put(self, url: str, body: dict[str, Any]) -> FakeResponse:
        if self.raise_on_put:
            raise requests.ConnectionError("connection reset")
        if self.fail_put_with is not None:
            status, payload = self.fail_put_with
            return FakeResponse(status, payload)

        current = self.files.get(url)
        if current is not None and body.get("sha") != current[1]:
            return FakeResponse(409, {"message": f"{url.rsplit('/', 1)[-1]} does not match"})

        content = base64.b64decode(body["content"])
        sha = self.seed(url, content)
        status = 200 if current is not None else 201
        payload = {"content": {"sha": sha}, "commit": {"message": body["message"]}}
        return FakeResponse(status, payload)

    def put_bodies(self) -> list[dict[str, Any]]:
        return [call["json"] for call in self.calls if call["method"] == "PUT"]


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)


GITHUB_CONFIG = {"username": "octo", "repo": "notes", "token": "ghp_secret", "branch": "main"}


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def configured_store() -> MemoryStore:
    return MemoryStore(initial={CONFIG_KEY: json.dumps(GITHUB_CONFIG)})


@pytest.fixture
def make_storage(fake_github: FakeGitHub, notifier: RecordingNotifier):
    def _make(store: MemoryStore) -> UpdateLogStorage:
        def client_factory(settings, **kwargs):
            return GitHubContentsClient(settings, session=fake_github, **kwargs)

        return UpdateLogStorage(
            store,
            client_factory=client_factory,
            notifier=notifier,
            clock=lambda: datetime(2026, 1, 2, 3, 4, 5),
        )

    return _make
