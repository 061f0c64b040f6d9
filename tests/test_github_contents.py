from __future__ import annotations

import base64

import pytest

from conftest import CONTENTS_URL, FakeGitHub, FakeResponse
from update_log_sync.errors import ConfigMissing, DecodeFailure, RemoteRejected, RemoteUnavailable
from update_log_sync.github_contents import GitHubContentsClient, GitHubSettings

SETTINGS = GitHubSettings(username="octo", repo="notes", token="ghp_secret")


def test_client_requires_complete_settings() -> None:
    client = GitHubContentsClient(GitHubSettings(username="octo", repo="", token="t"))

    with pytest.raises(ConfigMissing):
        client.validate()


def test_settings_from_dict_defaults_branch() -> None:
    settings = GitHubSettings.from_dict({"username": " octo ", "repo": "notes", "token": "t"})

    assert settings.username == "octo"
    assert settings.branch == "main"
    assert settings.repo_url == "https://github.com/octo/notes"


def test_file_url_uses_custom_api_url() -> None:
    client = GitHubContentsClient(SETTINGS, api_url="https://ghe.example.com/api/v3/")

    assert (
        client.file_url("/data/logs.json")
        == "https://ghe.example.com/api/v3/repos/octo/notes/contents/data/logs.json"
    )


def test_get_file_missing_returns_none(fake_github: FakeGitHub) -> None:
    client = GitHubContentsClient(SETTINGS, session=fake_github)

    assert client.get_file("data/logs.json") is None


def test_get_file_decodes_wrapped_base64(fake_github: FakeGitHub) -> None:
    sha = fake_github.seed(CONTENTS_URL, "日志".encode("utf-8") * 40)
    client = GitHubContentsClient(SETTINGS, session=fake_github, timeout=5)

    remote = client.get_file("data/logs.json")

    assert remote is not None
    assert remote.sha == sha
    assert remote.content.decode("utf-8") == "日志" * 40
    assert fake_github.calls[0]["timeout"] == 5


def test_get_file_rejects_missing_sha() -> None:
    class _Session:
        def request(self, method, url, **kwargs):
            return FakeResponse(200, {"content": base64.b64encode(b"[]").decode("ascii")})

    client = GitHubContentsClient(SETTINGS, session=_Session())

    with pytest.raises(DecodeFailure):
        client.get_file("data/logs.json")


def test_get_file_rejects_invalid_base64() -> None:
    class _Session:
        def request(self, method, url, **kwargs):
            return FakeResponse(200, {"content": "%%%not-base64%%%", "sha": "abc"})

    client = GitHubContentsClient(SETTINGS, session=_Session())

    with pytest.raises(DecodeFailure):
        client.get_file("data/logs.json")


def test_get_file_non_success_raises_rejected(fake_github: FakeGitHub) -> None:
    fake_github.fail_get_with = 401
    client = GitHubContentsClient(SETTINGS, session=fake_github)

    with pytest.raises(RemoteRejected) as excinfo:
        client.get_file("data/logs.json")

    assert excinfo.value.status_code == 401


def test_transport_error_raises_unavailable(fake_github: FakeGitHub) -> None:
    fake_github.raise_on_get = True
    client = GitHubContentsClient(SETTINGS, session=fake_github)

    with pytest.raises(RemoteUnavailable):
        client.get_file("data/logs.json")


def test_put_file_sends_sha_only_when_given(fake_github: FakeGitHub) -> None:
    client = GitHubContentsClient(SETTINGS, session=fake_github)

    client.put_file("data/logs.json", b"[]", "create")
    sha = fake_github.files[CONTENTS_URL][1]
    client.put_file("data/logs.json", b"[1]", "update", sha=sha)

    create_body, update_body = fake_github.put_bodies()
    assert "sha" not in create_body
    assert update_body["sha"] == sha
    assert update_body["branch"] == "main"
    assert base64.b64decode(update_body["content"]) == b"[1]"


def test_put_file_error_carries_api_message(fake_github: FakeGitHub) -> None:
    fake_github.fail_put_with = (403, {"message": "Resource not accessible by token"})
    client = GitHubContentsClient(SETTINGS, session=fake_github)

    with pytest.raises(RemoteRejected) as excinfo:
        client.put_file("data/logs.json", b"[]", "create")

    assert excinfo.value.status_code == 403
    assert str(excinfo.value) == "Resource not accessible by token"
