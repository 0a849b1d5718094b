"""Shared test fixtures for the Arsyilla test suite.

Every test builds its own app from an explicit ``Settings`` pointing at a
fresh in-memory SQLite database. GitHub is replaced by
``FakeGitHubClient``, which keeps repositories and files in dictionaries
but inherits the real ``upsert_file`` so the probe-then-write sequence is
exercised.
"""

import hashlib
from typing import Dict, List, Optional, Tuple, Union

import pytest
from fastapi.testclient import TestClient

from arsyilla.core.config import Settings
from arsyilla.database import init_db
from arsyilla.exceptions import UpstreamConflictError, UpstreamError
from arsyilla.main import create_app
from arsyilla.services.github_client import GitHubClient

TEST_OWNER = "octo-owner"
SHARED_REPO = "Arsyilla-Database-Public"


class FakeGitHubClient(GitHubClient):
    """In-memory stand-in for the GitHub API."""

    def __init__(self, conflict_retries: int = 0):
        self.owner = TEST_OWNER
        self.branch = "main"
        self.commit_message = "Backup Update by Arsyilla AI"
        self.conflict_retries = conflict_retries
        self.repos: set = set()
        self.files: Dict[Tuple[str, str], bytes] = {}
        self.create_calls: List[str] = []
        self.writes: List[Tuple[str, str, Optional[str]]] = []
        self.fail_writes = False
        self.conflicts_to_raise = 0
        self.closed = False

    def create_repository(self, name: str) -> bool:
        self.create_calls.append(name)
        if name in self.repos:
            return False
        self.repos.add(name)
        return True

    def probe_file(self, repo: str, path: str) -> Optional[str]:
        data = self.files.get((repo, path))
        if data is None:
            return None
        return hashlib.sha1(data).hexdigest()

    def write_file(self, repo: str, path: str, content: Union[str, bytes], sha: Optional[str] = None) -> dict:
        self.writes.append((repo, path, sha))
        if self.fail_writes:
            raise UpstreamError("File upload failed with 500: boom", status=500, operation="write_file")
        if self.conflicts_to_raise:
            self.conflicts_to_raise -= 1
            raise UpstreamConflictError(operation="write_file")
        raw = content.encode("utf-8") if isinstance(content, str) else content
        self.files[(repo, path)] = raw
        return {"content": {"path": path, "sha": hashlib.sha1(raw).hexdigest()}}

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        github_token="ghp_testtoken",
        github_owner=TEST_OWNER,
        shared_repo_name=SHARED_REPO,
    )


@pytest.fixture()
def github() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture()
def app(settings, github):
    return create_app(settings, github=github)


@pytest.fixture()
def db(app):
    """Session on the app's own engine; tables exist before the client starts."""
    init_db(app.state.engine)
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


def register(client: TestClient, username: str = "alice", password: str = "pw1") -> str:
    """Register a user and return its access key."""
    resp = client.post("/api/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["accessKey"]


@pytest.fixture()
def access_key(client) -> str:
    return register(client)


@pytest.fixture()
def auth_headers(access_key) -> dict:
    return {"X-API-Key": access_key}
