"""Tests for GitHubClient status-code handling, with a mocked requests session."""

from unittest.mock import MagicMock

import pytest
import requests

from arsyilla.exceptions import UpstreamConflictError, UpstreamError
from arsyilla.services.github_client import GitHubClient


def _response(status, json_body=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = json_body if json_body is not None else {}
    resp.text = text
    return resp


@pytest.fixture()
def session():
    s = MagicMock(spec=requests.Session)
    s.headers = {}
    return s


@pytest.fixture()
def gh(session):
    return GitHubClient(token="ghp_secret", owner="octo", session=session)


class TestHeaders:

    def test_bearer_and_api_version(self, session, gh):
        assert session.headers["Authorization"] == "Bearer ghp_secret"
        assert session.headers["Accept"] == "application/vnd.github+json"
        assert "X-GitHub-Api-Version" in session.headers

    def test_no_authorization_without_token(self):
        s = MagicMock(spec=requests.Session)
        s.headers = {}
        GitHubClient(token="", owner="octo", session=s)
        assert "Authorization" not in s.headers


class TestCreateRepository:

    def test_created(self, session, gh):
        session.post.return_value = _response(201)
        assert gh.create_repository("notes") is True
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.github.com/user/repos"
        assert kwargs["json"] == {"name": "notes", "auto_init": True}

    def test_already_exists(self, session, gh):
        session.post.return_value = _response(
            422, text='{"message":"Repository creation failed.","errors":[{"message":"name already exists on this account"}]}'
        )
        assert gh.create_repository("notes") is False

    def test_other_422_is_upstream_error(self, session, gh):
        session.post.return_value = _response(422, text='{"message":"name is invalid"}')
        with pytest.raises(UpstreamError) as exc:
            gh.create_repository("bad name")
        assert exc.value.upstream_status == 422

    def test_server_error(self, session, gh):
        session.post.return_value = _response(500, text="boom")
        with pytest.raises(UpstreamError) as exc:
            gh.create_repository("notes")
        assert exc.value.status_code == 500
        assert exc.value.details["operation"] == "create_repository"

    def test_network_failure(self, session, gh):
        session.post.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(UpstreamError):
            gh.create_repository("notes")


class TestProbeFile:

    def test_existing_file_returns_sha(self, session, gh):
        session.get.return_value = _response(200, {"sha": "abc123", "type": "file"})
        assert gh.probe_file("notes", "dir/a.txt") == "abc123"
        args, kwargs = session.get.call_args
        assert args[0] == "https://api.github.com/repos/octo/notes/contents/dir/a.txt"
        assert kwargs["params"] == {"ref": "main"}

    def test_missing_file(self, session, gh):
        session.get.return_value = _response(404)
        assert gh.probe_file("notes", "a.txt") is None

    def test_error_status_treated_as_absent(self, session, gh):
        session.get.return_value = _response(503)
        assert gh.probe_file("notes", "a.txt") is None

    def test_network_failure_treated_as_absent(self, session, gh):
        session.get.side_effect = requests.exceptions.Timeout()
        assert gh.probe_file("notes", "a.txt") is None

    def test_directory_listing_has_no_sha(self, session, gh):
        session.get.return_value = _response(200, [{"sha": "x"}])
        assert gh.probe_file("notes", "dir") is None

    def test_path_is_quoted(self, session, gh):
        session.get.return_value = _response(404)
        gh.probe_file("notes", "my file.txt")
        assert session.get.call_args[0][0].endswith("/contents/my%20file.txt")


class TestWriteFile:

    def test_create_sends_base64_without_sha(self, session, gh):
        session.put.return_value = _response(201, {"content": {"sha": "new"}})
        result = gh.write_file("notes", "a.txt", "hi")
        assert result == {"content": {"sha": "new"}}
        payload = session.put.call_args[1]["json"]
        assert payload["content"] == "aGk="
        assert payload["branch"] == "main"
        assert payload["message"] == "Backup Update by Arsyilla AI"
        assert "sha" not in payload

    def test_overwrite_sends_sha(self, session, gh):
        session.put.return_value = _response(200, {})
        gh.write_file("notes", "a.txt", b"hi", sha="old")
        assert session.put.call_args[1]["json"]["sha"] == "old"

    def test_conflict(self, session, gh):
        session.put.return_value = _response(409, text="conflict")
        with pytest.raises(UpstreamConflictError):
            gh.write_file("notes", "a.txt", "hi", sha="stale")

    def test_missing_sha_422_is_conflict(self, session, gh):
        session.put.return_value = _response(422, text='{"message":"\\"sha\\" wasn\'t supplied."}')
        with pytest.raises(UpstreamConflictError):
            gh.write_file("notes", "a.txt", "hi")

    def test_other_failure(self, session, gh):
        session.put.return_value = _response(403, text="forbidden")
        with pytest.raises(UpstreamError) as exc:
            gh.write_file("notes", "a.txt", "hi")
        assert not isinstance(exc.value, UpstreamConflictError)
        assert exc.value.upstream_status == 403


class TestUpsertFile:

    def test_probe_then_write(self, session, gh):
        session.get.return_value = _response(200, {"sha": "cur"})
        session.put.return_value = _response(200, {})
        gh.upsert_file("notes", "a.txt", "hi")
        assert session.put.call_args[1]["json"]["sha"] == "cur"

    def test_conflict_propagates_without_retries(self, session, gh):
        session.get.return_value = _response(200, {"sha": "cur"})
        session.put.return_value = _response(409)
        with pytest.raises(UpstreamConflictError):
            gh.upsert_file("notes", "a.txt", "hi")
        assert session.put.call_count == 1

    def test_conflict_retry_reprobes(self, session):
        gh = GitHubClient(token="t", owner="octo", conflict_retries=1, session=session)
        session.get.side_effect = [_response(200, {"sha": "one"}), _response(200, {"sha": "two"})]
        session.put.side_effect = [_response(409), _response(200, {"ok": True})]
        assert gh.upsert_file("notes", "a.txt", "hi") == {"ok": True}
        assert session.put.call_args[1]["json"]["sha"] == "two"
