"""Tests for the shared public database: /api/db/save and /db/ share links."""

import re

from arsyilla.models.folder import Folder
from conftest import SHARED_REPO, TEST_OWNER, register

TIMESTAMP_PATH = re.compile(
    r"(Senin|Selasa|Rabu|Kamis|Jumat|Sabtu|Minggu)-\d{2}-\d{2}-\d{4}-\d{2}\.\d{2}\.\d{2}/(?P<db>.+)"
)


def _save(client, headers, db_name="mydb", file_name="data.json", content='{"a": 1}'):
    return client.post(
        "/api/db/save",
        json={"dbName": db_name, "fileName": file_name, "content": content},
        headers=headers,
    )


class TestDatabaseSave:

    def test_first_save_creates_placement_and_writes_file(self, client, auth_headers, github, db):
        resp = _save(client, auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        match = re.fullmatch(r"/db/([0-9a-f]{12})/data\.json", data["url"])
        assert match

        folder = db.query(Folder).one()
        assert folder.repo_name == SHARED_REPO
        assert folder.mode == "shared"
        assert folder.share_code == match.group(1)
        path_match = TIMESTAMP_PATH.fullmatch(folder.db_path)
        assert path_match and path_match.group("db") == "mydb"

        assert SHARED_REPO in github.repos
        assert github.files[(SHARED_REPO, f"{folder.db_path}/data.json")] == b'{"a": 1}'

    def test_second_save_reuses_placement(self, client, auth_headers, github, db):
        first = _save(client, auth_headers, file_name="one.json").json()["url"]
        second = _save(client, auth_headers, file_name="two.json").json()["url"]

        assert first.split("/")[2] == second.split("/")[2]
        assert db.query(Folder).count() == 1
        assert github.create_calls == [SHARED_REPO]
        assert len(github.writes) == 2

    def test_distinct_databases_get_distinct_codes(self, client, auth_headers, db):
        a = _save(client, auth_headers, db_name="alpha").json()["url"]
        b = _save(client, auth_headers, db_name="beta").json()["url"]
        assert a.split("/")[2] != b.split("/")[2]
        paths = {f.db_path for f in db.query(Folder).all()}
        assert len(paths) == 2

    def test_same_db_name_for_two_users_is_two_placements(self, client, db):
        alice = {"X-API-Key": register(client, "alice")}
        bob = {"X-API-Key": register(client, "bob")}
        _save(client, alice)
        _save(client, bob)
        assert db.query(Folder).count() == 2

    def test_upstream_failure_is_500(self, client, auth_headers, github):
        github.fail_writes = True
        resp = _save(client, auth_headers)
        assert resp.status_code == 500
        assert resp.json()["error"] == "UPSTREAM_FAILURE"

    def test_database_and_folder_names_do_not_collide(self, client, auth_headers):
        _save(client, auth_headers, db_name="notes")
        resp = client.post("/api/folder", json={"folderName": "notes"}, headers=auth_headers)
        assert resp.status_code == 200

    def test_listed_with_sub_path(self, client, auth_headers):
        _save(client, auth_headers)
        folders = client.get("/api/my-folders", headers=auth_headers).json()["folders"]
        assert len(folders) == 1
        assert folders[0]["mode"] == "shared"
        assert folders[0]["repoName"] == SHARED_REPO
        assert TIMESTAMP_PATH.fullmatch(folders[0]["dbPath"])


class TestDatabaseShareLink:

    def test_redirects_to_raw_file_under_sub_path(self, client, auth_headers, db):
        url = _save(client, auth_headers).json()["url"]
        folder = db.query(Folder).one()

        resp = client.get(url, follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"] == (
            f"https://raw.githubusercontent.com/{TEST_OWNER}/{SHARED_REPO}/main/"
            f"{folder.db_path}/data.json"
        )

    def test_unknown_code_is_404(self, client):
        resp = client.get("/db/000000000000/data.json", follow_redirects=False)
        assert resp.status_code == 404


class TestSameSecondPlacements:

    def test_two_users_same_name_same_second_get_separate_paths(self, client, github, db, monkeypatch):
        monkeypatch.setattr(
            "arsyilla.services.placement_service.format_timestamp",
            lambda now=None: "Sabtu-17-10-2026-21.05.09",
        )
        alice = {"X-API-Key": register(client, "alice")}
        bob = {"X-API-Key": register(client, "bob")}
        alice_url = _save(client, alice, db_name="db", file_name="x.json", content="alice").json()["url"]
        _save(client, bob, db_name="db", file_name="x.json", content="bob")

        paths = [f.db_path for f in db.query(Folder).order_by(Folder.id)]
        assert len(set(paths)) == 2
        assert paths[0] == "Sabtu-17-10-2026-21.05.09/db"
        assert paths[1].endswith("/db")

        location = client.get(alice_url, follow_redirects=False).headers["location"]
        alice_path = location.split(f"/{SHARED_REPO}/main/", 1)[1]
        assert github.files[(SHARED_REPO, alice_path)] == b"alice"
