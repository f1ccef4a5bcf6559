from __future__ import annotations

from datetime import datetime

import pytest

from csvfiles_api.app import records
from csvfiles_api.app.records import save_upload
from csvfiles_api.app.routes import users as users_routes

BASE = "/api/v1/files/users.csv/users"


@pytest.fixture
def stored_file(app):
    doc, _ = save_upload("users.csv", "id=1,email=ada@example.com,name=Ada\n")
    return doc


def test_list_users(client, stored_file):
    resp = client.get(BASE)

    assert resp.status_code == 200
    assert resp.get_json() == {
        "filename": "users.csv",
        "count": 1,
        "users": [{"id": 1, "email": "ada@example.com", "name": "Ada"}],
    }


def test_create_user_rewrites_content(client, csv_files, stored_file):
    resp = client.post(BASE, json={"id": 2, "email": "alan@example.com", "name": "Alan"})

    assert resp.status_code == 201
    doc = csv_files.find_one({"filename": "users.csv"})
    assert [user["id"] for user in doc["users"]] == [1, 2]
    assert doc["csvContent"] == "id=1,email=ada@example.com,name=Ada\nid=2,email=alan@example.com,name=Alan\n"
    assert doc["uploadedAt"] == stored_file["uploadedAt"]


def test_create_user_with_existing_id_conflicts(client, stored_file):
    resp = client.post(BASE, json={"id": 1, "email": "other@example.com", "name": "Other"})

    assert resp.status_code == 409
    assert resp.get_json()["error"]["code"] == "DUPLICATE"


def test_create_user_validates_payload(client, stored_file):
    resp = client.post(BASE, json={"id": "x", "email": "not-an-email"})

    assert resp.status_code == 422
    fields = {detail["field"] for detail in resp.get_json()["error"]["details"]}
    assert fields == {"id", "email", "name"}


def test_create_user_on_missing_file(client):
    resp = client.post("/api/v1/files/missing.csv/users", json={"id": 1, "email": "a@example.com", "name": "A"})
    assert resp.status_code == 404


def test_put_requires_all_fields(client, stored_file):
    resp = client.put(f"{BASE}/1", json={"email": "new@example.com"})
    assert resp.status_code == 422


def test_put_replaces_user(client, csv_files, stored_file):
    resp = client.put(f"{BASE}/1", json={"email": "new@example.com", "name": "Ada L"})

    assert resp.status_code == 200
    assert resp.get_json() == {"id": 1, "email": "new@example.com", "name": "Ada L"}
    doc = csv_files.find_one({"filename": "users.csv"})
    assert doc["csvContent"] == "id=1,email=new@example.com,name=Ada L\n"


def test_patch_updates_only_given_fields(client, csv_files, stored_file):
    resp = client.patch(f"{BASE}/1", json={"name": "Countess"})

    assert resp.status_code == 200
    assert resp.get_json() == {"id": 1, "email": "ada@example.com", "name": "Countess"}


def test_update_unknown_user(client, stored_file):
    assert client.patch(f"{BASE}/42", json={"name": "X"}).status_code == 404
    assert client.delete(f"{BASE}/42").status_code == 404


def test_delete_user(client, csv_files, stored_file):
    resp = client.delete(f"{BASE}/1")

    assert resp.status_code == 204
    doc = csv_files.find_one({"filename": "users.csv"})
    assert doc["users"] == []
    assert doc["csvContent"] == ""


def test_negative_ids_can_be_updated_and_deleted(client, csv_files):
    save_upload("users.csv", "id=-1,email=neg@example.com,name=Neg\n")

    resp = client.post(BASE, json={"id": -2, "email": "two@example.com", "name": "Two"})
    assert resp.status_code == 201
    assert client.patch(f"{BASE}/-2", json={"name": "Minus Two"}).status_code == 200
    assert client.put(f"{BASE}/-1", json={"email": "n@example.com", "name": "N"}).status_code == 200
    assert client.delete(f"{BASE}/-1").status_code == 204

    doc = csv_files.find_one({"filename": "users.csv"})
    assert doc["users"] == [{"id": -2, "email": "two@example.com", "name": "Minus Two"}]


def test_concurrent_change_between_read_and_write_conflicts(client, csv_files, stored_file, monkeypatch):
    def write_after_other_request(filename, users, expected_modified=None):
        other = [{"id": 1, "email": "ada@example.com", "name": "Ada"}, {"id": 3, "email": "c@example.com", "name": "C"}]
        csv_files.update_one(
            {"filename": filename}, {"$set": {"users": other, "lastModified": datetime(2030, 1, 1)}}
        )
        return records.replace_users(filename, users, expected_modified)

    monkeypatch.setattr(users_routes, "replace_users", write_after_other_request)
    resp = client.post(BASE, json={"id": 2, "email": "alan@example.com", "name": "Alan"})

    assert resp.status_code == 409
    assert resp.get_json()["error"]["code"] == "CONFLICT"
    doc = csv_files.find_one({"filename": "users.csv"})
    assert [user["id"] for user in doc["users"]] == [1, 3]
