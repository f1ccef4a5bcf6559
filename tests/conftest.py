from __future__ import annotations

import mongomock
import pytest

from csvfiles_api.app import create_app, db


@pytest.fixture
def mongo(monkeypatch):
    client = mongomock.MongoClient()
    monkeypatch.setattr(db, "_client", client)
    yield client
    client.close()


@pytest.fixture
def csv_files(mongo):
    return db.csv_files()


@pytest.fixture
def app(mongo):
    return create_app({"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()
