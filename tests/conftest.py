from pathlib import Path

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import DocumentStore
from main import create_app
from settings import Settings

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def settings():
    return Settings(
        DATABASE_NAME="music_test",
        JWT_SECRET="test-secret-that-is-long-enough-for-hs256-signing",
        BCRYPT_ROUNDS=4,
        APP_ENV="development",
        LOG_CONFIG=str(ROOT / "logger_config.yaml"),
    )


@pytest.fixture
def database():
    return mongomock.MongoClient()["music_test"]


@pytest.fixture
def store(database):
    store = DocumentStore(database)
    store.ensure_indexes()
    return store


@pytest.fixture
def client(settings, database):
    app = create_app(settings, database)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register_user(client):
    def register(username="alice", email="alice@example.com", password="secret1"):
        resp = client.post("/api/auth/register", json={
            "username": username,
            "email": email,
            "password": password,
        })
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
            "user": body["data"]["user"],
        }
    return register


@pytest.fixture
def alice(register_user):
    return register_user()


@pytest.fixture
def owner(store):
    return store.create("user", {
        "username": "owner",
        "email": "owner@example.com",
        "password": "hashed-password",
    })
