# tests/conftest.py

import os
import sys
import asyncio

# Settings are read at import time; configure before importing the app.
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from cleancloak.main import app
from cleancloak.db.mongo import get_db, ensure_indexes

PASSWORD = "secret123"


@pytest.fixture
def db():
    database = AsyncMongoMockClient(tz_aware=True)["cleancloak_test"]
    asyncio.run(ensure_indexes(database))
    return database


@pytest.fixture
def make_client(db):
    """Factory for TestClients sharing one in-memory database; each keeps its own cookies."""
    app.dependency_overrides[get_db] = lambda: db
    clients = []

    def _make():
        c = TestClient(app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def register(make_client):
    """Register a user on a fresh client and return (client, user)."""
    counter = {"n": 0}

    def _register(role="client", name=None, phone=None, password=PASSWORD):
        counter["n"] += 1
        c = make_client()
        payload = {
            "name": name or f"User {role} {counter['n']}",
            "phone": phone or f"07{counter['n']:08d}",
            "password": password,
            "role": role,
        }
        resp = c.post("/api/auth/register", json=payload)
        assert resp.status_code == 201, resp.text
        return c, resp.json()["data"]["user"]

    return _register


@pytest.fixture
def profile_payload():
    return {
        "firstName": "Jane",
        "lastName": "Wanjiku",
        "email": "jane@example.com",
        "address": "Moi Avenue 12",
        "city": "Nairobi",
        "bio": "Experienced home cleaner.",
        "services": ["home-cleaning"],
    }
