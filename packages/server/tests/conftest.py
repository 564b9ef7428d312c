"""
Shared fixtures: an in-memory document store, the app wired to it, and the
signed-out identity provider every test runs under.
"""

from __future__ import annotations

import asyncio
import uuid
from types import SimpleNamespace
from typing import Optional

import pytest
from fastapi import Depends, HTTPException
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import ServerSelectionTimeoutError

from b2boost_server.core.auth import api_key_header, get_current_user
from b2boost_server.core.config import Settings
from b2boost_server.core.database import get_database
from b2boost_server.core.identity import AnonymousIdentityProvider, get_identity_provider
from b2boost_server.main import app
from b2boost_server.models.user import User

TEST_DATABASE = "b2boost_test"
TEST_TOKEN = "test-token"
TEST_ORG = "org-test"


class FakeClient:
    """Stands in for AsyncIOMotorClient in connect()."""

    def __init__(self, db: AsyncIOMotorDatabase, *, reachable: bool = True):
        self.db = db
        self.reachable = reachable
        self.closed = False
        self.admin = SimpleNamespace(command=self._command)

    async def _command(self, name: str) -> dict:
        if not self.reachable:
            raise ServerSelectionTimeoutError("No servers found yet")
        return {"ok": 1.0}

    def get_default_database(self, default: Optional[str] = None) -> AsyncIOMotorDatabase:
        return self.db

    def close(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def mongo_client():
    """In-memory store shared by the whole suite; every database is dropped at the end."""
    client = AsyncMongoMockClient()
    names: list[str] = []
    yield client, names

    async def drop_all():
        for name in names:
            await client.drop_database(name)

    asyncio.run(drop_all())


@pytest.fixture
def db(mongo_client) -> AsyncIOMotorDatabase:
    """A fresh, empty database per test."""
    client, names = mongo_client
    name = f"{TEST_DATABASE}_{uuid.uuid4().hex[:8]}"
    names.append(name)
    return client[name]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        mongodb_uri=f"mongodb://localhost:27017/{TEST_DATABASE}",
        mongodb_database=TEST_DATABASE,
        jwt_secret="test-secret",
    )


@pytest.fixture
def fake_client(db) -> FakeClient:
    return FakeClient(db)


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------

def make_user(**fields) -> dict:
    """A stored user document with sensible defaults."""
    document = {
        "kindeId": "kp_default",
        "email": "user@b2boost.io",
        "role": "customer",
        "organizationId": TEST_ORG,
        "isActive": True,
        "status": "active",
        "firstName": "Default",
        "lastName": "User",
    }
    document.update(fields)
    return document


async def fake_current_user(authorization: Optional[str] = Depends(api_key_header)) -> User:
    if authorization != f"Bearer {TEST_TOKEN}":
        raise HTTPException(status_code=401, detail="No authentication token, authorization denied")
    return User(
        id="test-admin",
        kinde_id="kp_test_admin",
        email="admin@b2boost.io",
        role="admin",
        organization_id=TEST_ORG,
        is_active=True,
        status="active",
        first_name="Test",
        last_name="Admin",
    )


@pytest.fixture(autouse=True)
def identity():
    """Every request sees a signed-out identity provider session."""
    provider = AnonymousIdentityProvider()
    app.dependency_overrides[get_identity_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_identity_provider, None)


@pytest.fixture
async def client(db):
    """API client against the in-memory store, authenticated by TEST_TOKEN."""
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_current_user] = fake_current_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_database, None)
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
