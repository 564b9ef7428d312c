"""
Document store connection management.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from b2boost_server.core.config import Settings, get_settings

log = structlog.get_logger()

USERS = "users"
ORGANIZATIONS = "organizations"

_client: Optional[AsyncIOMotorClient] = None


def redact_uri(uri: str) -> str:
    """Replace credentials in a MongoDB URI with '***' for safe logging."""
    return re.sub(
        r"mongodb(\+srv)?://[^:]+:[^@]+@",
        r"mongodb\1://***:***@",
        uri,
    )


def create_client(settings: Settings) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.require_mongodb_uri(),
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        tz_aware=True,
    )


@asynccontextmanager
async def connect(
    settings: Settings,
    client_factory: Callable[[Settings], AsyncIOMotorClient] = create_client,
) -> AsyncIterator[AsyncIOMotorDatabase]:
    """Open a connection for one unit of work. The client is always closed on exit."""
    uri = settings.require_mongodb_uri()
    log.info("db.connecting", uri=redact_uri(uri))
    client = client_factory(settings)
    try:
        await client.admin.command("ping")
        db = client.get_default_database(settings.mongodb_database)
        log.info("db.connected", database=db.name)
        yield db
    finally:
        client.close()
        log.info("db.closed")


# ---------------------------------------------------------------------------
# API server client (one per process)
# ---------------------------------------------------------------------------

def get_client() -> AsyncIOMotorClient:
    global _client
    if _client is None:
        _client = create_client(get_settings())
    return _client


async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency for the document database."""
    return get_client().get_default_database(get_settings().mongodb_database)


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
