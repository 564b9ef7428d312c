"""
Index maintenance on the document store.

Drops are best-effort: a failing drop is logged and reported, never raised,
and the index list is re-read afterwards to show what actually happened.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, Field
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from b2boost_server.core.database import USERS

log = structlog.get_logger()

# Single-field unique indexes that block one user from joining several organizations
LEGACY_USER_INDEXES = ("email_1", "kindeId_1")

USER_COMPOUND_INDEXES = (
    [("email", ASCENDING), ("organizationId", ASCENDING)],
    [("kindeId", ASCENDING), ("organizationId", ASCENDING)],
)


class IndexDropResult(BaseModel):
    name: str
    dropped: bool
    error: Optional[str] = None
    before: dict[str, Any] = Field(default_factory=dict)
    after: dict[str, Any] = Field(default_factory=dict)


class IndexUpdateResult(BaseModel):
    before: dict[str, Any] = Field(default_factory=dict)
    drops: list[IndexDropResult] = Field(default_factory=list)
    created: list[str] = Field(default_factory=list)
    after: dict[str, Any] = Field(default_factory=dict)


async def list_indexes(db: AsyncIOMotorDatabase, collection: str) -> dict[str, Any]:
    return await db[collection].index_information()


async def drop_index(
    db: AsyncIOMotorDatabase, collection: str, name: str
) -> IndexDropResult:
    """List, try to drop ``name``, list again. Driver errors are reported, not raised."""
    before = await list_indexes(db, collection)
    result = IndexDropResult(name=name, dropped=False, before=before)
    try:
        await db[collection].drop_index(name)
        result.dropped = True
        log.info("index.dropped", collection=collection, index=name)
    except PyMongoError as exc:
        result.error = str(exc)
        log.warning("index.drop_failed", collection=collection, index=name, error=str(exc))

    result.after = await list_indexes(db, collection)
    return result


async def ensure_user_indexes(
    db: AsyncIOMotorDatabase,
    *,
    drop_legacy: Iterable[str] = LEGACY_USER_INDEXES,
    unique: bool = False,
) -> IndexUpdateResult:
    """Replace legacy single-field user indexes with (field, organizationId) ones."""
    result = IndexUpdateResult(before=await list_indexes(db, USERS))
    for name in drop_legacy:
        result.drops.append(await drop_index(db, USERS, name))

    for keys in USER_COMPOUND_INDEXES:
        name = await db[USERS].create_index(keys, unique=unique)
        result.created.append(name)
        log.info("index.created", collection=USERS, index=name, unique=unique)

    result.after = await list_indexes(db, USERS)
    return result
