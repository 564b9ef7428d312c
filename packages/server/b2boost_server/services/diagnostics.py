"""
Read-only inspection of the document store: collections, indexes,
anomalous user records and per-organization membership.
"""

from __future__ import annotations

import re
from collections import Counter, defaultdict
from typing import Any, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, Field

from b2boost_server.core.database import ORGANIZATIONS, USERS
from b2boost_server.models.organization import Organization
from b2boost_server.models.user import User
from b2boost_server.services.users import email_pattern
from b2boost_shared.schemas.organizations import OrganizationSummary

log = structlog.get_logger()


class DatabaseReport(BaseModel):
    collections: list[str]
    collection: str
    null_field: str
    indexes: dict[str, Any] = Field(default_factory=dict)
    null_count: int = 0
    first_null: Optional[dict[str, Any]] = None
    total: int = 0
    first_document: Optional[dict[str, Any]] = None

    @property
    def collection_exists(self) -> bool:
        return self.collection in self.collections


# Fields a user record cannot work without
REQUIRED_USER_FIELDS = ("kindeId", "email", "role", "organizationId")


class InvalidUser(BaseModel):
    user: User
    missing: list[str]


class DuplicateGroup(BaseModel):
    """Users sharing one (email, organization) pair."""
    email: str
    organization_id: Optional[str] = None
    users: list[User]


async def inspect_database(
    db: AsyncIOMotorDatabase,
    collection: str = USERS,
    null_field: str = "id",
) -> DatabaseReport:
    """Report collections, plus indexes and null-``null_field`` documents of one collection."""
    names = sorted(await db.list_collection_names())
    report = DatabaseReport(collections=names, collection=collection, null_field=null_field)
    if collection not in names:
        log.info("diagnostics.collection_missing", collection=collection)
        return report

    coll = db[collection]
    report.indexes = await coll.index_information()

    # {field: None} also matches documents where the field is absent
    report.null_count = await coll.count_documents({null_field: None})
    if report.null_count:
        report.first_null = await coll.find_one({null_field: None})

    report.total = await coll.count_documents({})
    report.first_document = await coll.find_one({})
    log.info(
        "diagnostics.inspected",
        collection=collection,
        total=report.total,
        null_count=report.null_count,
    )
    return report


async def list_users(
    db: AsyncIOMotorDatabase, organization_id: Optional[str] = None
) -> list[User]:
    query = {} if organization_id is None else {"organizationId": organization_id}
    cursor = db[USERS].find(query, sort=[("organizationId", 1), ("email", 1)])
    return [User.from_document(doc) for doc in await cursor.to_list(length=None)]


async def summarize_organizations(db: AsyncIOMotorDatabase) -> list[OrganizationSummary]:
    """Membership per organization.

    Users pointing at an organization id with no organization document are
    reported under that id with no name.
    """
    orgs = [
        Organization.from_document(doc)
        for doc in await db[ORGANIZATIONS].find({}).to_list(length=None)
    ]
    by_org: dict[Optional[str], list[User]] = defaultdict(list)
    for user in await list_users(db):
        by_org[user.organization_id].append(user)

    summaries = []
    for org in orgs:
        members = by_org.pop(org.kinde_org_id, [])
        summaries.append(_summarize(org.name, org.kinde_org_id, members))
    for org_id, members in by_org.items():
        summaries.append(_summarize(None, org_id, members))
    return summaries


def _summarize(name: Optional[str], org_id: Optional[str], members: list[User]) -> OrganizationSummary:
    roles = Counter(user.role or "none" for user in members)
    return OrganizationSummary(
        name=name,
        kinde_org_id=org_id,
        user_count=len(members),
        roles=dict(roles),
        emails=[user.email or "" for user in members],
    )


async def find_duplicate_users(db: AsyncIOMotorDatabase) -> list[DuplicateGroup]:
    """Groups of users sharing a (case-insensitive email, organization) pair.

    Nothing enforces that pair to be unique, so this only reports.
    """
    groups: dict[tuple[str, Optional[str]], list[User]] = defaultdict(list)
    for user in await list_users(db):
        if not user.email:
            continue
        groups[(user.email.lower(), user.organization_id)].append(user)

    duplicates = [
        DuplicateGroup(email=email, organization_id=org_id, users=users)
        for (email, org_id), users in groups.items()
        if len(users) > 1
    ]
    if duplicates:
        log.warning("diagnostics.duplicate_users", groups=len(duplicates))
    return duplicates


async def find_placeholder_identities(
    db: AsyncIOMotorDatabase, prefix: str = "manual-"
) -> list[User]:
    """Users whose kindeId was filled in by hand instead of by the identity provider."""
    query = {"kindeId": {"$regex": f"^{re.escape(prefix)}"}}
    cursor = db[USERS].find(query, sort=[("email", 1)])
    return [User.from_document(doc) for doc in await cursor.to_list(length=None)]


async def find_invalid_users(db: AsyncIOMotorDatabase) -> list[InvalidUser]:
    """Users missing, or holding a blank, kindeId, email, role or organizationId."""
    query = {
        "$or": [{field: value} for field in REQUIRED_USER_FIELDS for value in (None, "")]
    }
    documents = await db[USERS].find(query, sort=[("email", 1)]).to_list(length=None)
    invalid = [
        InvalidUser(
            user=User.from_document(doc),
            missing=[field for field in REQUIRED_USER_FIELDS if not doc.get(field)],
        )
        for doc in documents
    ]
    if invalid:
        log.warning("diagnostics.invalid_users", count=len(invalid))
    return invalid


async def find_user_by_email(db: AsyncIOMotorDatabase, email: str) -> list[User]:
    """Every record for an email address, across organizations."""
    cursor = db[USERS].find(
        {"email": email_pattern(email.strip())}, sort=[("organizationId", 1)]
    )
    return [User.from_document(doc) for doc in await cursor.to_list(length=None)]
