"""
User management service: business logic for the user endpoints.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

import structlog
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from b2boost_server.core.database import USERS
from b2boost_server.models.user import User, split_name
from b2boost_shared.schemas.users import UserCreateRequest, UserResponse

log = structlog.get_logger()


def email_pattern(email: str) -> dict:
    """Case-insensitive exact match on an email address."""
    return {"$regex": f"^{re.escape(email)}$", "$options": "i"}


def to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        kinde_id=user.kinde_id,
        name=user.name,
        email=user.email,
        role=user.role or "",
        organization_id=user.organization_id,
        is_active=bool(user.is_active),
        status=user.status,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


async def list_org_users(organization_id: str, db: AsyncIOMotorDatabase) -> list[User]:
    """List all users in an organization, oldest first."""
    cursor = db[USERS].find({"organizationId": organization_id}, sort=[("createdAt", 1)])
    return [User.from_document(doc) for doc in await cursor.to_list(length=None)]


async def add_user(
    organization_id: str,
    req: UserCreateRequest,
    db: AsyncIOMotorDatabase,
) -> User:
    """Add a user to the organization. (email, organization) must not be taken."""
    email = req.email.lower()
    existing = await db[USERS].find_one(
        {"email": email_pattern(email), "organizationId": organization_id}
    )
    if existing:
        raise HTTPException(status_code=409, detail="User is already a member of this org")

    first_name, last_name = split_name(req.name)
    now = datetime.now(timezone.utc)
    user = User(
        email=email,
        role=req.role.value,
        organization_id=organization_id,
        is_active=True,
        status=req.status.value,
        first_name=first_name,
        last_name=last_name,
        created_at=now,
        updated_at=now,
    )
    result = await db[USERS].insert_one(user.to_document())
    user.id = str(result.inserted_id)

    log.info("user.added", user_id=user.id, org=organization_id, role=user.role)
    return user
