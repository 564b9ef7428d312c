"""
Data repair on user records.

Every repair is a single match-and-set request against the store, so a
concurrent writer can never have its changes overwritten by a stale copy.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument

from b2boost_server.core.database import USERS
from b2boost_server.models.user import User
from b2boost_shared.schemas.common import Role, UserStatus

log = structlog.get_logger()


class RoleRenameResult(BaseModel):
    old_role: str
    new_role: str
    # Counted before the update; concurrent writers can make it differ from `matched`
    matched_before: int
    matched: int = 0
    modified: int = 0


class IdentityRelink(BaseModel):
    email: str
    previous_kinde_id: Optional[str] = None
    user: User


async def repair_user(
    db: AsyncIOMotorDatabase,
    email: str,
    organization_id: str,
    *,
    role: str = Role.OWNER.value,
    now: Optional[datetime] = None,
) -> Optional[User]:
    """Restore one user's access: privileged role, active flag and status.

    Returns the updated user, or None when no user matches (nothing is modified).
    """
    now = now or datetime.now(timezone.utc)
    document = await db[USERS].find_one_and_update(
        {"email": email, "organizationId": organization_id},
        {
            "$set": {
                "role": role,
                "isActive": True,
                "status": UserStatus.ACTIVE.value,
                "updatedAt": now,
            }
        },
        return_document=ReturnDocument.AFTER,
    )
    if document is None:
        log.info("user.repair_not_found", email=email, org=organization_id)
        return None

    user = User.from_document(document)
    log.info("user.repaired", user_id=user.id, email=email, org=organization_id, role=role)
    return user


async def rename_role(
    db: AsyncIOMotorDatabase,
    old_role: str,
    new_role: str,
    *,
    now: Optional[datetime] = None,
) -> RoleRenameResult:
    """Move every user holding ``old_role`` to ``new_role`` in one bulk update."""
    if old_role == new_role:
        raise ValueError("old and new role are the same")

    matched_before = await db[USERS].count_documents({"role": old_role})
    result = RoleRenameResult(old_role=old_role, new_role=new_role, matched_before=matched_before)
    if matched_before == 0:
        log.info("role.rename_nothing", old_role=old_role)
        return result

    update = await db[USERS].update_many(
        {"role": old_role},
        {"$set": {"role": new_role, "updatedAt": now or datetime.now(timezone.utc)}},
    )
    result.matched = update.matched_count
    result.modified = update.modified_count
    log.info(
        "role.renamed",
        old_role=old_role,
        new_role=new_role,
        matched_before=matched_before,
        modified=result.modified,
    )
    return result


async def relink_identity(
    db: AsyncIOMotorDatabase,
    email: str,
    kinde_id: str,
    *,
    organization_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[IdentityRelink]:
    """Point a user record at the identity provider's real subject id.

    Without ``organization_id`` the first record for the email is relinked.
    """
    now = now or datetime.now(timezone.utc)
    query = {"email": email.strip()}
    if organization_id is not None:
        query["organizationId"] = organization_id

    previous = await db[USERS].find_one_and_update(
        query,
        {"$set": {"kindeId": kinde_id.strip(), "updatedAt": now}},
        return_document=ReturnDocument.BEFORE,
    )
    if previous is None:
        log.info("user.relink_not_found", email=email, org=organization_id)
        return None

    user = User.from_document(previous).model_copy(
        update={"kinde_id": kinde_id.strip(), "updated_at": now}
    )
    log.info("user.relinked", email=email, previous=previous.get("kindeId"), current=user.kinde_id)
    return IdentityRelink(email=email, previous_kinde_id=previous.get("kindeId"), user=user)
