"""
User endpoints.

GET    /api/users    List users in the caller's organization
POST   /api/users    Add a user to the caller's organization (owner/admin/manager)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from b2boost_server.core.auth import get_current_user, require_roles
from b2boost_server.core.database import get_database
from b2boost_server.models.user import User
from b2boost_server.services import users as user_service
from b2boost_shared.schemas.common import MANAGER_ROLES
from b2boost_shared.schemas.users import UserCreateRequest, UserResponse

router = APIRouter()


def _organization_of(caller: User) -> str:
    # Without an organization the caller has no tenant to act in
    if not caller.organization_id:
        raise HTTPException(status_code=403, detail="User is not a member of an organization")
    return caller.organization_id


@router.get("", response_model=list[UserResponse], tags=["Users"])
async def list_users(
    caller: User = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """List all users of the caller's organization."""
    users = await user_service.list_org_users(_organization_of(caller), db)
    return [user_service.to_response(user) for user in users]


@router.post("", response_model=UserResponse, status_code=201, tags=["Users"])
async def add_user(
    body: UserCreateRequest,
    caller: User = Depends(require_roles(*MANAGER_ROLES)),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """Add a user to the caller's organization."""
    user = await user_service.add_user(_organization_of(caller), body, db)
    return user_service.to_response(user)
