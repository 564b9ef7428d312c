"""User schemas shared between the API server and the maintenance commands."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .common import Role, UserStatus


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class UserCreateRequest(BaseModel):
    """Add a user to the caller's organization."""
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    role: Role = Role.CUSTOMER
    status: UserStatus = UserStatus.ACTIVE


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """Single user as returned by the API (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    kinde_id: Optional[str] = Field(default=None, alias="kindeId")
    name: str = ""
    email: Optional[str] = None
    role: str
    organization_id: Optional[str] = Field(default=None, alias="organizationId")
    is_active: bool = Field(default=False, alias="isActive")
    status: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class SessionUser(BaseModel):
    """Profile the identity provider reports for a signed-in user."""
    id: str
    email: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    org_code: Optional[str] = None


class TokenSummary(BaseModel):
    """Unverified view of a backend session token, for debugging."""
    preview: str
    subject: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_expired: Optional[bool] = None


class SessionResponse(BaseModel):
    """Identity state consumed by the frontend."""
    is_authenticated: bool
    user: Optional[SessionUser] = None
    backend_token: Optional[TokenSummary] = None
