"""
Authentication endpoints.

- Current backend user (bearer session token)
- Identity-provider session state, as the frontend sees it
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from b2boost_server.core.auth import api_key_header, describe_token, get_current_user
from b2boost_server.core.identity import IdentityProvider, get_identity_provider
from b2boost_server.models.user import User
from b2boost_server.services.users import to_response
from b2boost_shared.schemas.users import SessionResponse, UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    """Return the user the bearer token resolves to."""
    return to_response(user)


@router.get("/session", response_model=SessionResponse)
async def session(
    authorization: Optional[str] = Depends(api_key_header),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Report the identity-provider session and any backend token presented."""
    backend_token = None
    if authorization and authorization.startswith("Bearer "):
        backend_token = describe_token(authorization[7:].strip())
    return SessionResponse(
        is_authenticated=identity.is_authenticated,
        user=identity.user,
        backend_token=backend_token,
    )
