"""
Authentication and Authorization for the B2Boost API.

Supports:
- Session tokens (HS256 JWT) issued after identity-provider login, or by the
  maintenance commands for emergency manual login
- Bearer authentication resolving the token subject to a stored user
- Role-based authorization dependencies
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, HTTPException
from fastapi.security import APIKeyHeader
from motor.motor_asyncio import AsyncIOMotorDatabase

from b2boost_server.core.config import Settings, get_settings
from b2boost_server.core.database import USERS, get_database
from b2boost_server.core.errors import ConfigurationError
from b2boost_server.models.user import User
from b2boost_shared.schemas.users import TokenSummary

log = structlog.get_logger()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------

def issue_session_token(
    user: User,
    settings: Settings,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Sign a session token for a user. Expires after ``jwt_expire_days``."""
    secret = settings.require_jwt_secret()
    if not user.kinde_id:
        # The API resolves tokens by subject, so one without it can never log in
        raise ValueError(f"User {user.email} has no kindeId")
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": user.kinde_id,
        "email": user.email,
        "name": user.name,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str, settings: Settings) -> dict:
    """Decode and verify a session token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token, settings.require_jwt_secret(), algorithms=[settings.jwt_algorithm]
    )


def describe_token(token: str) -> TokenSummary:
    """Summarize a token without verifying its signature."""
    preview = token[:15] + "..."
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return TokenSummary(preview="Invalid token format")

    expires_at = None
    if payload.get("exp") is not None:
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    return TokenSummary(
        preview=preview,
        subject=payload.get("sub"),
        expires_at=expires_at,
        is_expired=expires_at < datetime.now(timezone.utc) if expires_at else None,
    )


def local_storage_snippet(token: str, settings: Settings) -> str:
    """Browser console line that installs the token for manual login."""
    return f"localStorage.setItem('{settings.token_storage_key}', '{token}');"


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

async def get_current_user(
    authorization: Optional[str] = Depends(api_key_header),
    db: AsyncIOMotorDatabase = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the bearer token to a stored user."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401, detail="No authentication token, authorization denied"
        )

    token = authorization[7:].strip()
    try:
        payload = decode_session_token(token, settings)
    except ConfigurationError:
        log.error("auth.secret_missing")
        raise HTTPException(status_code=500, detail="Server authentication error")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Token is invalid or expired")

    subject, email = payload.get("sub"), payload.get("email")
    document = await db[USERS].find_one({"kindeId": subject})
    if not document:
        log.warning("auth.user_not_found", kinde_id=subject, email=email)
        by_email = await db[USERS].find_one({"email": email}) if email else None
        if by_email:
            log.warning(
                "auth.kinde_id_mismatch",
                email=email,
                stored_kinde_id=by_email.get("kindeId"),
                token_kinde_id=subject,
                role=by_email.get("role"),
                fix=f"b2boost-fix-kinde-id {email} {subject}",
            )
        raise HTTPException(status_code=401, detail="User not found, authorization denied")

    user = User.from_document(document)
    log.debug("auth.authenticated", email=user.email, role=user.role, org=user.organization_id)
    return user


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks)
# ---------------------------------------------------------------------------

def require_roles(*roles: str):
    """Build a dependency that admits only users holding one of ``roles``."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            log.info("auth.forbidden", email=user.email, role=user.role, required=roles)
            raise HTTPException(
                status_code=403, detail="Access denied: insufficient permissions"
            )
        return user

    return dependency
