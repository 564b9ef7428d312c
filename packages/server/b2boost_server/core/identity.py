"""
Identity provider integration (Kinde).

The frontend drives login through the identity provider's hook API
(login / logout / getToken / isAuthenticated / user). The same surface is
expressed here as ``IdentityProvider`` and injected into the API through
``get_identity_provider`` so tests can substitute a deterministic fake.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urlencode

import httpx
import structlog
from fastapi import Depends, Request
from pydantic import ValidationError

from b2boost_server.core.config import Settings, get_settings
from b2boost_shared.schemas.users import SessionUser

log = structlog.get_logger()

ACCESS_TOKEN_COOKIE = "kinde_access_token"


class IdentityProvider(ABC):
    """Interface to an identity provider session."""

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        ...

    @property
    @abstractmethod
    def user(self) -> Optional[SessionUser]:
        ...

    @abstractmethod
    def login(self, org_code: Optional[str] = None) -> str:
        """Return the URL that starts a login."""

    @abstractmethod
    def logout(self) -> str:
        """Return the URL that ends the session."""

    @abstractmethod
    async def get_token(self) -> Optional[str]:
        ...

    async def load(self) -> None:
        """Resolve the session's user, if any."""


class KindeIdentityProvider(IdentityProvider):
    """Kinde-backed session, built from the access token the browser holds."""

    def __init__(
        self,
        settings: Settings,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._access_token = access_token
        self._transport = transport
        self._user: Optional[SessionUser] = None

    @property
    def base_url(self) -> str:
        domain = self._settings.kinde_domain.rstrip("/")
        if not domain.startswith("http"):
            domain = f"https://{domain}"
        return domain

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def user(self) -> Optional[SessionUser]:
        return self._user

    def login(self, org_code: Optional[str] = None) -> str:
        params = {
            "client_id": self._settings.kinde_client_id,
            "redirect_uri": self._settings.kinde_redirect_uri,
            "response_type": "code",
            "scope": "openid profile email offline",
            "state": secrets.token_urlsafe(16),
        }
        if org_code:
            params["org_code"] = org_code
        return f"{self.base_url}/oauth2/auth?{urlencode(params)}"

    def logout(self) -> str:
        query = urlencode({"redirect": self._settings.kinde_logout_redirect_uri})
        return f"{self.base_url}/logout?{query}"

    async def get_token(self) -> Optional[str]:
        return self._access_token

    async def load(self) -> None:
        if not self._access_token or not self._settings.kinde_domain:
            return
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, transport=self._transport, timeout=10.0
            ) as client:
                resp = await client.get(
                    "/oauth2/v2/user_profile",
                    headers={"Authorization": f"Bearer {self._access_token}"},
                )
                resp.raise_for_status()
            profile = resp.json()
            user = SessionUser(
                id=profile["id"],
                email=profile.get("email"),
                given_name=profile.get("given_name"),
                family_name=profile.get("family_name"),
                org_code=profile.get("org_code"),
            )
        except (httpx.HTTPError, KeyError, TypeError, ValueError, ValidationError) as exc:
            # A session whose profile cannot be read stays signed out
            log.warning("identity.profile_failed", error=str(exc))
            return
        self._user = user


class AnonymousIdentityProvider(IdentityProvider):
    """Deterministic signed-out session. Never touches the network."""

    def __init__(self, token: str = "mock-token"):
        self._token = token
        self.calls: list[str] = []

    @property
    def is_authenticated(self) -> bool:
        return False

    @property
    def user(self) -> Optional[SessionUser]:
        return None

    def login(self, org_code: Optional[str] = None) -> str:
        self.calls.append("login")
        return "/login"

    def logout(self) -> str:
        self.calls.append("logout")
        return "/"

    async def get_token(self) -> Optional[str]:
        self.calls.append("get_token")
        return self._token


async def get_identity_provider(
    request: Request, settings: Settings = Depends(get_settings)
) -> IdentityProvider:
    """FastAPI dependency for the caller's identity-provider session."""
    provider = KindeIdentityProvider(settings, request.cookies.get(ACCESS_TOKEN_COOKIE))
    await provider.load()
    return provider
