"""
Shared plumbing for the maintenance commands: one connection, one unit of
work, always disconnected, errors turned into an exit status.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Iterable, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from b2boost_server.core.auth import issue_session_token, local_storage_snippet
from b2boost_server.core.config import Settings
from b2boost_server.core.database import connect, create_client
from b2boost_server.core.errors import ConfigurationError
from b2boost_server.core.logs import configure_logging
from b2boost_server.models.user import User

log = structlog.get_logger()

Work = Callable[[AsyncIOMotorDatabase], Awaitable[Optional[int]]]
ClientFactory = Callable[[Settings], AsyncIOMotorClient]


def run_command(
    work: Work,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    """Run ``work`` against the configured database. Returns the exit status."""
    settings = settings or Settings()
    configure_logging(settings.log_level, settings.log_format)
    try:
        return asyncio.run(_run(work, settings, client_factory))
    except ConfigurationError as exc:
        log.error("command.configuration_error", error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except PyMongoError as exc:
        log.error("command.database_error", error=str(exc))
        print(f"Database error: {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        log.error("command.invalid_data", error=str(exc))
        print(f"Invalid data: {exc}", file=sys.stderr)
        return 1


async def _run(work: Work, settings: Settings, client_factory: ClientFactory) -> int:
    async with connect(settings, client_factory) as db:
        status = await work(db)
    return status or 0


# ---------------------------------------------------------------------------
# Report output
# ---------------------------------------------------------------------------

def _pad(value: Optional[str], width: int) -> str:
    return (value or "").ljust(width)


def _preview(value: Optional[str], width: int = 20) -> str:
    if not value:
        return "null"
    return value if len(value) <= width else value[: width - 3] + "..."


def format_user_table(users: Iterable[User]) -> str:
    lines = [
        "Email                      | Role     | Organization      | KindeId",
        "---------------------------|----------|-------------------|------------------------",
    ]
    for user in users:
        lines.append(
            f"{_pad(user.email, 27)} | {_pad(user.role, 8)} | {_pad(user.organization_id, 17)}"
            f" | {_preview(user.kinde_id)}"
        )
    return "\n".join(lines)


def print_login_token(user: User, settings: Settings) -> bool:
    """Print a session token and the browser snippet that installs it."""
    try:
        token = issue_session_token(user, settings)
    except (ConfigurationError, ValueError) as exc:
        print(f"Skipping token: {exc}")
        return False

    print("\nSession token for direct login")
    print("==============================")
    print(f"User: {user.email} ({user.role})")
    print("Run this in the browser console:")
    print(local_storage_snippet(token, settings))
    return True
