"""
Restore a single user's access within an organization: privileged role,
active flag and status. Optionally prints a session token for manual login.

Usage:
    b2boost-fix-user --email EMAIL --org ORG_ID [--role owner] [--print-token]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from b2boost_server.core.config import Settings
from b2boost_server.core.database import create_client
from b2boost_server.scripts.runner import (
    ClientFactory,
    format_user_table,
    print_login_token,
    run_command,
)
from b2boost_server.services.diagnostics import list_users
from b2boost_server.services.repair import repair_user
from b2boost_shared.schemas.common import Role


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="Repair one user's role and status.")
    parser.add_argument("--email", required=True, help="Email address of the user")
    parser.add_argument("--org", required=True, help="Organization id the user belongs to")
    parser.add_argument(
        "--role", default=Role.OWNER.value, help="Role to grant (default: owner)"
    )
    parser.add_argument(
        "--print-token", action="store_true", help="Print a session token for the user"
    )
    args = parser.parse_args(argv)
    settings = settings or Settings()

    async def work(db) -> None:
        print(f"Looking for user {args.email} in organization {args.org}...")
        user = await repair_user(db, args.email, args.org, role=args.role)
        if user is None:
            print(f"User {args.email} not found in organization {args.org}")
            return

        print(f"Updated user {user.email} to role: {user.role} (status: {user.status})")
        if args.print_token:
            print_login_token(user, settings)

        print(f"\nAll users in organization {args.org}:")
        print(format_user_table(await list_users(db, args.org)))

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
