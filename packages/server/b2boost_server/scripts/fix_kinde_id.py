"""
Point a user record at the identity provider's real subject id, for users
whose stored kindeId no longer matches the one in their login token.

Usage:
    b2boost-fix-kinde-id EMAIL KINDE_ID [--org ORG_ID] [--print-token]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from b2boost_server.core.config import Settings
from b2boost_server.core.database import create_client
from b2boost_server.scripts.runner import ClientFactory, print_login_token, run_command
from b2boost_server.services.repair import relink_identity


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="Update a user's kindeId.")
    parser.add_argument("email", help="Email address of the user")
    parser.add_argument("kinde_id", help="Subject id reported by the identity provider")
    parser.add_argument("--org", help="Organization id, when the email exists in several")
    parser.add_argument(
        "--print-token", action="store_true", help="Print a session token for the user"
    )
    args = parser.parse_args(argv)
    settings = settings or Settings()

    async def work(db) -> None:
        relink = await relink_identity(db, args.email, args.kinde_id, organization_id=args.org)
        if relink is None:
            print(f"User {args.email} not found")
            return

        print(f"Updated kindeId for {args.email}:")
        print(f"  From: {relink.previous_kinde_id}")
        print(f"  To:   {relink.user.kinde_id}")
        if args.print_token:
            print_login_token(relink.user, settings)

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
