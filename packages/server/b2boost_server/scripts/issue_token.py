"""
Print a session token for an existing user, for emergency manual login.

Usage:
    b2boost-issue-token --email EMAIL [--org ORG_ID]
    b2boost-issue-token --inspect TOKEN
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from b2boost_server.core.auth import describe_token
from b2boost_server.core.config import Settings
from b2boost_server.core.database import USERS, create_client
from b2boost_server.models.user import User
from b2boost_server.scripts.runner import ClientFactory, print_login_token, run_command


def inspect(token: str) -> int:
    summary = describe_token(token)
    print(f"Token:   {summary.preview}")
    print(f"Subject: {summary.subject}")
    print(f"Expires: {summary.expires_at}")
    print(f"Expired: {summary.is_expired}")
    return 0


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="Issue a session token.")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--email", help="Email address of the user")
    group.add_argument("--inspect", metavar="TOKEN", help="Show subject and expiry of a token")
    parser.add_argument("--org", help="Organization id, when the email exists in several")
    args = parser.parse_args(argv)
    if args.inspect:
        return inspect(args.inspect)

    settings = settings or Settings()

    async def work(db) -> int:
        query = {"email": args.email}
        if args.org:
            query["organizationId"] = args.org
        document = await db[USERS].find_one(query)
        if document is None:
            print(f"User {args.email} not found")
            return 0
        return 0 if print_login_token(User.from_document(document), settings) else 1

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
