"""
Rename a role tag on every user holding it.

Usage:
    b2boost-update-roles [--from sales_rep] [--to customer]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from b2boost_server.core.config import Settings
from b2boost_server.core.database import create_client
from b2boost_server.scripts.runner import ClientFactory, run_command
from b2boost_server.services.repair import rename_role
from b2boost_shared.schemas.common import LEGACY_ROLES, Role


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="Bulk-rename a user role.")
    parser.add_argument("--from", dest="old_role", default=LEGACY_ROLES[0], help="Role to replace")
    parser.add_argument("--to", dest="new_role", default=Role.CUSTOMER.value, help="Replacement role")
    args = parser.parse_args(argv)
    if args.old_role == args.new_role:
        parser.error("--from and --to must differ")

    async def work(db) -> None:
        result = await rename_role(db, args.old_role, args.new_role)
        print(f"Found {result.matched_before} users with '{result.old_role}' role")
        if result.matched_before:
            print(
                f"Updated {result.modified} users from '{result.old_role}' to '{result.new_role}'"
            )
        if result.matched != result.matched_before and result.matched_before:
            print(
                f"Note: {result.matched} users matched at update time; "
                "records changed while the command ran"
            )

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
