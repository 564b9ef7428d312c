"""
Replace the legacy single-field unique indexes on users (email_1, kindeId_1)
with compound (field, organizationId) indexes.

Usage:
    b2boost-update-indexes [--unique] [--keep-legacy]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from b2boost_server.core.config import Settings
from b2boost_server.core.database import create_client
from b2boost_server.scripts.runner import ClientFactory, run_command
from b2boost_server.services.indexes import LEGACY_USER_INDEXES, ensure_user_indexes


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="Update user indexes.")
    parser.add_argument(
        "--unique",
        action="store_true",
        help="Make the compound indexes unique (fails while duplicates exist)",
    )
    parser.add_argument(
        "--keep-legacy", action="store_true", help="Do not drop email_1 / kindeId_1"
    )
    args = parser.parse_args(argv)

    async def work(db) -> None:
        drop_legacy = () if args.keep_legacy else LEGACY_USER_INDEXES
        result = await ensure_user_indexes(db, drop_legacy=drop_legacy, unique=args.unique)

        print("\nCurrent indexes:")
        for name in result.before:
            print(f"- {name}")
        for drop in result.drops:
            if drop.dropped:
                print(f"Dropped {drop.name} index")
            else:
                print(f"{drop.name} index not found or already dropped")
        for name in result.created:
            print(f"Ensured index {name}")
        print("\nNew indexes:")
        for name in result.after:
            print(f"- {name}")

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
