"""
Drop one index from a collection, showing the indexes before and after.

Usage:
    b2boost-drop-index [--collection users] [--name id_1]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from bson import json_util

from b2boost_server.core.config import Settings
from b2boost_server.core.database import USERS, create_client
from b2boost_server.scripts.runner import ClientFactory, run_command
from b2boost_server.services.indexes import drop_index


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="Drop a named index.")
    parser.add_argument("--collection", default=USERS, help="Collection (default: users)")
    parser.add_argument("--name", default="id_1", help="Index name (default: id_1)")
    args = parser.parse_args(argv)

    async def work(db) -> None:
        result = await drop_index(db, args.collection, args.name)
        print("Current indexes:", json_util.dumps(result.before, indent=2))
        if result.dropped:
            print(f"Successfully dropped {result.name} index")
        else:
            print(f"Error dropping index {result.name}: {result.error}")
        print("Remaining indexes:", json_util.dumps(result.after, indent=2))

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
