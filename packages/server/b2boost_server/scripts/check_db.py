"""
Inspect the document store: collections, the indexes of one collection, and
documents whose identifier field is null.

Usage:
    b2boost-check-db [--collection users] [--null-field id]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from bson import json_util

from b2boost_server.core.config import Settings
from b2boost_server.core.database import USERS, create_client
from b2boost_server.scripts.runner import ClientFactory, run_command
from b2boost_server.services.diagnostics import DatabaseReport, inspect_database


def print_report(report: DatabaseReport) -> None:
    print("\nCollections:")
    for name in report.collections:
        print(f"- {name}")

    if not report.collection_exists:
        print(f"\nNo '{report.collection}' collection.")
        return

    print(f"\nIndexes on {report.collection} collection:")
    print(json_util.dumps(report.indexes, indent=2))

    print(f"\nDocuments with null {report.null_field}: {report.null_count}")
    if report.first_null is not None:
        print(f"First document with null {report.null_field}:")
        print(json_util.dumps(report.first_null, indent=2))

    print(f"\nTotal documents: {report.total}")
    if report.first_document is not None:
        print("First document:")
        print(json_util.dumps(report.first_document, indent=2))


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="Inspect collections and indexes.")
    parser.add_argument("--collection", default=USERS, help="Collection to inspect (default: users)")
    parser.add_argument(
        "--null-field", default="id", help="Field that should never be null (default: id)"
    )
    args = parser.parse_args(argv)

    async def work(db) -> None:
        print_report(await inspect_database(db, args.collection, args.null_field))

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
