"""
List users, organizations and suspicious records. Read-only.

Usage:
    b2boost-list-users [--org ORG_ID] [--by-org] [--duplicates] [--placeholders]
                       [--invalid] [--email EMAIL]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from b2boost_server.core.config import Settings
from b2boost_server.core.database import create_client
from b2boost_server.scripts.runner import ClientFactory, format_user_table, run_command
from b2boost_server.services import diagnostics


async def _report(db, args) -> None:
    if args.email:
        users = await diagnostics.find_user_by_email(db, args.email)
        print(f"\nRecords for {args.email}: {len(users)}")
        for user in users:
            print(
                f"- org {user.organization_id}: role={user.role} status={user.status}"
                f" isActive={user.is_active} kindeId={user.kinde_id}"
            )
        return

    users = await diagnostics.list_users(db, args.org)
    scope = f" in organization {args.org}" if args.org else ""
    print(f"\nUsers{scope} ({len(users)}):")
    print(format_user_table(users))

    if args.by_org:
        print("\n--- Organization Users ---")
        for summary in await diagnostics.summarize_organizations(db):
            label = summary.name or "(no organization document)"
            print(f"\nOrganization: {label} ({summary.kinde_org_id})")
            print(f"Total users: {summary.user_count}")
            for role, count in sorted(summary.roles.items()):
                print(f"- {role}: {count}")

    if args.duplicates:
        groups = await diagnostics.find_duplicate_users(db)
        print(f"\nEmail/organization pairs with duplicate entries: {len(groups)}")
        for group in groups:
            print(f"\n{group.email} in {group.organization_id} ({len(group.users)} entries):")
            for user in group.users:
                print(f"  - id={user.id} role={user.role} status={user.status} kindeId={user.kinde_id}")

    if args.invalid:
        invalid = await diagnostics.find_invalid_users(db)
        print(f"\nUsers missing required fields: {len(invalid)}")
        for entry in invalid:
            print(f"- id={entry.user.id} email={entry.user.email} missing: {', '.join(entry.missing)}")

    if args.placeholders:
        users = await diagnostics.find_placeholder_identities(db)
        print(f"\nUsers with manual kindeIds: {len(users)}")
        for user in users:
            print(f"- {user.email} ({user.role}) in org {user.organization_id} - kindeId: {user.kinde_id}")


def main(
    argv: Optional[list[str]] = None,
    *,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = create_client,
) -> int:
    parser = argparse.ArgumentParser(description="List users and organizations.")
    parser.add_argument("--org", help="Only users of this organization id")
    parser.add_argument("--by-org", action="store_true", help="Summarize users per organization")
    parser.add_argument(
        "--duplicates", action="store_true", help="Report repeated email/organization pairs"
    )
    parser.add_argument(
        "--placeholders", action="store_true", help="Report hand-made 'manual-' kindeIds"
    )
    parser.add_argument(
        "--invalid", action="store_true", help="Report users missing kindeId, email, role or org"
    )
    parser.add_argument("--email", help="Show every record for one email address, then stop")
    args = parser.parse_args(argv)

    async def work(db) -> None:
        await _report(db, args)

    return run_command(work, settings=settings, client_factory=client_factory)


if __name__ == "__main__":
    sys.exit(main())
