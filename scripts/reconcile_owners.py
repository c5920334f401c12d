"""Detect and repair organizations that have no owner.

Usage: python scripts/reconcile_owners.py [--dry-run]
"""

import argparse

from picito.config import settings
from picito.db import session_scope
from picito.logs import configure_logging
from picito.services import organizations

def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="only list ownerless organizations")
    args = parser.parse_args()

    configure_logging(settings.log_level, settings.log_format)

    with session_scope() as db:
        if args.dry_run:
            orphans = organizations.find_ownerless(db)
            for org in orphans:
                print(f"ownerless: {org.id} {org.slug}")
            print(f"{len(orphans)} ownerless organization(s)")
            return 0

        repairs = organizations.reconcile_ownerless(db)
        for r in repairs:
            print(f"{r['action']}: organization={r['organization_id']} membership={r['membership_id']}")
        print(f"{len(repairs)} organization(s) repaired")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
