"""
Load classroom user records into the user store.

Usage:
    python -m classroom_api.seed users.json [--database PATH]

The file holds a JSON array of user objects:
    {"id": "...", "email": "...", "is_classroom_account": true,
     "completed_challenges": [{"id": "...", "completedDate": 1700000000000}]}

"id" is optional; a new object id is generated when absent. A record whose
"id" already exists replaces the stored fields it names, so re-running the
seed refreshes fixtures instead of failing.

Environment:
    DATABASE_PATH (optional) - sqlite file to write to when --database is not given
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from classroom_api.config import settings
from classroom_api.db import StoreError, UserStore


def load_users(path: str) -> list[dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        users = json.load(f)
    if not isinstance(users, list) or not all(isinstance(u, dict) for u in users):
        raise ValueError("users file must contain a JSON array of objects")
    return users


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Load classroom users into the user store")
    parser.add_argument("users_path", help="Path to a JSON array of user records")
    parser.add_argument("--database", help="sqlite file to write to (default: DATABASE_PATH)")
    args = parser.parse_args(argv)

    try:
        users = load_users(args.users_path)
    except (OSError, ValueError) as e:
        print(f"ERROR: cannot read users: {e}", file=sys.stderr)
        return 1

    store = UserStore(args.database or settings.database_path)
    inserted = updated = 0
    try:
        store.init_db()
        for user in users:
            fields = {key: value for key, value in user.items() if key != "id"}
            if user.get("id") and store.update_user(user["id"], **fields):
                updated += 1
                print(f"{user['id']} updated")
                continue
            user_id = store.insert_user(user)
            inserted += 1
            print(f"{user_id} {user['email']}")
    except StoreError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(f"OK: inserted {inserted} users, updated {updated}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
