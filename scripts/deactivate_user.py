#!/usr/bin/env python3
"""
Deactivate (or reactivate) a user and drop every session token it holds.

Usage:
  python scripts/deactivate_user.py --email user1@mail.com [--reactivate]
"""
from __future__ import annotations

import argparse
import sys

from hoaxify.repositories.sql_repository import SQLRepository
from hoaxify.services.session_service import SQLTokenStore


def main() -> None:
    ap = argparse.ArgumentParser(description="Deactivate a user")
    ap.add_argument("--email", required=True)
    ap.add_argument("--reactivate", action="store_true")
    args = ap.parse_args()

    repo = SQLRepository()
    user = repo.find_by_email(args.email)
    if not user:
        raise SystemExit(f"User '{args.email}' does not exist")
    user.inactive = not args.reactivate
    repo.save(user)
    if user.inactive:
        SQLTokenStore().revoke_all(user.id)
    print(f"OK: {user.email} inactive={user.inactive}")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
