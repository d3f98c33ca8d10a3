#!/usr/bin/env python3
"""
Create a user directly in the database.

Usage:
  python scripts/add_user.py --username user1 --email user1@mail.com --password P4ssword [--inactive]
"""
from __future__ import annotations

import argparse
import sys

from hoaxify.core.errors import ValidationFailure
from hoaxify.core.messages import translate
from hoaxify.db.session import create_all
from hoaxify.repositories.sql_repository import SQLRepository
from hoaxify.services.auth_service import AuthService
from hoaxify.services.session_service import InMemoryTokenStore


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a user")
    ap.add_argument("--username", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--inactive", action="store_true", help="Create the account already deactivated")
    args = ap.parse_args()

    create_all()
    repo = SQLRepository()
    svc = AuthService(InMemoryTokenStore(), repo)
    try:
        user = svc.register(args.username, args.email, args.password)
    except ValidationFailure as exc:
        for field, key in exc.violations.items():
            sys.stderr.write(f"  {field}: {translate(key)}\n")
        raise SystemExit(2)
    if args.inactive:
        user.inactive = True
        user = repo.save(user)
    print("OK: user created")
    print(f"  id: {user.id}")
    print(f"  username: {user.username}")
    print(f"  email: {user.email}")
    print(f"  inactive: {user.inactive}")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
