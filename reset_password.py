#!/usr/bin/env python3
"""
Reset a user's password in the Pet Rescue SQLite database.

This script DOES NOT read or reveal any existing passwords.  It sets a
new password hash for the specified user email and lifts any sign-in
lockout.  The database is the one configured by ``DATABASE_URL``.

Usage:
    python reset_password.py --email admin@example.com --password "NewStrongPass1"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import asyncio
import getpass
import sys

from pet_rescue_api.app.core.db import init_db
from pet_rescue_api.app.core.security import check_password_policy
from pet_rescue_api.app.services.user_service import UserService


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset a Pet Rescue user password.")
    ap.add_argument("--email", required=True, help="User email to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    try:
        check_password_policy(new_password)
    except ValueError as e:
        print(f"[!] {e}", file=sys.stderr)
        sys.exit(1)

    init_db()
    if not asyncio.run(UserService.set_password(args.email, new_password)):
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        sys.exit(2)
    print(f"[+] Password updated for user: {args.email}")


if __name__ == "__main__":
    main()
