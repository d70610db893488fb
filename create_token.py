#!/usr/bin/env python3
"""
Issue a long-lived API bearer token for an existing user.

Usage:
    python create_token.py --email admin@example.com --days 365
"""

import argparse
import asyncio
import sys

from pet_rescue_api.app.core.db import init_db
from pet_rescue_api.app.core.security import create_access_token
from pet_rescue_api.app.services.user_service import UserService


def main() -> None:
    ap = argparse.ArgumentParser(description="Create an API token for a Pet Rescue user.")
    ap.add_argument("--email", required=True, help="Email of the user the token is issued for")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days")
    args = ap.parse_args()

    init_db()
    user = asyncio.run(UserService.get_user_by_email(args.email))
    if user is None:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        sys.exit(2)
    print(create_access_token({"sub": user.id}, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
