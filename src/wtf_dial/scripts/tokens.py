"""Create a user and print a bearer token for it.

Usage:
    wtf-dial-token --name alice [--email alice@example.com]
    wtf-dial-token --user-id 3
"""

from __future__ import annotations

import argparse
import sys

from wtf_dial.core.errors import DialError, error_message
from wtf_dial.core.security import create_access_token
from wtf_dial.db.session import SessionLocal, create_tables
from wtf_dial.services.user_service import create_user, get_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Issue a WTF Dial access token.")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--name", help="create a new user with this name")
    group.add_argument("--user-id", type=int, help="issue a token for an existing user")
    parser.add_argument("--email", help="email for the new user")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables first (development databases only)",
    )
    args = parser.parse_args(argv)

    if args.create_tables:
        create_tables()

    with SessionLocal() as db:
        if args.name is not None:
            try:
                user = create_user(db, args.name, args.email)
            except DialError as exc:
                print(error_message(exc), file=sys.stderr)
                return 1
        else:
            user = get_user(db, args.user_id)
            if user is None:
                print(f"User {args.user_id} not found", file=sys.stderr)
                return 1
        user_id = user.id

    print(f"user_id={user_id}")
    print(create_access_token(user_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
