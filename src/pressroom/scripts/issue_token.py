# src/pressroom/scripts/issue_token.py
"""Print a bearer token for an existing user.

Usage::

    pressroom-token 42
    pressroom-token 42 --expires-minutes 60
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from pressroom.core.security import create_access_token
from pressroom.db.session import SessionLocal
from pressroom.models import User


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pressroom-token",
        description="Mint a signed bearer token for an existing user id.",
    )
    parser.add_argument("user_id", type=int, help="Identifier of the user to sign in as")
    parser.add_argument(
        "--expires-minutes",
        type=int,
        default=None,
        help="Override ACCESS_TOKEN_EXPIRE_MINUTES for this token",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    db = SessionLocal()
    try:
        user = db.get(User, args.user_id)
    finally:
        db.close()
    if user is None:
        print(f"No user with id {args.user_id}", file=sys.stderr)
        return 1
    print(
        create_access_token(
            user.id,
            email=user.email,
            name=user.name,
            expires_minutes=args.expires_minutes,
        )
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
