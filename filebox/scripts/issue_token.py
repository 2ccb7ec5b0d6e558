"""
Mint an access token for a subject and a list of roles.

Usage:
    uv run python -m filebox.scripts.issue_token --sub alice --role admin
    uv run python -m filebox.scripts.issue_token --sub bob --role guest --minutes 15

Signs with SECRET_KEY / JWT_ALGORITHM from the environment (or .env),
so the token is accepted by a server started with the same settings.
"""

import argparse
from datetime import timedelta

from filebox.core.config import settings
from filebox.core.security import create_access_token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue a filebox access token")
    parser.add_argument("--sub", required=True, help="Subject (user id or name)")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        default=[],
        help="Role name; repeat for several roles",
    )
    parser.add_argument(
        "--minutes",
        type=int,
        default=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        help="Lifetime in minutes",
    )
    return parser


def main(argv: list[str] | None = None) -> str:
    args = build_parser().parse_args(argv)
    token = create_access_token(
        {"sub": args.sub, "role_names": args.roles},
        expires_delta=timedelta(minutes=args.minutes),
    )
    print(token)
    return token


if __name__ == "__main__":
    main()
