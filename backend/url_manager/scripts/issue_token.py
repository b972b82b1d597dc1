"""Issue a bearer token for the admin URL API.

Usage:
    python -m url_manager.scripts.issue_token ops-bot --permission urls:read

Without --permission the token carries ``urls:*``. The token is signed with
JWT_SECRET_KEY, so run it with the same environment as the API.
"""

import argparse
from datetime import timedelta

from url_manager.core.security import create_access_token


def issue_token(subject: str, permissions: list[str], expires_minutes: int | None = None) -> str:
    expires = timedelta(minutes=expires_minutes) if expires_minutes else None
    return create_access_token(
        {"sub": subject, "permissions": permissions},
        expires_delta=expires,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue an admin API token")
    parser.add_argument("subject", help="Who the token is for (logged on denied requests)")
    parser.add_argument(
        "--permission",
        action="append",
        dest="permissions",
        help="Permission to grant, repeatable (urls:read, urls:write, urls:*)",
    )
    parser.add_argument(
        "--expires-minutes",
        type=int,
        default=None,
        help="Token lifetime; defaults to JWT_ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    args = parser.parse_args()

    print(issue_token(args.subject, args.permissions or ["urls:*"], args.expires_minutes))


if __name__ == "__main__":
    main()
