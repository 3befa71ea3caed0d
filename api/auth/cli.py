"""
Admin seeding helper.

There is no registration endpoint; an operator inserts the admin row by hand:

    python -m auth.cli hash-password
    INSERT INTO admin (username, password_hash) VALUES ('me', '<hash>');
"""

from __future__ import annotations

import argparse
import getpass
import sys

from . import security


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="auth.cli", description="Portfolio admin helpers.")
    sub = parser.add_subparsers(dest="command", required=True)

    hash_cmd = sub.add_parser("hash-password", help="Print a bcrypt hash for the admin table.")
    hash_cmd.add_argument(
        "--password",
        default=None,
        help="Password to hash (prompted for when omitted).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "hash-password":
        password = args.password if args.password is not None else getpass.getpass("Password: ")
        try:
            print(security.hash_password(password))
        except security.AuthSecurityError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
