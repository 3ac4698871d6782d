#!/usr/bin/env python3
"""
User management service -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload
  python main.py create-user --email admin@example.com --password 's3cret-pass' --enabled
  python main.py create-user --email dr.rao@example.com --password 's3cret-pass' \\
      --full-name "Asha Rao" --role-id 2 --database-url sqlite:///ums.db

Environment variables:
  SECRET_KEY    Required unless DEBUG=true. At least 32 characters.
  DATABASE_URL  Any SQLAlchemy URL. Defaults to a SQLite file beside users/.

create-user writes straight to the store, so it is also how the first enabled
account is provisioned when REQUIRE_ENABLED_ACCOUNTS=true.
"""

import argparse
import sys
from typing import Optional

from sqlalchemy.exc import IntegrityError

from core.config import get_settings
from users.exceptions import DuplicateEmailError
from users.models import User
from users.service import UserService
from users.store import UserStore


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _create_user(args: argparse.Namespace) -> int:
    # auth.tokens hashes a dummy password at import; only pay for it here.
    from auth.tokens import hash_password

    store = UserStore(args.database_url or get_settings().database_url)
    try:
        user = UserService(store).register_user(
            User(
                full_name=args.full_name,
                email=args.email,
                role_id=args.role_id,
                password_hash=hash_password(args.password),
            )
        )
        if args.enabled:
            # register_user always creates disabled accounts.
            user.enabled = True
            store.update_user(user)
    except (DuplicateEmailError, IntegrityError):
        print(f"  [!] A user with email {args.email} already exists.")
        return 1
    finally:
        store.close()
    print(f"  Created user {user.id} ({user.email}, roleId={user.role_id}, enabled={user.enabled})")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ums",
        description="User management service: run the API or provision users.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(handler=_serve)

    create = sub.add_parser("create-user", help="Insert a user directly into the store")
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)
    create.add_argument("--full-name", default=None)
    create.add_argument("--role-id", type=int, default=1)
    create.add_argument("--enabled", action="store_true", help="Create the account already enabled")
    create.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    create.set_defaults(handler=_create_user)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
