"""Create (or promote) an administrator account.

Usage:
    python -m scripts.create_admin <email> <full_name> [--role super_admin]
The password is read from the ADMIN_PASSWORD environment variable, or
prompted for when unset. The account is created verified so it can log in
immediately.
"""

import argparse
import asyncio
import getpass
import os
import sys

import userauth.infrastructure.persistence.database as database
from userauth.core.config import get_settings
from userauth.domain.enums import UserRole
from userauth.infrastructure.persistence.repositories import UserRepository
from userauth.infrastructure.security import BcryptPasswordHasher

MIN_PASSWORD_LENGTH = 8


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an administrator account.")
    parser.add_argument("email")
    parser.add_argument("full_name")
    parser.add_argument("--role", choices=UserRole.values(), default=UserRole.ADMIN.value)
    return parser.parse_args(argv)


def _read_password() -> str:
    password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters", file=sys.stderr)
        sys.exit(1)
    return password


async def main() -> None:
    """Create the admin, or set the role on an existing account with that email."""
    args = _parse_args(sys.argv[1:])
    settings = get_settings()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    try:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                user_repo = UserRepository(session)
                existing = await user_repo.get_by_email(args.email)
                if existing is not None:
                    await user_repo.update_fields(existing.id, {"role": args.role})
                    print(f"Granted role {args.role} to existing user {existing.id}")
                    return
                hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
                hashed = await asyncio.to_thread(hasher.hash, _read_password())
                user = await user_repo.create_user(
                    email=args.email,
                    hashed_password=hashed,
                    full_name=args.full_name,
                    role=args.role,
                    is_verified=True,
                )
                print(f"Created {args.role} {user.id} ({user.email})")
    finally:
        if database.engine is not None:
            await database.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
