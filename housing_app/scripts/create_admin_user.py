"""Create or promote an administrator account.

    python -m scripts.create_admin_user --email admin@example.com --password secret
"""
import argparse
import asyncio
import logging

from core.get_db import AsyncSessionLocal
from models.enums import UserRole
from models.models import User
from repos.user_repo import UserRepo

logger = logging.getLogger(__name__)


async def create_admin(
    email: str,
    password: str,
    first_name: str = "Admin",
    last_name: str = "User",
    session_factory=AsyncSessionLocal,
) -> User:
    async with session_factory() as db:
        repo = UserRepo(db)
        user = await repo.get_by_email(email)
        if user is not None:
            user.role = UserRole.ADMIN
            user.approved = True
            user.set_password(password)
            user = await repo.save(user)
            logger.info("Promoted existing user %s to admin", user.email)
            return user

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN,
            approved=True,
        )
        user.normalize()
        user.set_password(password)
        user = await repo.create(user)
        logger.info("Created admin user %s", user.email)
        return user


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    return parser.parse_args(argv)


def main(argv=None):
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    if len(args.password) < 6:
        raise SystemExit("Password must be at least 6 characters")
    asyncio.run(
        create_admin(args.email, args.password, args.first_name, args.last_name)
    )


if __name__ == "__main__":
    main()
