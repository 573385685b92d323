"""
Create an admin account for the admin panel.
Run with: python -m scripts.seed_admin --email admin@example.org --password '...'
"""

import argparse
import asyncio

import scripts._common  # noqa: F401
from core.security import hash_password
from db.session import Database
from models.user import User, UserRole
from repositories.user_repository import UserRepository
from scripts._common import open_database


async def seed_admin(database: Database, email: str, password: str, name: str = "Admin") -> User | None:
    """Create the admin user unless the email is already registered."""
    async with database.transaction() as session:
        users = UserRepository(session)
        if await users.email_exists(email):
            return None
        return await users.create(
            email=email,
            password_hash=hash_password(password),
            name=name,
            role=UserRole.ADMIN,
        )


async def main() -> None:
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Admin")
    args = parser.parse_args()

    database = open_database()
    try:
        user = await seed_admin(database, args.email, args.password, args.name)
    finally:
        await database.close()

    if user is None:
        print(f"⚠️  {args.email} already exists, skipping")
    else:
        print(f"✅ Admin user {user.email} created")


if __name__ == "__main__":
    asyncio.run(main())
