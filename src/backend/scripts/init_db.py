"""
Create all tables that do not exist yet.
Run with: python -m scripts.init_db
"""

import asyncio

import scripts._common  # noqa: F401
from scripts._common import open_database


async def init_db() -> None:
    database = open_database()
    try:
        await database.create_all()
        print("✅ Tables created (existing tables were left untouched)")
    finally:
        await database.close()


if __name__ == "__main__":
    asyncio.run(init_db())
