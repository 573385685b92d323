"""
User repository for database operations.
"""

from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.types import utcnow
from models.user import User, UserRole


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check if email is already registered."""
        result = await self.db.execute(select(func.count(User.id)).where(User.email == email.lower()))
        count = result.scalar() or 0
        return count > 0

    async def create(
        self,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create a new user."""
        user = User(
            id=str(uuid4()),
            email=email.lower(),
            password_hash=password_hash,
            name=name,
            role=role.value,
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        return user

    async def update_last_login(self, user_id: str) -> bool:
        """Update user's last login timestamp."""
        result = await self.db.execute(update(User).where(User.id == user_id).values(last_login=utcnow()))
        return self._get_rowcount(result) > 0

    async def count_users(self) -> int:
        result = await self.db.execute(select(func.count(User.id)))
        return result.scalar() or 0

    async def list_users(self, limit: int = 200) -> list[User]:
        """Newest accounts first."""
        result = await self.db.execute(select(User).order_by(User.created_at.desc()).limit(limit))
        return list(result.scalars().all())
