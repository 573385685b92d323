"""
Ballot repository for database operations.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.types import utcnow
from models.project import Project
from models.user_vote import UserVote
from models.voting import Voting, VotingOption


class UserVoteRepository:
    """Repository for ballot (user vote) database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, user_id: str, voting_id: str) -> bool:
        """Check if the user already holds a ballot for the voting."""
        result = await self.db.execute(
            select(func.count(UserVote.id)).where(
                and_(
                    UserVote.user_id == user_id,
                    UserVote.voting_id == voting_id,
                )
            )
        )
        count = result.scalar() or 0
        return count > 0

    async def get_for_user(self, user_id: str, voting_id: str) -> Optional[UserVote]:
        result = await self.db.execute(
            select(UserVote).where(
                and_(
                    UserVote.user_id == user_id,
                    UserVote.voting_id == voting_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        user_id: str,
        voting_id: str,
        option_id: str,
        voted_at: Optional[datetime] = None,
    ) -> UserVote:
        """
        Insert a ballot and flush it.

        Raises IntegrityError when a ballot for (user, voting) already exists.
        """
        ballot = UserVote(
            id=str(uuid4()),
            user_id=user_id,
            voting_id=voting_id,
            option_id=option_id,
            voted_at=voted_at or utcnow(),
        )
        self.db.add(ballot)
        await self.db.flush()
        return ballot

    async def count_by_voting(self, voting_id: str) -> int:
        result = await self.db.execute(
            select(func.count(UserVote.id)).where(UserVote.voting_id == voting_id)
        )
        return result.scalar() or 0

    async def list_for_user(self, user_id: str) -> list[dict]:
        """The user's ballots, newest first, with voting and project titles."""
        result = await self.db.execute(
            select(
                UserVote.voting_id,
                Voting.title.label("voting_title"),
                Project.title.label("voted_project"),
                UserVote.option_id,
                UserVote.voted_at,
            )
            .join(Voting, UserVote.voting_id == Voting.id)
            .join(VotingOption, UserVote.option_id == VotingOption.id)
            .join(Project, VotingOption.project_id == Project.id)
            .where(UserVote.user_id == user_id)
            .order_by(UserVote.voted_at.desc())
        )
        return [dict(row._mapping) for row in result.all()]
