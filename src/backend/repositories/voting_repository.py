"""
Voting repository for database operations.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.types import utcnow
from models.user_vote import UserVote
from models.voting import Voting, VotingOption, VotingStatus


def _with_options():
    return selectinload(Voting.options).selectinload(VotingOption.project)


def _participant_count():
    return (
        select(func.count(func.distinct(UserVote.user_id)))
        .where(UserVote.voting_id == Voting.id)
        .correlate(Voting)
        .scalar_subquery()
    )


def _total_votes():
    return (
        select(func.coalesce(func.sum(VotingOption.votes_count), 0))
        .where(VotingOption.voting_id == Voting.id)
        .correlate(Voting)
        .scalar_subquery()
    )


class VotingRepository:
    """Repository for voting and voting option database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, voting_id: str, with_options: bool = True) -> Optional[Voting]:
        """Get a voting by ID, optionally with its options and their projects."""
        query = select(Voting).where(Voting.id == voting_id)
        if with_options:
            query = query.options(_with_options())
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_active(self, now: Optional[datetime] = None) -> Optional[Voting]:
        """Most recently created voting that is effectively active at ``now``."""
        now = now or utcnow()
        result = await self.db.execute(
            select(Voting)
            .options(_with_options())
            .where(
                and_(
                    Voting.status == VotingStatus.ACTIVE.value,
                    Voting.start_date <= now,
                    Voting.end_date >= now,
                )
            )
            .order_by(Voting.created_at.desc(), Voting.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_option(self, option_id: str, voting_id: str) -> Optional[VotingOption]:
        """Get an option only if it belongs to the given voting."""
        result = await self.db.execute(
            select(VotingOption).where(
                and_(
                    VotingOption.id == option_id,
                    VotingOption.voting_id == voting_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
        project_ids: list[str],
        created_by: Optional[str] = None,
    ) -> Voting:
        """Create a voting (status upcoming) and one option per project, in order."""
        voting = Voting(
            id=str(uuid4()),
            title=title,
            description=description,
            start_date=start_date,
            end_date=end_date,
            status=VotingStatus.UPCOMING.value,
            created_by=created_by,
        )
        self.db.add(voting)
        await self.db.flush()

        for position, project_id in enumerate(project_ids):
            self.db.add(
                VotingOption(
                    id=str(uuid4()),
                    voting_id=voting.id,
                    project_id=project_id,
                    votes_count=0,
                    position=position,
                )
            )

        await self.db.flush()
        return voting

    async def increment_option_count(self, option_id: str) -> bool:
        """Add one vote to an option with a single UPDATE (no read-modify-write)."""
        result = await self.db.execute(
            update(VotingOption)
            .where(VotingOption.id == option_id)
            .values(votes_count=VotingOption.votes_count + 1)
        )
        return self._get_rowcount(result) > 0

    async def close(self, voting_id: str, closed_at: datetime) -> bool:
        """
        Mark a voting closed and stamp its end date.

        The status guard makes a second close a no-op, so ``end_date`` is
        stamped exactly once.
        """
        result = await self.db.execute(
            update(Voting)
            .where(
                and_(
                    Voting.id == voting_id,
                    Voting.status != VotingStatus.CLOSED.value,
                )
            )
            .values(
                status=VotingStatus.CLOSED.value,
                end_date=closed_at,
                updated_at=closed_at,
            )
        )
        return self._get_rowcount(result) > 0

    async def delete(self, voting_id: str) -> bool:
        """Delete a voting. Options and ballots go with it (ON DELETE CASCADE)."""
        result = await self.db.execute(delete(Voting).where(Voting.id == voting_id))
        return self._get_rowcount(result) > 0

    async def list_with_counts(self) -> list[tuple[Voting, int, int]]:
        """All votings, newest first, with participant count and total votes."""
        result = await self.db.execute(
            select(
                Voting,
                _participant_count().label("participant_count"),
                _total_votes().label("total_votes"),
            ).order_by(Voting.created_at.desc())
        )
        return [(row[0], int(row[1] or 0), int(row[2] or 0)) for row in result.all()]

    async def get_history(self, limit: int = 10) -> list[tuple[Voting, int]]:
        """Closed votings, most recently ended first, with participant count."""
        result = await self.db.execute(
            select(Voting, _participant_count().label("participant_count"))
            .options(_with_options())
            .where(Voting.status == VotingStatus.CLOSED.value)
            .order_by(Voting.end_date.desc())
            .limit(limit)
        )
        return [(row[0], int(row[1] or 0)) for row in result.all()]

    async def count_by_status(self) -> dict[str, int]:
        """Number of votings per status (admin dashboard)."""
        result = await self.db.execute(
            select(Voting.status, func.count(Voting.id)).group_by(Voting.status)
        )
        counts = {status.value: 0 for status in VotingStatus}
        for status_value, count in result.all():
            counts[status_value] = count
        return counts
