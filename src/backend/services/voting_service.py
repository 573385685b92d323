"""
Voting engine.

Owns the voting lifecycle, the one-ballot-per-user rule and the atomic
counter increment. Every multi-step write runs inside
``Database.transaction()``, so a failure anywhere rolls the whole unit of
work back before the error reaches the caller.
"""

from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.exceptions import (
    AlreadyVotedError,
    InvalidOptionError,
    InvalidTransitionError,
    VotingNotFoundError,
    VotingNotOpenError,
    VotingValidationError,
)
from db.session import Database
from db.types import as_utc, utcnow
from models.user_vote import UserVote
from models.voting import Voting, VotingStatus
from repositories.project_repository import ProjectRepository
from repositories.user_vote_repository import UserVoteRepository
from repositories.voting_repository import VotingRepository
from services.voting_lifecycle import ensure_transition, validate_new_voting, validate_window

logger = structlog.get_logger(__name__)


class VotingService:
    """Voting engine operations over an explicitly passed store client."""

    def __init__(self, database: Database):
        self.database = database

    # Reads

    async def get_voting(self, voting_id: str) -> Voting:
        """Load a voting with its options, or raise ``VotingNotFoundError``."""
        async with self.database.session() as session:
            voting = await VotingRepository(session).get_by_id(voting_id)
        if voting is None:
            raise VotingNotFoundError()
        return voting

    async def get_active_voting(self, now: Optional[datetime] = None) -> Optional[Voting]:
        """The most recently created voting that is effectively active, if any."""
        async with self.database.session() as session:
            return await VotingRepository(session).get_active(as_utc(now) or utcnow())

    async def get_results(self, voting_id: str) -> Voting:
        return await self.get_voting(voting_id)

    async def list_votings(self) -> list[tuple[Voting, int, int]]:
        async with self.database.session() as session:
            return await VotingRepository(session).list_with_counts()

    async def get_history(self, limit: Optional[int] = None) -> list[tuple[Voting, int]]:
        async with self.database.session() as session:
            return await VotingRepository(session).get_history(limit or settings.VOTING_HISTORY_LIMIT)

    async def get_user_votes(self, user_id: str) -> list[dict]:
        async with self.database.session() as session:
            return await UserVoteRepository(session).list_for_user(user_id)

    async def get_status_counts(self) -> dict[str, int]:
        async with self.database.session() as session:
            return await VotingRepository(session).count_by_status()

    # Ballots

    async def cast_vote(
        self,
        voting_id: str,
        option_id: str,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> UserVote:
        """
        Record one ballot and bump the chosen option's counter.

        Checks run in order: voting open, no earlier ballot, option belongs
        to the voting. The ballot insert and the counter UPDATE share one
        transaction. The unique ``(user_id, voting_id)`` constraint decides
        races; a lost race surfaces as ``AlreadyVotedError``.
        """
        now = as_utc(now) or utcnow()

        try:
            async with self.database.transaction() as session:
                votings = VotingRepository(session)
                ballots = UserVoteRepository(session)

                voting = await votings.get_by_id(voting_id, with_options=False)
                if voting is None or not voting.is_effectively_active(now):
                    raise VotingNotOpenError()

                if await ballots.exists(user_id, voting_id):
                    raise AlreadyVotedError()

                option = await votings.get_option(option_id, voting_id)
                if option is None:
                    raise InvalidOptionError()

                ballot = await ballots.create(user_id, voting_id, option_id, voted_at=now)
                await votings.increment_option_count(option_id)
        except IntegrityError as exc:
            if not await self._has_ballot(user_id, voting_id):
                raise
            logger.warning("vote_race_lost", voting_id=voting_id, user_id=user_id)
            raise AlreadyVotedError() from exc

        logger.info("vote_cast", voting_id=voting_id, option_id=option_id, user_id=user_id)
        return ballot

    async def _has_ballot(self, user_id: str, voting_id: str) -> bool:
        async with self.database.session() as session:
            ballot = await UserVoteRepository(session).get_for_user(user_id, voting_id)
        return ballot is not None

    # Admin writes

    async def create_voting(
        self,
        title: Optional[str],
        description: Optional[str],
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        project_ids: Optional[list[str]],
        created_by: Optional[str] = None,
    ) -> Voting:
        """Create a voting in ``upcoming`` with one option per project, in order."""
        start_date = as_utc(start_date)
        end_date = as_utc(end_date)
        project_ids = [str(pid) for pid in project_ids or []]

        validate_new_voting(title, start_date, end_date, project_ids)

        async with self.database.transaction() as session:
            missing = await ProjectRepository(session).missing_ids(project_ids)
            if missing:
                raise VotingValidationError(
                    f"Unknown project ids: {', '.join(missing)}",
                    error_code="unknown_project",
                )

            voting = await VotingRepository(session).create(
                title=title.strip(),
                description=description,
                start_date=start_date,
                end_date=end_date,
                project_ids=project_ids,
                created_by=created_by,
            )
            voting_id = voting.id

        logger.info(
            "voting_created",
            voting_id=voting_id,
            admin_id=created_by,
            options=len(project_ids),
        )
        return await self.get_voting(voting_id)

    async def update_voting(
        self,
        voting_id: str,
        changes: dict[str, Any],
        admin_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Voting:
        """
        Apply a partial update.

        ``changes`` may hold title, description, start_date, end_date and
        status. Status only moves forward; ``closed`` goes through the same
        path as ``close_voting``. Dates of a closed voting are frozen.
        """
        now = as_utc(now) or utcnow()
        target_status = changes.get("status")
        if target_status is not None:
            target_status = VotingStatus(target_status)

        async with self.database.transaction() as session:
            votings = VotingRepository(session)
            voting = await votings.get_by_id(voting_id, with_options=False)
            if voting is None:
                raise VotingNotFoundError()

            current_status = VotingStatus(voting.status)
            if target_status is not None:
                ensure_transition(current_status, target_status)

            if "title" in changes and changes["title"] is not None:
                if not changes["title"].strip():
                    raise VotingValidationError("Title is required")
                voting.title = changes["title"].strip()
            if "description" in changes:
                voting.description = changes["description"]

            new_start = as_utc(changes.get("start_date"))
            new_end = as_utc(changes.get("end_date"))
            if new_start is not None or new_end is not None:
                if current_status == VotingStatus.CLOSED:
                    raise VotingValidationError("Dates of a closed voting cannot be changed")
                validate_window(new_start or voting.start_date, new_end or voting.end_date)
                voting.start_date = new_start or voting.start_date
                voting.end_date = new_end or voting.end_date

            close_now = target_status == VotingStatus.CLOSED and current_status != VotingStatus.CLOSED
            if target_status == VotingStatus.ACTIVE:
                voting.status = VotingStatus.ACTIVE.value

            await session.flush()

            if close_now:
                self._ensure_closable(voting, now)
                await votings.close(voting_id, now)

        logger.info(
            "voting_updated",
            voting_id=voting_id,
            admin_id=admin_id,
            fields=sorted(changes),
        )
        return await self.get_voting(voting_id)

    async def close_voting(
        self,
        voting_id: str,
        admin_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Voting:
        """
        Close a voting and stamp ``end_date = now``.

        Closing an already closed voting changes nothing and returns it as is.
        """
        now = as_utc(now) or utcnow()

        async with self.database.transaction() as session:
            votings = VotingRepository(session)
            voting = await votings.get_by_id(voting_id, with_options=False)
            if voting is None:
                raise VotingNotFoundError()

            if voting.status == VotingStatus.CLOSED.value:
                logger.debug("voting_already_closed", voting_id=voting_id)
                closed = False
            else:
                self._ensure_closable(voting, now)
                closed = await votings.close(voting_id, now)

        if closed:
            logger.info("voting_closed", voting_id=voting_id, admin_id=admin_id)
        return await self.get_voting(voting_id)

    @staticmethod
    def _ensure_closable(voting: Voting, now: datetime) -> None:
        # end_date becomes now, which must stay after start_date
        if as_utc(voting.start_date) >= now:
            raise InvalidTransitionError(
                "Voting has not started yet and cannot be closed; delete it instead"
            )

    async def delete_voting(self, voting_id: str, admin_id: Optional[str] = None) -> None:
        """Delete a voting with its options and ballots."""
        async with self.database.transaction() as session:
            deleted = await VotingRepository(session).delete(voting_id)
            if not deleted:
                raise VotingNotFoundError()

        logger.info("voting_deleted", voting_id=voting_id, admin_id=admin_id)
