"""
Tests for the voting engine against a real SQLite database.
"""

import asyncio
from datetime import timedelta
from typing import Any

import pytest
from sqlalchemy import func, select

from core.exceptions import (
    AlreadyVotedError,
    InvalidOptionError,
    InvalidTransitionError,
    VotingNotFoundError,
    VotingNotOpenError,
    VotingValidationError,
)
from db.types import utcnow
from models.user_vote import UserVote
from models.voting import Voting, VotingOption, VotingStatus
from repositories.user_vote_repository import UserVoteRepository
from repositories.voting_repository import VotingRepository
from services.vote_tally import tally_options


async def _count(database: Any, model: Any) -> int:
    async with database.session() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def _create(
    service: Any,
    projects: list[Any],
    count: int = 3,
    start: Any = None,
    end: Any = None,
    title: str = "Projekt-Abstimmung",
) -> Any:
    now = utcnow()
    return await service.create_voting(
        title=title,
        description="Welches Projekt soll als nächstes starten?",
        start_date=start or now - timedelta(minutes=1),
        end_date=end or now + timedelta(days=7),
        project_ids=[p.id for p in projects[:count]],
    )


@pytest.mark.integration
class TestCreateVoting:
    """Voting creation."""

    async def test_create_defaults_to_upcoming(self, voting_service, projects, admin) -> None:
        voting = await voting_service.create_voting(
            title="  Mai-Abstimmung ",
            description=None,
            start_date=utcnow(),
            end_date=utcnow() + timedelta(days=7),
            project_ids=[p.id for p in projects[:3]],
            created_by=admin.id,
        )

        assert voting.status == VotingStatus.UPCOMING.value
        assert voting.title == "Mai-Abstimmung"
        assert voting.created_by == admin.id
        assert [o.project_id for o in voting.options] == [p.id for p in projects[:3]]
        assert [o.position for o in voting.options] == [0, 1, 2]
        assert all(o.votes_count == 0 for o in voting.options)
        assert voting.options[0].project.title == projects[0].title

    async def test_single_project_rejected_and_nothing_persisted(self, voting_service, projects, database) -> None:
        with pytest.raises(VotingValidationError) as exc_info:
            await _create(voting_service, projects, count=1)

        assert exc_info.value.error_code == "validation_error"
        assert await _count(database, Voting) == 0
        assert await _count(database, VotingOption) == 0

    async def test_unknown_project_rolls_back(self, voting_service, projects, database) -> None:
        with pytest.raises(VotingValidationError) as exc_info:
            await voting_service.create_voting(
                title="Abstimmung",
                description=None,
                start_date=utcnow(),
                end_date=utcnow() + timedelta(days=1),
                project_ids=[projects[0].id, "00000000-0000-4000-8000-000000000000"],
            )

        assert exc_info.value.error_code == "unknown_project"
        assert await _count(database, Voting) == 0

    async def test_end_before_start_rejected(self, voting_service, projects) -> None:
        now = utcnow()
        with pytest.raises(VotingValidationError):
            await _create(voting_service, projects, start=now, end=now - timedelta(hours=1))

    async def test_naive_dates_taken_as_utc(self, voting_service, projects) -> None:
        now = utcnow()
        voting = await _create(
            voting_service,
            projects,
            start=now.replace(tzinfo=None),
            end=(now + timedelta(days=1)).replace(tzinfo=None),
        )

        assert voting.start_date == now
        assert voting.start_date.tzinfo is not None


@pytest.mark.integration
class TestCastVote:
    """Ballot casting protocol."""

    async def test_vote_recorded(self, voting_service, active_voting, voter) -> None:
        second = active_voting.options[1]

        ballot = await voting_service.cast_vote(active_voting.id, second.id, voter.id)

        assert ballot.voted_at is not None
        voting = await voting_service.get_results(active_voting.id)
        tally = tally_options(voting.options)
        assert [o.votes_count for o in voting.options] == [0, 1, 0]
        assert tally.total_votes == 1
        assert tally.for_option(second.id).percentage == 100

    async def test_second_vote_rejected(self, voting_service, active_voting, voter) -> None:
        await voting_service.cast_vote(active_voting.id, active_voting.options[1].id, voter.id)

        with pytest.raises(AlreadyVotedError) as exc_info:
            await voting_service.cast_vote(active_voting.id, active_voting.options[0].id, voter.id)

        assert exc_info.value.error_code == "already_voted"
        voting = await voting_service.get_results(active_voting.id)
        assert [o.votes_count for o in voting.options] == [0, 1, 0]

    async def test_upcoming_voting_not_open(self, voting_service, projects, voter) -> None:
        voting = await _create(voting_service, projects)

        with pytest.raises(VotingNotOpenError):
            await voting_service.cast_vote(voting.id, voting.options[0].id, voter.id)

    async def test_expired_window_not_open_despite_active_status(self, voting_service, projects, voter) -> None:
        now = utcnow()
        voting = await _create(
            voting_service,
            projects,
            start=now - timedelta(days=10),
            end=now - timedelta(days=1),
        )
        voting = await voting_service.update_voting(voting.id, {"status": "active"})
        assert voting.status == VotingStatus.ACTIVE.value

        with pytest.raises(VotingNotOpenError) as exc_info:
            await voting_service.cast_vote(voting.id, voting.options[0].id, voter.id)

        assert exc_info.value.error_code == "voting_not_open"

    async def test_window_not_started_yet(self, voting_service, active_voting, voter) -> None:
        before_start = active_voting.start_date - timedelta(seconds=1)

        with pytest.raises(VotingNotOpenError):
            await voting_service.cast_vote(active_voting.id, active_voting.options[0].id, voter.id, now=before_start)

    async def test_window_edges_inclusive(self, voting_service, active_voting, voter, other_voter) -> None:
        await voting_service.cast_vote(
            active_voting.id, active_voting.options[0].id, voter.id, now=active_voting.start_date
        )
        await voting_service.cast_vote(
            active_voting.id, active_voting.options[0].id, other_voter.id, now=active_voting.end_date
        )

        voting = await voting_service.get_results(active_voting.id)
        assert voting.options[0].votes_count == 2

    async def test_unknown_voting_not_open(self, voting_service, voter) -> None:
        with pytest.raises(VotingNotOpenError):
            await voting_service.cast_vote(
                "00000000-0000-4000-8000-000000000000",
                "00000000-0000-4000-8000-000000000001",
                voter.id,
            )

    async def test_option_from_other_voting_rejected(self, voting_service, active_voting, projects, voter) -> None:
        other = await _create(voting_service, projects, title="Andere Abstimmung")

        with pytest.raises(InvalidOptionError) as exc_info:
            await voting_service.cast_vote(active_voting.id, other.options[0].id, voter.id)

        assert exc_info.value.error_code == "invalid_option"

    async def test_counters_match_ballots(self, voting_service, active_voting, database, make_user) -> None:
        choices = [0, 0, 1, 2, 0, 1, 0]
        for i, choice in enumerate(choices):
            user = await make_user(f"buerger{i}@example.com")
            await voting_service.cast_vote(active_voting.id, active_voting.options[choice].id, user.id)

        voting = await voting_service.get_results(active_voting.id)
        async with database.session() as session:
            for option in voting.options:
                result = await session.execute(
                    select(func.count(UserVote.id)).where(UserVote.option_id == option.id)
                )
                assert option.votes_count == result.scalar_one()
            assert await UserVoteRepository(session).count_by_voting(active_voting.id) == 7
        assert [o.votes_count for o in voting.options] == [4, 2, 1]

    async def test_concurrent_casts_by_one_user(self, voting_service, active_voting, voter, database) -> None:
        attempts = 8
        results = await asyncio.gather(
            *(
                voting_service.cast_vote(active_voting.id, active_voting.options[i % 3].id, voter.id)
                for i in range(attempts)
            ),
            return_exceptions=True,
        )

        ballots = [r for r in results if isinstance(r, UserVote)]
        assert len(ballots) == 1
        assert all(isinstance(r, AlreadyVotedError) for r in results if r is not ballots[0])

        voting = await voting_service.get_results(active_voting.id)
        assert sum(o.votes_count for o in voting.options) == 1
        assert await _count(database, UserVote) == 1

    async def test_concurrent_casts_by_many_users(self, voting_service, active_voting, database, make_user) -> None:
        users = [await make_user(f"gleichzeitig{i}@example.com") for i in range(6)]
        option_id = active_voting.options[1].id

        results = await asyncio.gather(
            *(voting_service.cast_vote(active_voting.id, option_id, user.id) for user in users),
            return_exceptions=True,
        )

        assert all(isinstance(r, UserVote) for r in results)
        voting = await voting_service.get_results(active_voting.id)
        assert [o.votes_count for o in voting.options] == [0, len(users), 0]
        assert await _count(database, UserVote) == len(users)

    async def test_lost_race_reported_as_already_voted(
        self, voting_service, active_voting, voter, database, monkeypatch
    ) -> None:
        await voting_service.cast_vote(active_voting.id, active_voting.options[0].id, voter.id)

        async def never_voted(self, user_id, voting_id):
            return False

        # Early-exit check misses the existing ballot, so the unique constraint has to catch it
        monkeypatch.setattr(UserVoteRepository, "exists", never_voted)

        with pytest.raises(AlreadyVotedError):
            await voting_service.cast_vote(active_voting.id, active_voting.options[1].id, voter.id)

        voting = await voting_service.get_results(active_voting.id)
        assert [o.votes_count for o in voting.options] == [1, 0, 0]
        assert await _count(database, UserVote) == 1

    async def test_failure_after_insert_rolls_back_ballot(
        self, voting_service, active_voting, voter, database, monkeypatch
    ) -> None:
        async def broken_increment(self, option_id):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(VotingRepository, "increment_option_count", broken_increment)

        with pytest.raises(RuntimeError):
            await voting_service.cast_vote(active_voting.id, active_voting.options[0].id, voter.id)

        assert await _count(database, UserVote) == 0


@pytest.mark.integration
class TestLifecycle:
    """Status changes, closing and deletion."""

    async def test_cannot_reopen_closed_voting(self, voting_service, active_voting) -> None:
        await voting_service.close_voting(active_voting.id)

        with pytest.raises(InvalidTransitionError):
            await voting_service.update_voting(active_voting.id, {"status": "active"})

    async def test_cannot_move_back_to_upcoming(self, voting_service, active_voting) -> None:
        with pytest.raises(InvalidTransitionError):
            await voting_service.update_voting(active_voting.id, {"status": "upcoming"})

        voting = await voting_service.get_voting(active_voting.id)
        assert voting.status == VotingStatus.ACTIVE.value

    async def test_close_stamps_end_date_once(self, voting_service, active_voting) -> None:
        first_close = utcnow()
        closed = await voting_service.close_voting(active_voting.id, now=first_close)

        assert closed.status == VotingStatus.CLOSED.value
        assert closed.end_date == first_close

        again = await voting_service.close_voting(active_voting.id, now=first_close + timedelta(hours=2))

        assert again.status == VotingStatus.CLOSED.value
        assert again.end_date == first_close

    async def test_update_to_closed_uses_close_semantics(self, voting_service, active_voting) -> None:
        now = utcnow()
        voting = await voting_service.update_voting(active_voting.id, {"status": "closed"}, now=now)

        assert voting.status == VotingStatus.CLOSED.value
        assert voting.end_date == now

    async def test_upcoming_can_skip_to_closed(self, voting_service, projects) -> None:
        voting = await _create(voting_service, projects)

        closed = await voting_service.close_voting(voting.id)

        assert closed.status == VotingStatus.CLOSED.value

    async def test_future_voting_cannot_be_closed(self, voting_service, projects) -> None:
        now = utcnow()
        voting = await _create(voting_service, projects, start=now + timedelta(days=1), end=now + timedelta(days=8))

        with pytest.raises(InvalidTransitionError):
            await voting_service.close_voting(voting.id)

        assert (await voting_service.get_voting(voting.id)).status == VotingStatus.UPCOMING.value

    async def test_closed_voting_not_open(self, voting_service, active_voting, voter) -> None:
        await voting_service.close_voting(active_voting.id)

        with pytest.raises(VotingNotOpenError):
            await voting_service.cast_vote(active_voting.id, active_voting.options[0].id, voter.id)

    async def test_update_title_and_dates(self, voting_service, active_voting) -> None:
        new_end = active_voting.end_date + timedelta(days=3)

        voting = await voting_service.update_voting(
            active_voting.id,
            {"title": "Neuer Titel", "end_date": new_end},
        )

        assert voting.title == "Neuer Titel"
        assert voting.end_date == new_end
        assert voting.status == VotingStatus.ACTIVE.value

    async def test_update_rejects_inverted_window(self, voting_service, active_voting) -> None:
        with pytest.raises(VotingValidationError):
            await voting_service.update_voting(
                active_voting.id,
                {"end_date": active_voting.start_date - timedelta(days=1)},
            )

    async def test_closed_voting_dates_frozen(self, voting_service, active_voting) -> None:
        await voting_service.close_voting(active_voting.id)

        with pytest.raises(VotingValidationError):
            await voting_service.update_voting(
                active_voting.id,
                {"end_date": utcnow() + timedelta(days=30)},
            )

    async def test_update_unknown_voting(self, voting_service) -> None:
        with pytest.raises(VotingNotFoundError):
            await voting_service.update_voting("00000000-0000-4000-8000-000000000000", {"title": "x"})

    async def test_delete_cascades(self, voting_service, active_voting, voter, database) -> None:
        await voting_service.cast_vote(active_voting.id, active_voting.options[0].id, voter.id)

        await voting_service.delete_voting(active_voting.id)

        assert await _count(database, Voting) == 0
        assert await _count(database, VotingOption) == 0
        assert await _count(database, UserVote) == 0

    async def test_delete_unknown_voting(self, voting_service) -> None:
        with pytest.raises(VotingNotFoundError):
            await voting_service.delete_voting("00000000-0000-4000-8000-000000000000")


@pytest.mark.integration
class TestReads:
    """Active voting, listings and history."""

    async def test_no_active_voting(self, voting_service, projects) -> None:
        await _create(voting_service, projects)

        assert await voting_service.get_active_voting() is None

    async def test_most_recent_active_wins(self, voting_service, active_voting, projects) -> None:
        newer = await _create(voting_service, projects, title="Neuere Abstimmung")
        await voting_service.update_voting(newer.id, {"status": "active"})

        current = await voting_service.get_active_voting()

        assert current.id == newer.id
        assert len(current.options) == 3

    async def test_results_unknown_voting(self, voting_service) -> None:
        with pytest.raises(VotingNotFoundError):
            await voting_service.get_results("00000000-0000-4000-8000-000000000000")

    async def test_list_with_counts(self, voting_service, active_voting, projects, voter, other_voter) -> None:
        await _create(voting_service, projects, title="Ohne Stimmen")
        await voting_service.cast_vote(active_voting.id, active_voting.options[0].id, voter.id)
        await voting_service.cast_vote(active_voting.id, active_voting.options[2].id, other_voter.id)

        rows = await voting_service.list_votings()

        assert [voting.title for voting, _, _ in rows] == ["Ohne Stimmen", active_voting.title]
        assert rows[0][1:] == (0, 0)
        assert rows[1][1:] == (2, 2)

    async def test_history_ordered_by_end_date(self, voting_service, projects, voter) -> None:
        now = utcnow()
        start = now - timedelta(hours=2)
        first = await _create(voting_service, projects, start=start, title="Erste")
        second = await _create(voting_service, projects, start=start, title="Zweite")
        await _create(voting_service, projects, start=start, title="Noch offen")

        await voting_service.update_voting(first.id, {"status": "active"})
        await voting_service.cast_vote(first.id, first.options[2].id, voter.id)
        await voting_service.close_voting(second.id, now=now - timedelta(hours=1))
        await voting_service.close_voting(first.id, now=now - timedelta(minutes=30))

        history = await voting_service.get_history()

        assert [voting.title for voting, _ in history] == ["Erste", "Zweite"]
        voting, participants = history[0]
        assert participants == 1
        assert tally_options(voting.options).winner.option_id == first.options[2].id

        assert len(await voting_service.get_history(limit=1)) == 1

    async def test_user_votes(self, voting_service, active_voting, projects, voter) -> None:
        await voting_service.cast_vote(active_voting.id, active_voting.options[1].id, voter.id)

        rows = await voting_service.get_user_votes(voter.id)

        assert len(rows) == 1
        assert rows[0]["voting_title"] == active_voting.title
        assert rows[0]["voted_project"] == projects[1].title
        assert str(rows[0]["option_id"]) == active_voting.options[1].id

    async def test_status_counts(self, voting_service, active_voting, projects) -> None:
        await _create(voting_service, projects)

        assert await voting_service.get_status_counts() == {"upcoming": 1, "active": 1, "closed": 0}
