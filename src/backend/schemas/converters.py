"""
Schema converter functions.

Centralized helpers for converting SQLAlchemy models to Pydantic schemas.
Voting percentages and winners are computed here from the raw option
counters on every call; nothing derived is ever stored.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from schemas.voting import (
    Voting,
    VotingHistoryEntry,
    VotingOptionResult,
    VotingStatusEnum,
    VotingSummary,
    VotingWinner,
    VotingWithResults,
)
from services.vote_tally import OptionTally, VotingTally, tally_options

if TYPE_CHECKING:
    from models.voting import Voting as VotingModel


def _winner_schema(voting: "VotingModel", winner: Optional[OptionTally]) -> Optional[VotingWinner]:
    if winner is None:
        return None
    option = next(o for o in voting.options if str(o.id) == winner.option_id)
    return VotingWinner(
        option_id=winner.option_id,
        project_id=str(option.project_id),
        title=option.project.title if option.project else None,
        votes=winner.votes_count,
    )


def _goal_amount(project) -> Optional[float]:
    if project is None or project.goal_amount is None:
        return None
    return float(project.goal_amount)


def _option_results(voting: "VotingModel", tally: VotingTally) -> list[VotingOptionResult]:
    by_id = {str(o.id): o for o in voting.options}
    results = []
    for entry in tally.options:
        option = by_id[entry.option_id]
        project = option.project
        results.append(
            VotingOptionResult(
                id=entry.option_id,
                project_id=str(option.project_id),
                project_title=project.title if project else None,
                project_description=project.description if project else None,
                project_image_url=project.image_url if project else None,
                project_goal_amount=_goal_amount(project),
                position=option.position,
                votes_count=entry.votes_count,
                percentage=entry.percentage,
            )
        )
    return results


def voting_model_to_schema(voting: "VotingModel", now: Optional[datetime] = None) -> Voting:
    """
    Convert a Voting model (options loaded) to a Voting schema.

    Used by the active-voting view and admin mutation responses.
    """
    tally = tally_options(voting.options)
    return Voting(
        id=str(voting.id),
        title=voting.title,
        description=voting.description,
        start_date=voting.start_date,
        end_date=voting.end_date,
        status=VotingStatusEnum(voting.status),
        is_active=voting.is_effectively_active(now),
        created_at=voting.created_at,
        total_votes=tally.total_votes,
        options=_option_results(voting, tally),
    )


def voting_model_to_results_schema(voting: "VotingModel", now: Optional[datetime] = None) -> VotingWithResults:
    """Voting with per-option percentages and the winner."""
    tally = tally_options(voting.options)
    return VotingWithResults(
        id=str(voting.id),
        title=voting.title,
        description=voting.description,
        start_date=voting.start_date,
        end_date=voting.end_date,
        status=VotingStatusEnum(voting.status),
        is_active=voting.is_effectively_active(now),
        created_at=voting.created_at,
        total_votes=tally.total_votes,
        options=_option_results(voting, tally),
        winner=_winner_schema(voting, tally.winner),
    )


def voting_model_to_summary(voting: "VotingModel", participant_count: int, total_votes: int) -> VotingSummary:
    return VotingSummary(
        id=str(voting.id),
        title=voting.title,
        description=voting.description,
        start_date=voting.start_date,
        end_date=voting.end_date,
        status=VotingStatusEnum(voting.status),
        created_at=voting.created_at,
        participant_count=participant_count,
        total_votes=total_votes,
    )


def voting_model_to_history_entry(voting: "VotingModel", participant_count: int) -> VotingHistoryEntry:
    tally = tally_options(voting.options)
    return VotingHistoryEntry(
        id=str(voting.id),
        title=voting.title,
        description=voting.description,
        start_date=voting.start_date,
        end_date=voting.end_date,
        participant_count=participant_count,
        winner=_winner_schema(voting, tally.winner),
    )
