"""
Voting endpoints.

Public reads (active voting, results), ballot casting for signed-in users
and the admin lifecycle operations (create, update, close, delete, list).
"""

from uuid import UUID

from fastapi import APIRouter, status

from api.deps import AdminUser, CurrentUser, VotingServiceDep
from schemas.converters import (
    voting_model_to_history_entry,
    voting_model_to_results_schema,
    voting_model_to_schema,
    voting_model_to_summary,
)
from schemas.voting import (
    ActiveVotingResponse,
    CastVoteRequest,
    CastVoteResponse,
    MessageResponse,
    UserBallot,
    UserBallotsResponse,
    VotingCreate,
    VotingHistoryResponse,
    VotingListResponse,
    VotingMutationResponse,
    VotingUpdate,
    VotingWithResults,
)

router = APIRouter()


@router.get("/active", response_model=ActiveVotingResponse)
async def get_active_voting(service: VotingServiceDep) -> ActiveVotingResponse:
    """
    Get the currently active voting with live percentages.

    "Active" means status is active and now lies inside the date window.
    When several qualify, the most recently created one is returned.
    """
    voting = await service.get_active_voting()
    if voting is None:
        return ActiveVotingResponse(voting=None, message="No active voting at the moment")
    return ActiveVotingResponse(voting=voting_model_to_schema(voting))


@router.get("/history", response_model=VotingHistoryResponse)
async def get_voting_history(
    current_user: CurrentUser,
    service: VotingServiceDep,
) -> VotingHistoryResponse:
    """Recently closed votings with their winners."""
    entries = await service.get_history()
    return VotingHistoryResponse(
        history=[voting_model_to_history_entry(voting, participants) for voting, participants in entries]
    )


@router.get("/user/votes", response_model=UserBallotsResponse)
async def get_user_votes(
    current_user: CurrentUser,
    service: VotingServiceDep,
) -> UserBallotsResponse:
    """Ballots of the signed-in user, newest first."""
    rows = await service.get_user_votes(current_user.id)
    return UserBallotsResponse(
        votes=[
            UserBallot(
                voting_id=str(row["voting_id"]),
                voting_title=row["voting_title"],
                voted_project=row["voted_project"],
                option_id=str(row["option_id"]),
                voted_at=row["voted_at"],
            )
            for row in rows
        ]
    )


@router.get("", response_model=VotingListResponse)
async def list_votings(
    admin_user: AdminUser,
    service: VotingServiceDep,
) -> VotingListResponse:
    """All votings with participation numbers (admin)."""
    rows = await service.list_votings()
    return VotingListResponse(
        votings=[voting_model_to_summary(voting, participants, total) for voting, participants, total in rows]
    )


@router.post("", response_model=VotingMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_voting(
    voting_data: VotingCreate,
    admin_user: AdminUser,
    service: VotingServiceDep,
) -> VotingMutationResponse:
    """
    Create a voting over 2-5 projects (admin).

    The voting starts in ``upcoming``; an admin opens it with an update.
    """
    voting = await service.create_voting(
        title=voting_data.title,
        description=voting_data.description,
        start_date=voting_data.start_date,
        end_date=voting_data.end_date,
        project_ids=[str(pid) for pid in voting_data.project_ids],
        created_by=admin_user.id,
    )
    return VotingMutationResponse(message="Voting created successfully", voting=voting_model_to_schema(voting))


@router.get("/{voting_id}/results", response_model=VotingWithResults)
async def get_voting_results(voting_id: UUID, service: VotingServiceDep) -> VotingWithResults:
    """Counts, percentages and winner for any voting."""
    voting = await service.get_results(str(voting_id))
    return voting_model_to_results_schema(voting)


@router.post("/{voting_id}/vote", response_model=CastVoteResponse)
async def cast_vote(
    voting_id: UUID,
    vote_data: CastVoteRequest,
    current_user: CurrentUser,
    service: VotingServiceDep,
) -> CastVoteResponse:
    """
    Cast a ballot.

    Requirements:
    - Voting must be effectively active
    - User has not voted in this voting yet
    - Option belongs to this voting
    """
    ballot = await service.cast_vote(
        voting_id=str(voting_id),
        option_id=str(vote_data.option_id),
        user_id=current_user.id,
    )
    return CastVoteResponse(message="Vote recorded successfully", voted_at=ballot.voted_at)


@router.put("/{voting_id}", response_model=VotingMutationResponse)
async def update_voting(
    voting_id: UUID,
    voting_data: VotingUpdate,
    admin_user: AdminUser,
    service: VotingServiceDep,
) -> VotingMutationResponse:
    """Partially update a voting (admin). Status can only move forward."""
    changes = voting_data.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        changes["status"] = changes["status"].value
    voting = await service.update_voting(str(voting_id), changes, admin_id=admin_user.id)
    return VotingMutationResponse(message="Voting updated successfully", voting=voting_model_to_schema(voting))


@router.post("/{voting_id}/close", response_model=VotingMutationResponse)
async def close_voting(
    voting_id: UUID,
    admin_user: AdminUser,
    service: VotingServiceDep,
) -> VotingMutationResponse:
    """Close a voting now (admin). Closing twice is harmless."""
    voting = await service.close_voting(str(voting_id), admin_id=admin_user.id)
    return VotingMutationResponse(message="Voting closed successfully", voting=voting_model_to_schema(voting))


@router.delete("/{voting_id}", response_model=MessageResponse)
async def delete_voting(
    voting_id: UUID,
    admin_user: AdminUser,
    service: VotingServiceDep,
) -> MessageResponse:
    """Delete a voting together with its options and ballots (admin)."""
    await service.delete_voting(str(voting_id), admin_id=admin_user.id)
    return MessageResponse(message="Voting deleted successfully")
