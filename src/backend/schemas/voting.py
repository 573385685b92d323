"""
Voting-related Pydantic schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class VotingStatusEnum(str, Enum):
    """Voting lifecycle status."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    CLOSED = "closed"


class VotingOptionResult(BaseModel):
    """One project option with its live count and share of the total."""

    id: str
    project_id: str
    project_title: Optional[str] = None
    project_description: Optional[str] = None
    project_image_url: Optional[str] = None
    project_goal_amount: Optional[float] = None
    position: int = 0
    votes_count: int = 0
    percentage: int = Field(0, ge=0, le=100, description="Rounded half-up, computed per option")


class VotingWinner(BaseModel):
    option_id: str
    project_id: str
    title: Optional[str] = None
    votes: int = 0


class Voting(BaseModel):
    """Schema for voting responses."""

    id: str
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: VotingStatusEnum
    is_active: bool = Field(False, description="Status is active and now is inside the date window")
    created_at: datetime
    total_votes: int = 0
    options: list[VotingOptionResult] = []


class VotingWithResults(Voting):
    """Voting plus the computed winner (results view)."""

    winner: Optional[VotingWinner] = None


class ActiveVotingResponse(BaseModel):
    voting: Optional[Voting] = None
    message: Optional[str] = None


class VotingCreate(BaseModel):
    """
    Schema for creating a voting.

    Field presence, date ordering and the option count are checked by the
    voting engine so they are reported as ``validation_error``.
    """

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    project_ids: list[UUID] = []


class VotingUpdate(BaseModel):
    """Partial voting update. Omitted fields stay as they are."""

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[VotingStatusEnum] = None


class VotingMutationResponse(BaseModel):
    message: str
    voting: Voting


class CastVoteRequest(BaseModel):
    option_id: UUID


class CastVoteResponse(BaseModel):
    message: str
    voted_at: datetime


class VotingSummary(BaseModel):
    """Admin list row."""

    id: str
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    status: VotingStatusEnum
    created_at: datetime
    participant_count: int = 0
    total_votes: int = 0


class VotingListResponse(BaseModel):
    votings: list[VotingSummary]


class VotingHistoryEntry(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    participant_count: int = 0
    winner: Optional[VotingWinner] = None


class VotingHistoryResponse(BaseModel):
    history: list[VotingHistoryEntry]


class UserBallot(BaseModel):
    """One of the caller's ballots."""

    voting_id: str
    voting_title: str
    voted_project: Optional[str] = None
    option_id: str
    voted_at: datetime

    model_config = {"from_attributes": True}


class UserBallotsResponse(BaseModel):
    votes: list[UserBallot]


class MessageResponse(BaseModel):
    message: str
