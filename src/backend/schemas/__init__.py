"""Schemas module initialization."""

from schemas.auth import LoginRequest, TokenResponse
from schemas.user import UserCreate, UserInDB, UserResponse
from schemas.voting import (
    CastVoteRequest,
    CastVoteResponse,
    Voting,
    VotingCreate,
    VotingUpdate,
    VotingWithResults,
)

__all__ = [
    "UserCreate",
    "UserResponse",
    "UserInDB",
    "LoginRequest",
    "TokenResponse",
    "Voting",
    "VotingCreate",
    "VotingUpdate",
    "VotingWithResults",
    "CastVoteRequest",
    "CastVoteResponse",
]
