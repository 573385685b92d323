"""
Voting lifecycle rules.

Status only moves forward: ``upcoming -> active -> closed``. Skipping ahead
(``upcoming -> closed``) is allowed, going back is not, and ``closed`` is
terminal. Status is never flipped by a timer; the date window is layered on
top of the stored status by ``Voting.is_effectively_active``.
"""

from datetime import datetime
from typing import Optional

from core.config import settings
from core.exceptions import InvalidTransitionError, VotingValidationError
from models.voting import VotingStatus

_LIFECYCLE_ORDER = {status: rank for rank, status in enumerate(VotingStatus)}


def can_transition(current: VotingStatus | str, target: VotingStatus | str) -> bool:
    """True when ``target`` is the same state or later in the lifecycle."""
    return _LIFECYCLE_ORDER[VotingStatus(target)] >= _LIFECYCLE_ORDER[VotingStatus(current)]


def ensure_transition(current: VotingStatus | str, target: VotingStatus | str) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot change voting status from '{VotingStatus(current).value}' "
            f"to '{VotingStatus(target).value}'"
        )


def validate_window(start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
    if start_date is None or end_date is None:
        raise VotingValidationError("Start date and end date are required")
    if start_date >= end_date:
        raise VotingValidationError("End date must be after start date")


def validate_new_voting(
    title: Optional[str],
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    project_ids: Optional[list[str]],
) -> None:
    """Creation checks, in the order callers see them reported."""
    if not title or not title.strip():
        raise VotingValidationError("Title is required")

    validate_window(start_date, end_date)

    project_ids = project_ids or []
    if len(project_ids) < settings.VOTING_MIN_OPTIONS:
        raise VotingValidationError(
            f"At least {settings.VOTING_MIN_OPTIONS} projects are required"
        )
    if len(project_ids) > settings.VOTING_MAX_OPTIONS:
        raise VotingValidationError(
            f"Maximum {settings.VOTING_MAX_OPTIONS} projects allowed per voting"
        )
    if len(set(project_ids)) != len(project_ids):
        raise VotingValidationError("Each project may only appear once per voting")
