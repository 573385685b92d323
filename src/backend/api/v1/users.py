"""
User profile endpoints.
"""

from fastapi import APIRouter

from api.deps import CurrentUser
from schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: CurrentUser) -> UserResponse:
    """Get the signed-in user's profile."""
    return UserResponse.model_validate(current_user.model_dump())
