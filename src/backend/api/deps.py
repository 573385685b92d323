"""
Shared dependencies for API endpoints.

Includes:
- User JWT authentication for the app API
- Admin gate
- Service factories bound to the store client opened at startup
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import decode_token
from db.session import Database, get_database, get_db
from models.user import User
from repositories.user_repository import UserRepository
from schemas.user import UserInDB
from services.settings_service import SettingsService
from services.voting_service import VotingService

logger = structlog.get_logger(__name__)

# Security schemes
security = HTTPBearer(auto_error=False)


# =============================================================================
# Helper Functions
# =============================================================================


def _user_model_to_schema(user: User) -> UserInDB:
    """
    Convert a User SQLAlchemy model to a UserInDB Pydantic schema.

    This is the single source of truth for User -> UserInDB conversion,
    ensuring consistent field mapping across all authentication flows.
    """
    return UserInDB(
        id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role,
        is_admin=user.is_admin,
        created_at=user.created_at,
        last_login=user.last_login,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# =============================================================================
# User Authentication (JWT-based)
# =============================================================================


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: AsyncSession = Depends(get_db),
) -> UserInDB:
    """
    Extract and validate the current user from the JWT token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or the user is gone.
    """
    if credentials is None:
        raise _unauthorized("Access token required")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise _unauthorized("User not found")

    return _user_model_to_schema(user)


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: AsyncSession = Depends(get_db),
) -> UserInDB | None:
    """
    Optionally extract and validate the current user from the JWT token.

    Returns None if no token is provided or token is invalid.
    Does not raise exceptions - useful for endpoints that work for both
    authenticated and unauthenticated users.
    """
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("sub") is None:
        return None

    user = await UserRepository(db).get_by_id(payload["sub"])
    if not user:
        return None

    return _user_model_to_schema(user)


async def get_current_admin_user(
    current_user: Annotated[UserInDB, Depends(get_current_user)],
) -> UserInDB:
    """
    Ensure the current user is an admin.

    Raises:
        HTTPException: 403 if user is not an admin.
    """
    if not current_user.is_admin:
        logger.warning(
            "non_admin_access_attempt",
            user_id=current_user.id,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


# =============================================================================
# Services
# =============================================================================


def get_voting_service(database: Annotated[Database, Depends(get_database)]) -> VotingService:
    return VotingService(database)


def get_settings_service(database: Annotated[Database, Depends(get_database)]) -> SettingsService:
    return SettingsService(database)


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[UserInDB, Depends(get_current_user)]
OptionalUser = Annotated[UserInDB | None, Depends(get_current_user_optional)]
AdminUser = Annotated[UserInDB, Depends(get_current_admin_user)]
VotingServiceDep = Annotated[VotingService, Depends(get_voting_service)]
SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]
