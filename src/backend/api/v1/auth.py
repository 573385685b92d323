"""
Authentication endpoints.

Email and password sign-up and sign-in for the app. Both return a bearer
access token carrying the user's id and role.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import create_access_token, hash_password, verify_password
from db.session import get_db
from models.user import User
from repositories.user_repository import UserRepository
from schemas.auth import LoginRequest, TokenResponse
from schemas.user import UserCreate, UserResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


def _token_for(user: User) -> TokenResponse:
    access_token = create_access_token({"sub": str(user.id), "role": user.role})
    return TokenResponse(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Register a new user account and sign it in."""
    users = UserRepository(db)

    if await users.email_exists(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = await users.create(
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        name=user_data.name,
    )
    await db.commit()

    logger.info("user_registered", user_id=str(user.id))
    return _token_for(user)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Sign in with email and password."""
    users = UserRepository(db)
    user = await users.get_by_email(credentials.email)

    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.warning("login_failed", email_domain=credentials.email.split("@")[-1])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    await users.update_last_login(user.id)
    await db.commit()
    await db.refresh(user)

    logger.info("user_logged_in", user_id=str(user.id))
    return _token_for(user)
