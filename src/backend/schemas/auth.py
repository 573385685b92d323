"""
Authentication-related Pydantic schemas.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from schemas.user import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    user: Optional[UserResponse] = None
