"""
Tests for API dependencies (deps.py).

Tests the UserInDB construction and the bearer/admin gates.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from api.deps import (
    _user_model_to_schema,
    get_current_admin_user,
    get_current_user,
    get_current_user_optional,
)
from core.security import create_access_token
from schemas.user import UserInDB


def _mock_user(role: str = "user") -> MagicMock:
    mock_user = MagicMock()
    mock_user.id = str(uuid4())
    mock_user.email = "buerger@example.com"
    mock_user.name = "Buerger"
    mock_user.role = role
    mock_user.is_admin = role == "admin"
    mock_user.created_at = datetime.now(timezone.utc)
    mock_user.last_login = None
    return mock_user


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.unit
class TestUserModelToSchemaHelper:
    """Test the _user_model_to_schema helper function."""

    def test_helper_converts_user_model(self) -> None:
        mock_user = _mock_user()

        result = _user_model_to_schema(mock_user)

        assert isinstance(result, UserInDB)
        assert result.id == mock_user.id
        assert result.email == "buerger@example.com"
        assert result.name == "Buerger"
        assert result.role == "user"
        assert result.is_admin is False

    def test_helper_keeps_admin_flag(self) -> None:
        result = _user_model_to_schema(_mock_user(role="admin"))

        assert result.is_admin is True


@pytest.mark.unit
class TestGetCurrentUser:
    """Test bearer token resolution."""

    async def test_missing_token(self, mock_db_session) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None, mock_db_session)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Access token required"

    async def test_invalid_token(self, mock_db_session) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_credentials("not-a-jwt"), mock_db_session)

        assert exc_info.value.status_code == 401

    async def test_unknown_user(self, mock_db_session) -> None:
        token = create_access_token({"sub": str(uuid4()), "role": "user"})

        with patch("api.deps.UserRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=None)
            with pytest.raises(HTTPException) as exc_info:
                await get_current_user(_credentials(token), mock_db_session)

        assert exc_info.value.detail == "User not found"

    async def test_valid_token(self, mock_db_session) -> None:
        mock_user = _mock_user()
        token = create_access_token({"sub": mock_user.id, "role": "user"})

        with patch("api.deps.UserRepository") as repo_cls:
            repo_cls.return_value.get_by_id = AsyncMock(return_value=mock_user)
            result = await get_current_user(_credentials(token), mock_db_session)

        assert result.id == mock_user.id
        repo_cls.return_value.get_by_id.assert_awaited_once_with(mock_user.id)

    async def test_optional_user_without_token(self, mock_db_session) -> None:
        assert await get_current_user_optional(None, mock_db_session) is None

    async def test_optional_user_with_bad_token(self, mock_db_session) -> None:
        assert await get_current_user_optional(_credentials("garbage"), mock_db_session) is None


@pytest.mark.unit
class TestAdminGate:
    async def test_regular_user_forbidden(self) -> None:
        user = _user_model_to_schema(_mock_user())

        with pytest.raises(HTTPException) as exc_info:
            await get_current_admin_user(user)

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Admin access required"

    async def test_admin_passes(self) -> None:
        admin = _user_model_to_schema(_mock_user(role="admin"))

        assert await get_current_admin_user(admin) is admin
