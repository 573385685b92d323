"""
Tests for user profile endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.integration
class TestCurrentUser:
    async def test_me_requires_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/users/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_me_with_token(self, client: AsyncClient, voter, voter_headers) -> None:
        response = await client.get("/api/v1/users/me", headers=voter_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == voter.id
        assert data["email"] == "voter@example.com"
        assert data["role"] == "user"

    async def test_me_with_expired_token(self, client: AsyncClient, voter) -> None:
        from datetime import timedelta

        from core.security import create_access_token

        token = create_access_token({"sub": voter.id}, expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"
