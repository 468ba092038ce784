"""Tests for the safe error message catalogue route."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from src.core.errors import FALLBACK_ERROR_MESSAGE, SAFE_ERROR_MESSAGES


class TestListSafeMessages:
    """GET /api/v1/errors/messages"""

    @pytest.mark.asyncio
    async def test_returns_full_table(self, client: AsyncClient) -> None:
        """Every approved status and its exact text is published."""
        response = await client.get("/api/v1/errors/messages")
        assert response.status_code == 200
        data = response.json()
        assert {int(code): text for code, text in data["messages"].items()} == dict(SAFE_ERROR_MESSAGES)

    @pytest.mark.asyncio
    async def test_returns_fallback(self, client: AsyncClient) -> None:
        """The fallback string is published alongside the table."""
        data = (await client.get("/api/v1/errors/messages")).json()
        assert data["fallback"] == FALLBACK_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_is_public(self, client: AsyncClient) -> None:
        """Clients need the catalogue before they can log in."""
        response = await client.get("/api/v1/errors/messages")
        assert "authorization" not in {h.lower() for h in response.request.headers}
        assert response.status_code == 200
