"""Shared test fixtures for the reconciliation guard test suite.

Provides test settings, a FastAPI test application with the settings
dependency overridden, an async HTTP client and a token factory for
authenticating as any role.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.core.auth import ROLE_CLAIM, create_access_token
from src.core.config import Settings, get_settings
from src.core.models import UserRole


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with a known JWT secret."""
    return Settings(
        app_env="testing",
        debug=False,
        jwt_secret_key="test-secret-key-for-tests",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        cors_origins=["http://localhost:3000"],
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
def test_app(test_settings: Settings) -> FastAPI:
    """Create a fresh application whose auth uses the test settings."""
    from src.api.main import create_app

    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    return app


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_token(test_settings: Settings) -> Callable[..., str]:
    """Return a factory that signs access tokens with the test secret."""

    def _make(role: UserRole | str | None, subject: str = "tester@recon.dev", **claims: Any) -> str:
        data: dict[str, Any] = {"sub": subject, **claims}
        if role is not None:
            data[ROLE_CLAIM] = str(role)
        return create_access_token(data, test_settings)

    return _make


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> Callable[..., dict[str, str]]:
    """Return a factory building Authorization headers for a role."""

    def _headers(role: UserRole | str | None, **claims: Any) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(role, **claims)}"}

    return _headers
