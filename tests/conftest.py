# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Builds apps for arbitrary settings
# - Issues signed access tokens and fakes the users table
# =============================================================================

import os
import time
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-0123456789abcdef")
os.environ.setdefault("NODE_ENV", "test")

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config import Settings
from app.main import create_app

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def make_settings():
    """Settings with overrides applied on top of the test environment."""
    def _make(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)
    return _make


@pytest.fixture
def make_client(make_settings):
    """TestClient for an app built from overridden settings (lifespan not run)."""
    def _make(**overrides) -> TestClient:
        return TestClient(create_app(make_settings(**overrides)))
    return _make


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def make_token(user_id):
    """Sign an HS256 access token like Supabase Auth does."""
    def _make(
        sub: str | None = None,
        expires_in: int = 3600,
        secret: str = JWT_SECRET,
        audience: str = "authenticated",
        **claims,
    ) -> str:
        now = int(time.time())
        payload = {
            "sub": str(user_id) if sub is None else sub,
            "aud": audience,
            "iat": now,
            "exp": now + expires_in,
            "email": "jane@example.com",
            "role": "authenticated",
        }
        payload.update(claims)
        if sub == "":
            payload.pop("sub")
        return jwt.encode(payload, secret, algorithm="HS256")
    return _make


@pytest.fixture
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def known_user(user_id):
    """Make the bearer-token gate find the token's user in public.users."""
    profile = {"id": str(user_id), "email": "jane@example.com", "name": "Jane"}
    with patch(
        "core.services.user_service.UserService.get_user_by_id",
        return_value=profile,
    ) as mock:
        yield mock
