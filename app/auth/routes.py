# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# The only route group mounted without the bearer-token gate.
#
# Accounts live in Supabase Auth; these endpoints proxy sign-up, password
# login and token refresh, and keep public.users in sync.
# =============================================================================

import asyncio
import logging

from fastapi import APIRouter, status

from app.auth.models import (
    AuthTokenResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from app.exceptions import BadRequestException, UnauthorizedException
from core.services.user_service import UserService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(message: str, auth_response, profile: dict | None) -> AuthTokenResponse:
    session = auth_response.session
    user = auth_response.user
    return AuthTokenResponse(
        message=message,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user=UserResponse(**profile) if profile else UserResponse(id=user.id, email=user.email),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest) -> RegisterResponse:
    """
    Create an account.

    Returns:
        RegisterResponse: The new user's profile

    Raises:
        400: If Supabase Auth rejects the sign-up (e.g. email already used)
    """
    def _sign_up():
        client = SupabaseClient.create_auth_client()
        return client.auth.sign_up({
            "email": body.email,
            "password": body.password,
            "options": {"data": {"name": body.name}},
        })

    try:
        response = await asyncio.to_thread(_sign_up)
    except Exception as e:
        logger.warning(f"Sign-up failed for {body.email}: {e}")
        raise BadRequestException(f"Registration failed: {e}")

    if response.user is None:
        raise BadRequestException("Registration failed: no user returned")

    profile = await asyncio.to_thread(UserService.upsert_user, response.user.id, body.email, body.name)
    logger.info(f"Registered user: {response.user.id}")
    return RegisterResponse(message="User registered successfully", user=UserResponse(**profile))


@router.post("/login", response_model=AuthTokenResponse)
async def login(body: LoginRequest) -> AuthTokenResponse:
    """
    Exchange email and password for an access token.

    Raises:
        401: If the credentials are wrong
    """
    def _sign_in():
        client = SupabaseClient.create_auth_client()
        return client.auth.sign_in_with_password({
            "email": body.email,
            "password": body.password,
        })

    try:
        response = await asyncio.to_thread(_sign_in)
    except Exception as e:
        logger.warning(f"Login failed for {body.email}: {e}")
        raise UnauthorizedException("Invalid email or password")

    if response.session is None or response.user is None:
        raise UnauthorizedException("Invalid email or password")

    profile = await asyncio.to_thread(UserService.get_user_by_id, response.user.id)
    logger.info(f"User logged in: {response.user.id}")
    return _token_response("User logged in successfully", response, profile)


@router.post("/refresh-token", response_model=AuthTokenResponse)
async def refresh_token(body: RefreshTokenRequest) -> AuthTokenResponse:
    """
    Issue a new access token from a refresh token.

    Raises:
        401: If the refresh token is invalid or already used
    """
    def _refresh():
        client = SupabaseClient.create_auth_client()
        return client.auth.refresh_session(body.refresh_token)

    try:
        response = await asyncio.to_thread(_refresh)
    except Exception as e:
        logger.warning(f"Token refresh failed: {e}")
        raise UnauthorizedException("Invalid refresh token")

    if response.session is None or response.user is None:
        raise UnauthorizedException("Invalid refresh token")

    profile = await asyncio.to_thread(UserService.get_user_by_id, response.user.id)
    return _token_response("Token refreshed successfully", response, profile)
