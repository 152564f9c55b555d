# =============================================================================
# app/auth/dependencies.py - Bearer-Token Authentication Gate
# =============================================================================
# Provides the FastAPI dependency that guards every protected route group.
#
# A request passes only if:
# 1. It carries "Authorization: Bearer <token>"
# 2. The token signature verifies (HS256 secret, or ES256 via Supabase JWKS)
# 3. The token has not expired and has the expected audience
# 4. The "sub" claim is a UUID belonging to a row in public.users
#
# Otherwise UnauthorizedException (401) is raised and the feature handler
# never runs.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import asyncio
import logging
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import UnauthorizedException
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

# auto_error=False so a missing header produces our own 401 body
security = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys are better than none
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Get the verification key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification

    Raises:
        JWTError: If the header is unreadable or no matching key exists
    """
    unverified_header = jwt.get_unverified_header(token)
    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    raise JWTError(f"No signing key for alg={alg}, kid={kid}")


def decode_access_token(token: str) -> dict:
    """
    Verify a token and return its claims.

    Raises:
        UnauthorizedException: If the token is expired, badly signed or
            missing a usable "sub" claim
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=settings.JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise UnauthorizedException("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise UnauthorizedException("Invalid token")

    if not payload.get("sub"):
        logger.warning("JWT token missing 'sub' claim")
        raise UnauthorizedException("Invalid token: missing user ID")

    return payload


def _parse_user_id(sub: object) -> Optional[UUID]:
    """The "sub" claim as a UUID, or None if it is not a UUID string."""
    if not isinstance(sub, str):
        return None
    try:
        return UUID(sub)
    except ValueError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Resolve the authenticated user for a request.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        AuthUser: The authenticated user

    Raises:
        UnauthorizedException: 401 if the header is missing, the token is
            invalid or expired, or the user no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Missing bearer token")

    payload = decode_access_token(credentials.credentials)

    user_id = _parse_user_id(payload["sub"])
    if user_id is None:
        logger.warning(f"Invalid UUID in token: {payload['sub']!r}")
        raise UnauthorizedException("Invalid token: malformed user ID")

    user = await asyncio.to_thread(UserService.get_user_by_id, user_id)
    if user is None:
        logger.warning(f"Token for unknown user: {user_id}")
        raise UnauthorizedException("User not found")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_id, email=user.get("email") or payload.get("email"), name=user.get("name"))
