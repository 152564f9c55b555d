# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides access to the Supabase datastore.
# It implements the singleton pattern to reuse a single service-role client
# and exposes:
# - get_client(): shared service-role client for table queries
# - create_auth_client(): fresh anon-key client for Supabase Auth calls
# - connect_database(): startup connectivity check
#
# Auth calls get their own client because a successful sign-in rewrites the
# client's Authorization header with the user's token.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client = SupabaseClient.get_client()
#   client.table("transactions").select("*").eq("user_id", user_id).execute()
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings
from app.exceptions import DatabaseConnectionError

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Singleton holder for the Supabase client.

    All methods are class methods for easy access without instantiation.

    Example:
        client = SupabaseClient.get_client()
        rows = client.table("users").select("id").limit(1).execute().data
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Every query is therefore scoped by user_id in the service layer.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                ) from e
        return cls._instance

    @classmethod
    def create_auth_client(cls) -> Client:
        """Create a short-lived anon-key client for Supabase Auth operations."""
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used by tests and after connection failures)."""
        cls._instance = None


def connect_database() -> Client:
    """
    Establish the datastore connection and verify it with a trivial query.

    Called once during startup. There is no retry: a failure here aborts
    application startup.

    Returns:
        Client: The connected singleton client

    Raises:
        DatabaseConnectionError: If the client can't be created or the
            probe query fails
    """
    try:
        client = SupabaseClient.get_client()
        client.table("users").select("id").limit(1).execute()
    except Exception as e:
        SupabaseClient.reset()
        logger.error(f"Database connection failed: {e}")
        raise DatabaseConnectionError(str(e)) from e

    logger.info("Connected to Supabase database")
    return client
