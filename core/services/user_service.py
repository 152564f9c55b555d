# =============================================================================
# core/services/user_service.py - User Profiles
# =============================================================================
# Reads and writes rows in public.users. Accounts themselves live in
# Supabase Auth; this table holds the profile the API exposes.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseQueryError, NotFoundException
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


class UserService:
    """Service for user profile operations."""

    @staticmethod
    def get_user_by_id(user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a user profile.

        Returns:
            The row, or None if no such user exists
        """
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table("users")
                .select("*")
                .eq("id", normalize_uuid(user_id))
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to fetch user {user_id}: {e}")
            raise DatabaseQueryError("get_user", str(e)) from e

        return response.data[0] if response.data else None

    @staticmethod
    def upsert_user(user_id: str | UUID, email: str, name: str | None = None) -> dict[str, Any]:
        """Create or refresh the profile row for a Supabase Auth account."""
        data = {"id": normalize_uuid(user_id), "email": email}
        if name is not None:
            data["name"] = name

        try:
            client = SupabaseClient.get_client()
            response = client.table("users").upsert(data).execute()
        except Exception as e:
            logger.error(f"Failed to upsert user {user_id}: {e}")
            raise DatabaseQueryError("upsert_user", str(e)) from e

        logger.info(f"Upserted profile for user: {user_id}")
        return response.data[0] if response.data else data

    @staticmethod
    def update_user(user_id: str | UUID, updates: dict[str, Any]) -> dict[str, Any]:
        """
        Update editable profile fields.

        Raises:
            NotFoundException: If the user doesn't exist
        """
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table("users")
                .update(updates)
                .eq("id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update user {user_id}: {e}")
            raise DatabaseQueryError("update_user", str(e)) from e

        if not response.data:
            raise NotFoundException("User", normalize_uuid(user_id))
        return response.data[0]
