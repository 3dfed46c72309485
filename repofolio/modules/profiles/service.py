from datetime import datetime, timezone

from supabase import Client

from repofolio.core.access import DEVELOPER_ROLE
from repofolio.core.errors import NotFoundError, UpstreamError
from repofolio.modules.profiles.schemas import ProfileResponse
from fastapi import HTTPException
from typing import Any, Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, username, full_name, role, avatar_url"


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Get profile by user ID, None when the user has none yet"""
        try:
            result = self.supabase.table("profiles")\
                .select(PROFILE_COLUMNS)\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise UpstreamError(str(e))
        row = result.data if result else None
        return ProfileResponse(**row) if row else None

    def get_or_create_profile(self, user: Dict[str, Any]) -> ProfileResponse:
        """Profile for a verified identity; first sight creates a developer profile."""
        profile = self.get_profile(user["id"])
        if profile:
            return profile

        metadata = user.get("user_metadata") or {}
        record = {
            "id": user["id"],
            "username": metadata.get("user_name") or metadata.get("preferred_username"),
            "full_name": metadata.get("full_name") or metadata.get("name"),
            "avatar_url": metadata.get("avatar_url"),
            "role": DEVELOPER_ROLE,
        }
        try:
            # ignore_duplicates keeps a concurrently created row (and its role) intact
            self.supabase.table("profiles")\
                .upsert(record, on_conflict="id", ignore_duplicates=True)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to create profile for user {user['id']}: {e}")
            raise UpstreamError(str(e))
        logger.info(f"Created developer profile for user {user['id']}")
        return self.get_profile(user["id"]) or ProfileResponse(**record)

    def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, ProfileResponse]:
        """Map user_id -> profile for the given ids"""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        try:
            result = self.supabase.table("profiles")\
                .select(PROFILE_COLUMNS)\
                .in_("id", ids)\
                .execute()
        except Exception as e:
            raise UpstreamError(str(e))
        return {row["id"]: ProfileResponse(**row) for row in result.data or []}

    def set_role(self, user_id: str, role: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .update({"role": role, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise NotFoundError("Profile not found")

            logger.info(f"User {user_id} role set to {role}")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise UpstreamError(str(e))
