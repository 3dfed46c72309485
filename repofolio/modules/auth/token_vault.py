from datetime import datetime, timezone

from supabase import Client

from repofolio.core.errors import GitHubNotLinkedError, UpstreamError
from repofolio.modules.auth.schemas import StoreTokenResponse
from repofolio.modules.github.client import GitHubClient
import logging

logger = logging.getLogger(__name__)


class TokenVault:
    """GitHub provider tokens, one ``user_tokens`` row per Supabase user."""

    TABLE = "user_tokens"

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get(self, user_id: str) -> str:
        try:
            result = self.supabase.table(self.TABLE)\
                .select("github_token")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise UpstreamError(str(e))
        row = result.data if result else None
        if not row or not row.get("github_token"):
            raise GitHubNotLinkedError()
        return row["github_token"]

    def store(self, user_id: str, token: str, github: GitHubClient) -> StoreTokenResponse:
        """Validate ``token`` against GitHub, then upsert it. A rejected token leaves the row untouched."""
        profile = github.get_authenticated_user()
        record = {
            "user_id": user_id,
            "github_token": token,
            "github_id": profile["id"],
            "username": profile.get("login"),
            "email": profile.get("email"),
            "avatar_url": profile.get("avatar_url"),
            "profile_url": profile.get("html_url"),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.supabase.table(self.TABLE)\
                .upsert(record, on_conflict="user_id")\
                .execute()
        except Exception as e:
            logger.error(f"Failed to store GitHub token for user {user_id}: {e}")
            raise UpstreamError(str(e))
        logger.info(f"Stored GitHub token for user {user_id} (github login {record['username']})")
        return StoreTokenResponse(
            message="GitHub token stored",
            github_id=record["github_id"],
            username=record["username"],
        )
