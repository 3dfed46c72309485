from urllib.parse import urlencode

from supabase import Client

from repofolio.config import Settings
from repofolio.core.errors import AuthenticationError
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Ask Supabase Auth who owns this access token. Nothing is cached; every request re-verifies."""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.info(f"Token verification rejected: {e}")
            raise AuthenticationError(str(e) or "Invalid or expired token")
        user = getattr(user_response, "user", None) if user_response else None
        if not user:
            raise AuthenticationError("Invalid or expired token")
        return {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
            "created_at": user.created_at,
            "updated_at": user.updated_at
        }


def build_login_url(settings: Settings) -> str:
    """Supabase authorize URL that starts the GitHub OAuth flow.

    Supabase redirects back to ``redirect_uri`` with the session and the
    GitHub provider token in the URL fragment, which only the browser sees;
    the client then posts the provider token to ``/auth/store-github-token``.
    """
    query = urlencode({
        "provider": "github",
        "redirect_to": settings.redirect_uri,
        "scopes": settings.github_oauth_scopes,
    })
    return f"{settings.supabase_url.rstrip('/')}/auth/v1/authorize?{query}"
