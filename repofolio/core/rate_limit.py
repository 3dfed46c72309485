from slowapi import Limiter
from slowapi.util import get_remote_address

from repofolio.config import Settings

limiter = Limiter(key_func=get_remote_address)

_auth_rate_limit = Settings.model_fields["auth_rate_limit"].default


def configure_rate_limits(settings: Settings) -> None:
    """Apply the configured limits; called once by create_app"""
    global _auth_rate_limit
    _auth_rate_limit = settings.auth_rate_limit


def auth_rate_limit() -> str:
    # Auth endpoints talk to Supabase and GitHub on every call
    return _auth_rate_limit
