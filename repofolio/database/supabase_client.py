from typing import Optional

from supabase import create_client, Client

from repofolio.config import Settings


class SupabaseClient:
    """Lazily created service-role client bound to the application settings.

    The service role bypasses RLS, so every query here must be scoped by the
    caller's identity in the service layer.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._client: Optional[Client] = None

    def get_client(self) -> Client:
        if self._client is None:
            self._client = create_client(
                self._settings.supabase_url, self._settings.supabase_service_role_key
            )
        return self._client

    def reset_client(self):
        self._client = None
